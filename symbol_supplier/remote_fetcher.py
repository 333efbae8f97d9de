"""HTTP download of native debug files from a symbol server."""
from __future__ import annotations

from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from . import console
from .config import normalize_timeout

# Symbol servers answer with the native file only for this client signature
SYMBOL_SERVER_USER_AGENT = "Microsoft-Symbol-Server/6.2.9200.16384"


class RemoteFetcher:
    """Blocking GET with redirects, returning the whole body or None."""

    def __init__(self, timeout: Optional[float] = None, max_retries: int = 0,
                 session: Optional[requests.Session] = None):
        self.timeout = normalize_timeout(timeout)
        self.max_retries = max_retries
        self._session = session

    def _get_session(self) -> requests.Session:
        """Get or create HTTP session with retry configuration."""
        if self._session is None:
            self._session = requests.Session()
            retry_strategy = Retry(
                total=self.max_retries,
                backoff_factor=0.5,
                status_forcelist=[429, 500, 502, 503, 504],
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            self._session.mount("http://", adapter)
            self._session.mount("https://", adapter)
        self._session.headers.update({'User-Agent': SYMBOL_SERVER_USER_AGENT})
        return self._session

    def fetch(self, url: str) -> Optional[bytes]:
        """Download ``url``.

        Returns None on any transport error or non-2xx status. An empty
        successful body is returned as ``b""``.
        """
        session = self._get_session()
        try:
            response = session.get(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            console.error(f"Download failed: {url}: {type(e).__name__}: {e}")
            return None

        if not response.ok:
            console.warn(f"Download failed: {url} -> HTTP {response.status_code}")
            return None

        data = response.content or b""
        console.log(f"Downloaded: {url} ({len(data)} bytes)")
        return data

    def close(self):
        if self._session is not None:
            self._session.close()
            self._session = None
