"""Symbol supplier configuration.

Values come from environment variables (optionally loaded from a ``.env``
file by the CLI) and can be overridden per field by the caller.
"""
from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import List, Optional

from . import console


@dataclass
class SupplierConfig:
    """Settings for search roots, symbol server and external tools."""

    # Microsoft public symbol server; native path is appended verbatim
    DEFAULT_SERVER = "http://msdl.microsoft.com/download/symbols"
    DEFAULT_DUMP_SYMS = "dump_syms"
    DEFAULT_FETCH_TIMEOUT = 60.0
    DEFAULT_CONVERT_TIMEOUT = 300.0

    paths: List[str] = field(default_factory=list)
    server: str = DEFAULT_SERVER
    dump_syms: str = DEFAULT_DUMP_SYMS
    # Seconds; None means wait indefinitely
    fetch_timeout: Optional[float] = DEFAULT_FETCH_TIMEOUT
    convert_timeout: Optional[float] = DEFAULT_CONVERT_TIMEOUT
    max_retries: int = 0
    verbose: bool = False

    def __post_init__(self):
        self.fetch_timeout = normalize_timeout(self.fetch_timeout)
        self.convert_timeout = normalize_timeout(self.convert_timeout)

    @property
    def use_wine(self) -> bool:
        """Windows dump_syms.exe has to run under wine on other hosts."""
        return sys.platform != 'win32' and self.dump_syms.lower().endswith('.exe')

    @classmethod
    def from_env(cls, environ=None) -> 'SupplierConfig':
        env = os.environ if environ is None else environ

        paths = [p for p in env.get("SYMBOL_SUPPLIER_PATHS", "").split(os.pathsep) if p]
        return cls(
            paths=paths,
            server=env.get("SYMBOL_SUPPLIER_SERVER") or cls.DEFAULT_SERVER,
            dump_syms=env.get("SYMBOL_SUPPLIER_DUMP_SYMS") or cls.DEFAULT_DUMP_SYMS,
            fetch_timeout=_timeout(env, "SYMBOL_SUPPLIER_FETCH_TIMEOUT", cls.DEFAULT_FETCH_TIMEOUT),
            convert_timeout=_timeout(env, "SYMBOL_SUPPLIER_CONVERT_TIMEOUT", cls.DEFAULT_CONVERT_TIMEOUT),
            max_retries=int(_number(env, "SYMBOL_SUPPLIER_MAX_RETRIES", 0)),
            verbose=env.get("SYMBOL_SUPPLIER_VERBOSE", "").strip().lower() in ("1", "true", "yes", "on"),
        )


def normalize_timeout(value: Optional[float]) -> Optional[float]:
    """Zero or negative timeouts disable the limit."""
    if value is None or value <= 0:
        return None
    return float(value)


def _number(env, name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        console.warn(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


def _timeout(env, name: str, default: float) -> Optional[float]:
    return normalize_timeout(_number(env, name, default))
