"""Filesystem access for the symbol cache."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from . import console


class LocalStore:
    """Existence checks, directory creation and whole-file I/O.

    Errors are reported on the console and returned as ``False``/``None``
    so a failing root never aborts the lookup.
    """

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def create_directories(self, path: str) -> bool:
        """Create every missing parent directory of the file ``path``.

        Directories that already exist, including ones created concurrently
        by another process, are not an error.
        """
        parent = Path(path).parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            console.error(f"creating {parent} failed: {e}")
            return False
        return True

    def write_file(self, path: str, data: bytes) -> bool:
        try:
            with open(path, 'wb') as f:
                f.write(data)
        except OSError as e:
            console.error(f"writing {path} failed: {e}")
            return False
        return True

    def read_all(self, path: str) -> Optional[bytes]:
        try:
            with open(path, 'rb') as f:
                return f.read()
        except OSError as e:
            console.error(f"reading {path} failed: {e}")
            return None

    def remove(self, path: str) -> bool:
        try:
            os.unlink(path)
        except FileNotFoundError:
            return True
        except OSError as e:
            console.warn(f"removing {path} failed: {e}")
            return False
        return True
