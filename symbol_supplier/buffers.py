"""Caller-owned copies of symbol data.

A stack walker that wants the symbol text in memory receives an
:class:`OwnedBuffer`. The caller either releases it directly (or lets a
``with`` block do it) or asks the supplier to release the buffer it
issued for a module.
"""
from __future__ import annotations

import threading
from typing import Dict, Optional

from . import console


class OwnedBuffer:
    """NUL-terminated copy of a symbol file's contents."""

    def __init__(self, content: bytes):
        storage = bytearray(len(content) + 1)
        storage[:len(content)] = content
        self._storage: Optional[bytearray] = storage

    @property
    def released(self) -> bool:
        return self._storage is None

    @property
    def size(self) -> int:
        """Content length plus the terminator; 0 once released."""
        return len(self._storage) if self._storage is not None else 0

    @property
    def data(self) -> bytes:
        """Contents without the terminator."""
        if self._storage is None:
            raise ValueError("symbol buffer has been released")
        return bytes(self._storage[:-1])

    @property
    def raw(self) -> bytes:
        """Contents including the terminator."""
        if self._storage is None:
            raise ValueError("symbol buffer has been released")
        return bytes(self._storage)

    def release(self):
        self._storage = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()

    def __repr__(self):
        return f"OwnedBuffer(size={self.size}, released={self.released})"


class BufferRegistry:
    """Buffers issued to callers, keyed by the module's code file.

    Holds at most one live buffer per module: registering again releases
    the previous buffer first.
    """

    def __init__(self):
        self._buffers: Dict[str, OwnedBuffer] = {}
        self._lock = threading.Lock()

    def register(self, code_file: str, buffer: OwnedBuffer):
        with self._lock:
            previous = self._buffers.get(code_file)
            if previous is not None and previous is not buffer:
                console.log(f"Replacing symbol data buffer for module {code_file}")
                previous.release()
            self._buffers[code_file] = buffer

    def release(self, code_file: str) -> bool:
        """Release the buffer issued for ``code_file``; False if there is none."""
        with self._lock:
            buffer = self._buffers.pop(code_file, None)
        if buffer is None:
            console.log(f"Cannot find symbol data buffer for module {code_file}")
            return False
        buffer.release()
        return True

    def get(self, code_file: str) -> Optional[OwnedBuffer]:
        with self._lock:
            return self._buffers.get(code_file)

    def __contains__(self, code_file: str) -> bool:
        with self._lock:
            return code_file in self._buffers

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffers)
