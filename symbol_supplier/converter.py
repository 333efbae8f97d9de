"""Conversion of native debug files into textual symbol files.

The supplier only depends on :class:`SymbolConverter`; the default
implementation shells out to Breakpad's ``dump_syms``.
"""
from __future__ import annotations

import os
import shlex
import subprocess
from typing import List, Optional, Union

from . import console
from .config import normalize_timeout


class SymbolConverter:
    """Writes a ``.sym`` file for a native debug file."""

    def convert(self, native_path: str, symbol_path: str) -> bool:
        raise NotImplementedError


class DumpSymsConverter(SymbolConverter):
    """Runs ``dump_syms <native file>`` and captures stdout as the symbol file.

    Only the exit status decides success. A failed, timed out or
    unlaunchable conversion leaves no symbol file behind.
    """

    def __init__(self, command: Union[str, List[str]] = "dump_syms", use_wine: bool = False,
                 timeout: Optional[float] = None):
        self.command = command
        self.use_wine = use_wine
        self.timeout = normalize_timeout(timeout)

    def build_command(self, native_path: str) -> List[str]:
        if isinstance(self.command, (list, tuple)):
            argv = list(self.command)
        else:
            argv = shlex.split(self.command, posix=os.name != 'nt')
        if self.use_wine:
            argv.insert(0, "wine")
        return argv + [native_path]

    def convert(self, native_path: str, symbol_path: str) -> bool:
        argv = self.build_command(native_path)
        console.log(f"Converting: {' '.join(argv)} > {symbol_path}")

        try:
            with open(symbol_path, 'wb') as out:
                # CREATE_NO_WINDOW flag prevents console window from appearing
                result = subprocess.run(
                    argv,
                    stdout=out,
                    stderr=subprocess.PIPE,
                    timeout=self.timeout,
                    creationflags=subprocess.CREATE_NO_WINDOW if hasattr(subprocess, 'CREATE_NO_WINDOW') else 0
                )
        except subprocess.TimeoutExpired:
            console.error(f"Convert timed out after {self.timeout}s: {symbol_path}")
            self._discard(symbol_path)
            return False
        except (OSError, subprocess.SubprocessError) as e:
            console.error(f"Convert fail: {symbol_path}: {e}")
            self._discard(symbol_path)
            return False

        if result.returncode != 0:
            stderr = (result.stderr or b"").decode('utf-8', errors='replace').strip()
            console.error(f"Convert fail: {symbol_path} (exit {result.returncode}) {stderr[:200]}")
            self._discard(symbol_path)
            return False

        console.log(f"Converted: {symbol_path}")
        return True

    @staticmethod
    def _discard(path: str):
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            console.warn(f"Could not remove partial symbol file {path}: {e}")
