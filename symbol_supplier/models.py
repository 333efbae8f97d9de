"""Data types shared by the symbol supplier components."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SymbolResult(Enum):
    """Outcome of a symbol lookup, as reported to the stack walker."""
    FOUND = "found"
    NOT_FOUND = "not_found"
    # Local resource fault (e.g. allocation failure), not simple absence
    INTERRUPT = "interrupt"


@dataclass(frozen=True)
class CodeModule:
    """Identity of a loaded binary that needs symbolication."""
    code_file: str
    debug_file: str = ""
    debug_identifier: str = ""
    version: str = ""


@dataclass(frozen=True)
class SymbolPaths:
    """Cache locations derived for one module under one search root."""
    root: str
    symbol_path: str  # <root>/<debug file>/<id or version>/<stem>.sym
    native_path: str  # same directory, <stem>.pdb; only exists during a fetch

    @property
    def relative_native_path(self) -> str:
        """Native path below the root, as appended to the symbol server URL."""
        return self.native_path[len(self.root):]
