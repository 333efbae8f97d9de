"""Derivation of the on-disk cache layout for symbol files.

Layout: ``<root>/<debug file>/<debug identifier or version>/<stem>.sym``,
with the native ``.pdb`` staged next to it while it is being converted.
"""
from __future__ import annotations

from typing import Optional

from . import console
from .models import CodeModule, SymbolPaths

NATIVE_EXTENSION = ".pdb"
SYMBOL_EXTENSION = ".sym"


def strip_pathname(path: str) -> str:
    """Return the last component of a path using either separator."""
    if not path:
        return ""
    return path.replace('\\', '/').rsplit('/', 1)[-1]


def debug_file_name(module: CodeModule) -> str:
    """Debug file base name for a module, or "" if it cannot be derived.

    Dumps without a debug file get one synthesized from the code file by
    replacing its last three characters with ``pdb`` (``app.exe`` becomes
    ``app.pdb``). The code file's extension is not checked.
    """
    name = strip_pathname(module.debug_file)
    if name:
        return name

    code_file = strip_pathname(module.code_file)
    if len(code_file) > 3:
        name = code_file[:-3] + "pdb"
        console.log(f"Assuming debug_file = {name}")
        return name

    console.warn(f"Can't construct symbol file path without debug_file (code_file = {code_file})")
    return ""


def derive_symbol_paths(module: CodeModule, root: str) -> Optional[SymbolPaths]:
    """Build the symbol and native paths for ``module`` under ``root``.

    Returns None when no debug file name can be determined.
    """
    name = debug_file_name(module)
    if not name:
        return None

    path = f"{root}/{name}"

    identifier = module.debug_identifier or module.version
    if identifier:
        path = f"{path}/{identifier}"

    stem = name
    if len(name) > 4 and name[-4:].lower() == NATIVE_EXTENSION:
        stem = name[:-4]
    path = f"{path}/{stem}"

    return SymbolPaths(
        root=root,
        symbol_path=path + SYMBOL_EXTENSION,
        native_path=path + NATIVE_EXTENSION,
    )
