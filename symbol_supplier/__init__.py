"""Symbol supplier package.

Cache-first resolution of Breakpad symbol files for crash-dump stack walking:
- Canonical cache layout derived from module debug metadata
- Download of native PDB files from a Microsoft-compatible symbol server
- Conversion to textual .sym files through dump_syms
- Caller-owned in-memory copies of symbol data
"""
from .models import (
    CodeModule,
    SymbolPaths,
    SymbolResult,
)
from .config import SupplierConfig
from .path_builder import derive_symbol_paths, strip_pathname
from .local_store import LocalStore
from .remote_fetcher import RemoteFetcher, SYMBOL_SERVER_USER_AGENT
from .converter import SymbolConverter, DumpSymsConverter
from .buffers import OwnedBuffer, BufferRegistry
from .resolver import SimpleSymbolSupplier
from .module_source import (
    format_debug_identifier,
    module_from_pe,
    modules_from_minidump,
    HAS_MINIDUMP,
)

__all__ = [
    # Data model
    "CodeModule",
    "SymbolPaths",
    "SymbolResult",
    "SupplierConfig",
    # Components
    "derive_symbol_paths",
    "strip_pathname",
    "LocalStore",
    "RemoteFetcher",
    "SYMBOL_SERVER_USER_AGENT",
    "SymbolConverter",
    "DumpSymsConverter",
    "OwnedBuffer",
    "BufferRegistry",
    "SimpleSymbolSupplier",
    # Module sources
    "format_debug_identifier",
    "module_from_pe",
    "modules_from_minidump",
    "HAS_MINIDUMP",
]

__version__ = "1.0.0"
