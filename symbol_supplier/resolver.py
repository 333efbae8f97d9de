"""Cache-first symbol supplier.

Looks for ``<root>/<debug file>/<identifier>/<stem>.sym`` under each search
root in order. On a miss, the native ``.pdb`` is downloaded from the
symbol server into the same cache location, converted to a ``.sym`` file
and then served from disk like any cached symbol file.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from . import console
from .buffers import BufferRegistry, OwnedBuffer
from .config import SupplierConfig
from .converter import DumpSymsConverter, SymbolConverter
from .local_store import LocalStore
from .models import CodeModule, SymbolResult
from .path_builder import derive_symbol_paths
from .remote_fetcher import RemoteFetcher


class SimpleSymbolSupplier:
    """
    Symbol supplier over an ordered list of local search roots.

    The first root that yields a symbol file wins; roots are never
    reordered. Fetch, write and conversion failures are reported on the
    console and count as NOT_FOUND for that root.
    """

    def __init__(self, paths: Sequence[str],
                 fetcher: Optional[RemoteFetcher] = None,
                 converter: Optional[SymbolConverter] = None,
                 store: Optional[LocalStore] = None,
                 config: Optional[SupplierConfig] = None):
        """
        Initialize the symbol supplier.

        Args:
            paths: Search roots, tried in the given order.
            fetcher: Downloader for native debug files. Built from config if omitted.
            converter: Native-to-symbol converter. Built from config if omitted.
            store: Filesystem access. Defaults to :class:`LocalStore`.
            config: Server URL, tool command and timeouts.
        """
        self.paths: List[str] = list(paths)
        self.config = config or SupplierConfig()
        if self.config.verbose:
            console.set_verbose(True)
        self.fetcher = fetcher or RemoteFetcher(
            timeout=self.config.fetch_timeout,
            max_retries=self.config.max_retries,
        )
        self.converter = converter or DumpSymsConverter(
            command=self.config.dump_syms,
            use_wine=self.config.use_wine,
            timeout=self.config.convert_timeout,
        )
        self.store = store or LocalStore()
        self.buffers = BufferRegistry()

        # Statistics
        self.stats: Dict[str, int] = {
            'symbols_cached': 0,
            'symbols_downloaded': 0,
            'symbols_converted': 0,
            'symbols_failed': 0,
        }

    def get_symbol_file(self, module: Optional[CodeModule]) -> Tuple[SymbolResult, str]:
        """Resolve the symbol file for ``module`` across all search roots."""
        if module is None:
            console.warn("get_symbol_file requires a module")
            return SymbolResult.NOT_FOUND, ""

        for root in self.paths:
            result, symbol_file = self.get_symbol_file_at_root(module, root)
            if result != SymbolResult.NOT_FOUND:
                return result, symbol_file
        return SymbolResult.NOT_FOUND, ""

    def get_symbol_file_at_root(self, module: CodeModule, root: str) -> Tuple[SymbolResult, str]:
        """Resolve ``module`` under a single root, fetching on a cache miss."""
        paths = derive_symbol_paths(module, root)
        if paths is None:
            return SymbolResult.NOT_FOUND, ""

        if self.store.exists(paths.symbol_path):
            self.stats['symbols_cached'] += 1
            console.log(f"Cache hit: {paths.symbol_path}")
            return SymbolResult.FOUND, paths.symbol_path

        self._fetch_and_convert(paths)

        if not self.store.exists(paths.symbol_path):
            self.stats['symbols_failed'] += 1
            console.log(f"No symbol file at {paths.symbol_path}")
            return SymbolResult.NOT_FOUND, ""

        return SymbolResult.FOUND, paths.symbol_path

    def _fetch_and_convert(self, paths) -> bool:
        """Cache-miss pipeline: download, stage, convert, drop the native file.

        A failed conversion leaves the native file in the cache directory.
        """
        url = self.config.server.rstrip('/') + paths.relative_native_path
        data = self.fetcher.fetch(url)
        if data is None:
            return False
        self.stats['symbols_downloaded'] += 1

        if not self.store.create_directories(paths.native_path):
            return False
        if not self.store.write_file(paths.native_path, data):
            return False

        if not self.converter.convert(paths.native_path, paths.symbol_path):
            console.log(f"Keeping {paths.native_path} after failed conversion")
            return False

        self.stats['symbols_converted'] += 1
        console.log(f"Converted: {paths.symbol_path}")
        self.store.remove(paths.native_path)
        return True

    def _get_symbol_file_and_bytes(self, module: Optional[CodeModule]) -> Tuple[SymbolResult, str, bytes]:
        """Resolve ``module`` and read the symbol file's bytes unchanged."""
        result, symbol_file = self.get_symbol_file(module)
        if result != SymbolResult.FOUND:
            return result, symbol_file, b""

        try:
            data = self.store.read_all(symbol_file)
        except MemoryError:
            console.error(f"Memory allocation failed reading {symbol_file}")
            return SymbolResult.INTERRUPT, symbol_file, b""
        if data is None:
            return SymbolResult.INTERRUPT, symbol_file, b""
        return result, symbol_file, data

    def get_symbol_file_and_data(self, module: Optional[CodeModule]) -> Tuple[SymbolResult, str, str]:
        """Resolve ``module`` and read the whole symbol file as text."""
        result, symbol_file, data = self._get_symbol_file_and_bytes(module)
        if result != SymbolResult.FOUND:
            return result, symbol_file, ""
        return result, symbol_file, data.decode('utf-8', errors='replace')

    def get_owned_buffer(self, module: Optional[CodeModule]) -> Tuple[SymbolResult, str, Optional[OwnedBuffer]]:
        """
        Resolve ``module`` and hand out an independent copy of its symbol data.

        The buffer holds the file's bytes exactly as stored. It is registered
        under ``module.code_file`` so it can later be released with
        :meth:`release_buffer`; it may also be released directly or used as
        a context manager.

        Returns:
            (result, symbol file path, buffer or None). ``buffer.size`` is
            the content length plus one for the terminator.
        """
        result, symbol_file, data = self._get_symbol_file_and_bytes(module)
        if result != SymbolResult.FOUND:
            return result, symbol_file, None

        try:
            buffer = OwnedBuffer(data)
        except MemoryError:
            console.error(f"Memory allocation for size {len(data) + 1} failed")
            return SymbolResult.INTERRUPT, symbol_file, None

        self.buffers.register(module.code_file, buffer)
        return result, symbol_file, buffer

    def release_buffer(self, module: Optional[CodeModule]) -> bool:
        """Release the buffer issued for ``module``; a no-op if there is none."""
        if module is None:
            console.log("Cannot free symbol data buffer for NULL module")
            return False
        return self.buffers.release(module.code_file)

    def close(self):
        close = getattr(self.fetcher, 'close', None)
        if close is not None:
            close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
