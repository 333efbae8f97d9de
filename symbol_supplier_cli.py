#!/usr/bin/env python3
"""
Symbol Supplier - Command Line Entry Point

Resolve Breakpad symbol files for modules, PE images or whole minidumps.
"""

import sys
import json
import argparse
from pathlib import Path

from dotenv import load_dotenv

from symbol_supplier import (
    CodeModule,
    SimpleSymbolSupplier,
    SupplierConfig,
    SymbolResult,
    derive_symbol_paths,
    module_from_pe,
    modules_from_minidump,
)
from symbol_supplier import console

EXIT_CODES = {
    SymbolResult.FOUND: 0,
    SymbolResult.NOT_FOUND: 1,
    SymbolResult.INTERRUPT: 2,
}


def build_parser():
    parser = argparse.ArgumentParser(
        description='Symbol Supplier - cache-first Breakpad symbol resolution',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Resolve a module by its debug metadata
  %(prog)s resolve app.exe --debug-file app.pdb --debug-id 2D0F9CA3B5C34E2E8B1F4A5C6D7E8F901 -s ./symbols

  # Resolve the symbols for a PE image on disk
  %(prog)s resolve-pe C:\\Windows\\System32\\ntdll.dll -s ./symbols

  # Resolve every module listed in a minidump
  %(prog)s resolve-dump crash.dmp -s ./symbols -o results.json

  # Show where a module's symbols would be cached
  %(prog)s path app.exe --debug-id ABC123 -s /cache

Configuration is also read from the environment or a .env file:
  SYMBOL_SUPPLIER_PATHS, SYMBOL_SUPPLIER_SERVER, SYMBOL_SUPPLIER_DUMP_SYMS,
  SYMBOL_SUPPLIER_FETCH_TIMEOUT, SYMBOL_SUPPLIER_CONVERT_TIMEOUT,
  SYMBOL_SUPPLIER_MAX_RETRIES, SYMBOL_SUPPLIER_VERBOSE
        """
    )

    parser.add_argument(
        'command',
        choices=['resolve', 'resolve-pe', 'resolve-dump', 'path', 'test'],
        help='Command to execute'
    )

    parser.add_argument(
        'target',
        nargs='?',
        help='Code file (resolve, path), PE image (resolve-pe) or minidump (resolve-dump)'
    )

    parser.add_argument('--debug-file', default='', help='Debug (PDB) file name of the module')
    parser.add_argument('--debug-id', default='', help='Debug identifier of the module')
    parser.add_argument('--module-version', default='', help='Module version, used when there is no debug identifier')

    parser.add_argument(
        '--symbol-path',
        '-s',
        action='append',
        help='Search root (repeatable, tried in order)'
    )

    parser.add_argument('--server', help='Symbol server base URL')
    parser.add_argument('--dump-syms', help='Converter command (dump_syms)')
    parser.add_argument('--fetch-timeout', type=float, help='Download timeout in seconds (0 = none)')
    parser.add_argument('--convert-timeout', type=float, help='Conversion timeout in seconds (0 = none)')

    parser.add_argument(
        '--print-data',
        action='store_true',
        help='Print the symbol file contents of resolved modules'
    )

    parser.add_argument(
        '--output',
        '-o',
        help='Output file for results (JSON, default: console)'
    )

    parser.add_argument(
        '--verbose',
        '-v',
        action='store_true',
        help='Show download and conversion details'
    )
    return parser


def load_config(args) -> SupplierConfig:
    config = SupplierConfig.from_env()
    if args.symbol_path:
        config.paths = list(args.symbol_path)
    if args.server:
        config.server = args.server
    if args.dump_syms:
        config.dump_syms = args.dump_syms
    if args.fetch_timeout is not None:
        config.fetch_timeout = args.fetch_timeout if args.fetch_timeout > 0 else None
    if args.convert_timeout is not None:
        config.convert_timeout = args.convert_timeout if args.convert_timeout > 0 else None
    if args.verbose:
        config.verbose = True
    return config


def resolve_modules(supplier: SimpleSymbolSupplier, modules, print_data: bool = False):
    """Resolve each module and return (worst result, JSON-ready rows)."""
    rows = []
    worst = SymbolResult.FOUND
    for module in modules:
        if print_data:
            result, symbol_file, symbol_data = supplier.get_symbol_file_and_data(module)
        else:
            result, symbol_file = supplier.get_symbol_file(module)
            symbol_data = ""

        mark = "+" if result == SymbolResult.FOUND else "-"
        console.safe_print(f"{mark} {module.code_file}: {result.name} {symbol_file}")
        if symbol_data:
            console.safe_print(symbol_data)

        rows.append({
            'code_file': module.code_file,
            'debug_file': module.debug_file,
            'debug_identifier': module.debug_identifier,
            'version': module.version,
            'result': result.name,
            'symbol_file': symbol_file,
        })
        if EXIT_CODES[result] > EXIT_CODES[worst]:
            worst = result
    return worst, rows


def main(argv=None):
    # .env values fill in SYMBOL_SUPPLIER_* settings not already in the environment
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == 'test':
        print("Running test suite...")
        import pytest
        return pytest.main([str(Path(__file__).parent / 'tests'), '-v'])

    if not args.target:
        parser.error(f"{args.command} command requires a target argument")

    config = load_config(args)
    console.set_verbose(config.verbose)

    if not config.paths:
        parser.error("no search roots: pass --symbol-path or set SYMBOL_SUPPLIER_PATHS")

    if args.command in ('resolve', 'path'):
        modules = [CodeModule(
            code_file=args.target,
            debug_file=args.debug_file,
            debug_identifier=args.debug_id,
            version=args.module_version,
        )]
    elif args.command == 'resolve-pe':
        module = module_from_pe(args.target)
        if module is None:
            console.error(f"No CodeView debug record in {args.target}")
            return EXIT_CODES[SymbolResult.NOT_FOUND]
        modules = [module]
    else:
        modules = modules_from_minidump(args.target)
        print(f"Resolving symbols for {len(modules)} modules from {args.target}")

    if args.command == 'path':
        for root in config.paths:
            paths = derive_symbol_paths(modules[0], root)
            if paths is None:
                console.safe_print(f"- {root}: cannot derive a symbol path")
                continue
            console.safe_print(f"{paths.symbol_path}")
            console.safe_print(f"  fetch: {config.server.rstrip('/')}{paths.relative_native_path}")
        return 0

    with SimpleSymbolSupplier(config.paths, config=config) as supplier:
        worst, rows = resolve_modules(supplier, modules, print_data=args.print_data)
        if config.verbose:
            console.safe_print(f"Statistics: {supplier.stats}")

    if args.output:
        with open(args.output, 'w') as f:
            json.dump({'results': rows}, f, indent=2)
        print(f"\nResults saved to: {args.output}")

    return EXIT_CODES[worst]


if __name__ == '__main__':
    sys.exit(main())
