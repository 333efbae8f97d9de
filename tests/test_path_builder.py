"""Tests for cache path derivation."""
from unittest.mock import patch

from symbol_supplier.models import CodeModule
from symbol_supplier.path_builder import (
    debug_file_name,
    derive_symbol_paths,
    strip_pathname,
)


def test_synthesized_debug_file_scenario():
    """app.exe without debug file resolves to app.pdb under its identifier."""
    module = CodeModule(code_file="app.exe", debug_identifier="ABC123")
    paths = derive_symbol_paths(module, "/cache")

    assert paths.symbol_path == "/cache/app.pdb/ABC123/app.sym"
    assert paths.native_path == "/cache/app.pdb/ABC123/app.pdb"
    assert paths.relative_native_path == "/app.pdb/ABC123/app.pdb"


def test_explicit_debug_file_with_directories():
    module = CodeModule(
        code_file=r"C:\Program Files\App\app.exe",
        debug_file=r"D:\build\out\release\app_core.pdb",
        debug_identifier="2D0F9CA3B5C34E2E8B1F4A5C6D7E8F901",
    )
    paths = derive_symbol_paths(module, "/symbols")
    assert paths.symbol_path == "/symbols/app_core.pdb/2D0F9CA3B5C34E2E8B1F4A5C6D7E8F901/app_core.sym"


def test_code_file_path_is_stripped_before_synthesis():
    module = CodeModule(code_file="/usr/lib/libfoo.dll", debug_identifier="X1")
    assert derive_symbol_paths(module, "/r").symbol_path == "/r/libfoo.pdb/X1/libfoo.sym"


def test_version_used_without_identifier():
    module = CodeModule(code_file="app.exe", debug_file="app.pdb", version="1.2.3.4")
    paths = derive_symbol_paths(module, "/cache")
    assert paths.symbol_path == "/cache/app.pdb/1.2.3.4/app.sym"


def test_identifier_preferred_over_version():
    module = CodeModule(code_file="app.exe", debug_file="app.pdb",
                        debug_identifier="ABC123", version="1.2.3.4")
    assert derive_symbol_paths(module, "/c").symbol_path == "/c/app.pdb/ABC123/app.sym"


def test_no_identifier_or_version_omits_segment():
    module = CodeModule(code_file="app.exe", debug_file="app.pdb")
    paths = derive_symbol_paths(module, "/cache")
    assert paths.symbol_path == "/cache/app.pdb/app.sym"
    assert paths.relative_native_path == "/app.pdb/app.pdb"


def test_pdb_extension_is_case_insensitive():
    module = CodeModule(code_file="APP.EXE", debug_file="APP.PDB", debug_identifier="ID")
    paths = derive_symbol_paths(module, "/c")
    assert paths.symbol_path == "/c/APP.PDB/ID/APP.sym"
    assert paths.native_path == "/c/APP.PDB/ID/APP.pdb"


def test_non_pdb_debug_file_keeps_full_name():
    module = CodeModule(code_file="libc.so.6", debug_file="libc.so.6", debug_identifier="ID")
    paths = derive_symbol_paths(module, "/c")
    assert paths.symbol_path == "/c/libc.so.6/ID/libc.so.6.sym"
    assert paths.native_path == "/c/libc.so.6/ID/libc.so.6.pdb"


def test_bare_pdb_extension_name_is_not_stripped():
    module = CodeModule(code_file="app.exe", debug_file=".pdb", debug_identifier="ID")
    assert derive_symbol_paths(module, "/c").symbol_path == "/c/.pdb/ID/.pdb.sym"


def test_short_code_file_without_debug_file_fails():
    for code_file in ("", "a", "ab", "exe", r"C:\dir\abc"):
        module = CodeModule(code_file=code_file, debug_identifier="ID")
        assert derive_symbol_paths(module, "/cache") is None


def test_four_character_code_file_is_accepted():
    module = CodeModule(code_file="a.so", debug_identifier="ID")
    assert debug_file_name(module) == "apdb"


def test_extension_heuristic_not_validated():
    """The last three characters are replaced whatever they are."""
    module = CodeModule(code_file="module.so", debug_identifier="ID")
    assert debug_file_name(module) == "module.pdb"


def test_explicit_debug_file_skips_heuristic():
    module = CodeModule(code_file="ab", debug_file="real.pdb", debug_identifier="ID")
    with patch("symbol_supplier.path_builder.console.log") as log:
        paths = derive_symbol_paths(module, "/c")
    assert paths.symbol_path == "/c/real.pdb/ID/real.sym"
    log.assert_not_called()


def test_strip_pathname():
    assert strip_pathname("") == ""
    assert strip_pathname("app.pdb") == "app.pdb"
    assert strip_pathname("/a/b/app.pdb") == "app.pdb"
    assert strip_pathname(r"C:\a\b\app.pdb") == "app.pdb"
    assert strip_pathname("C:/a\\b/app.pdb") == "app.pdb"
