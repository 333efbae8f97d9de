"""Shared fixtures for symbol supplier tests."""
import os
import sys

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from symbol_supplier import console
from symbol_supplier.converter import SymbolConverter


class FakeFetcher:
    """Records requested URLs and answers with a canned payload."""

    def __init__(self, payload=b"MSF 7.00 fake pdb"):
        self.payload = payload
        self.urls = []
        self.closed = False

    def fetch(self, url):
        self.urls.append(url)
        return self.payload

    def close(self):
        self.closed = True


class FakeConverter(SymbolConverter):
    """Records conversions; writes ``output`` to the symbol path on success."""

    def __init__(self, succeed=True, output=b"MODULE windows x86_64 ABC123 app.pdb\n"):
        self.succeed = succeed
        self.output = output
        self.calls = []

    def convert(self, native_path, symbol_path):
        self.calls.append((native_path, symbol_path))
        if not self.succeed:
            return False
        with open(symbol_path, 'wb') as f:
            f.write(self.output)
        return True


@pytest.fixture(autouse=True)
def quiet_console():
    console.set_verbose(False)
    yield
    console.set_verbose(False)


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def converter():
    return FakeConverter()
