"""Shared test fixtures for lazyimport tests."""

import sys
import types
from collections import Counter
from pathlib import Path

import pytest

# Add src to path so tests can import lazyimport
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from lazyimport.host import HostLoader  # noqa: E402
from lazyimport.typecache import TypeCache  # noqa: E402


class FakeHost(HostLoader):
    """In-memory module system with the host's loading semantics.

    Modules are registered with :meth:`define` as ``factory(require, exports)``
    where ``exports`` is an empty module the factory may fill in, and the
    return value (if not ``None``) replaces it.  While a module's factory
    runs, requiring it again returns the partially filled ``exports``, the way
    a circular import sees a half-initialized module.
    """

    def __init__(self, builtins=("os", "sys", "json", "_thread")):
        self._builtins = tuple(builtins)
        self.factories = {}
        self.exports = {}
        self.loading = {}
        self.loads = Counter()
        self.load = self.real_load

    def define(self, name, factory=None):
        self.factories[name] = factory or (lambda require, exports: None)

    def require(self, name):
        """Import from inside a module, through whatever hook is active."""
        return self.load(name, None, False)

    def resolve_filename(self, request, parent=None, is_main=False):
        if request not in self.factories:
            raise ModuleNotFoundError(f"No module named {request!r}", name=request)
        return f"/fake/{request}.py"

    def builtin_names(self):
        return self._builtins

    def real_load(self, request, parent=None, is_main=False):
        path = self.resolve_filename(request, parent, is_main)
        if path in self.exports:
            return self.exports[path]
        if path in self.loading:
            return self.loading[path]
        stub = types.ModuleType(request)
        self.loading[path] = stub
        self.loads[request] += 1
        try:
            result = self.factories[request](self.require, stub)
        finally:
            del self.loading[path]
        value = stub if result is None else result
        self.exports[path] = value
        return value


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def type_cache():
    return TypeCache()
