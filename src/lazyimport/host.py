"""Host backends — the import-system surface the interceptor hooks into.

A host exposes three things:

- ``load(request, parent=None, is_main=False)``: the active resolution hook.
  The interceptor swaps this attribute to install itself and restores the
  previous value to uninstall.
- ``resolve_filename(request, parent=None, is_main=False)``: the canonical
  path used as a cache key; never changes what gets imported.
- ``builtin_names()``: names of platform modules that are never deferred.

:class:`ImportHost` binds these onto CPython's import system: the hook is
``builtins.__import__``, requests are module names with relative imports
spelled with leading dots, and canonical paths are module origin files.
"""

import builtins
import importlib.util
import logging
import os
import runpy
import sys
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

LoadFunction = Callable[..., Any]


class HostLoader:
    """Interface of an injectable import backend."""

    load: LoadFunction

    def resolve_filename(self, request: str, parent: Any = None, is_main: bool = False) -> str:
        raise NotImplementedError

    def builtin_names(self) -> Iterable[str]:
        raise NotImplementedError


def _package_of(parent: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Package a relative import is resolved against, from importer globals."""
    if not parent:
        return None
    package = parent.get("__package__")
    if package is not None:
        return package
    name = parent.get("__name__", "")
    return name if "__path__" in parent else name.rpartition(".")[0]


class ImportHost(HostLoader):
    """Host backed by ``builtins.__import__``.

    Assigning a hook to :attr:`load` installs a shim as ``builtins.__import__``
    that routes plain ``import x`` statements through the hook; assigning the
    host's own real loader back restores whatever ``__import__`` was in place
    before.

    ``from x import y`` statements bypass the hook: the imported names are
    read straight away, so deferring the module would gain nothing.
    """

    def __init__(self) -> None:
        self._saved_import = builtins.__import__
        # Bound once so identity comparisons against them hold.
        self._real = self._real_load
        self._shim = self._import
        self._active: LoadFunction = self._real

    @property
    def load(self) -> LoadFunction:
        return self._active

    @load.setter
    def load(self, hook: LoadFunction) -> None:
        if hook is self._real:
            if builtins.__import__ is self._shim:
                builtins.__import__ = self._saved_import
        elif builtins.__import__ is not self._shim:
            self._saved_import = builtins.__import__
            builtins.__import__ = self._shim
        self._active = hook

    # ── Hook plumbing ──

    def _import(self, name, globals=None, locals=None, fromlist=(), level=0):
        if fromlist:
            return self._saved_import(name, globals, locals, fromlist, level)
        return self._active("." * level + name, globals, False)

    def _real_load(self, request: str, parent: Any = None, is_main: bool = False) -> Any:
        if is_main:
            return runpy.run_path(request, run_name="__main__")
        name = request.lstrip(".")
        level = len(request) - len(name)
        return self._saved_import(name, parent, None, (), level)

    # ── Host surface ──

    def resolve_filename(self, request: str, parent: Any = None, is_main: bool = False) -> str:
        """Canonical path of a request: its origin file, else its full name.

        Raises:
            ModuleNotFoundError: If the request cannot be found.
        """
        if is_main:
            return os.path.abspath(request)
        name = request
        if request.startswith("."):
            name = importlib.util.resolve_name(request, _package_of(parent))
        module = sys.modules.get(name)
        if module is not None:
            return getattr(module, "__file__", None) or name
        spec = importlib.util.find_spec(name)
        if spec is None:
            raise ModuleNotFoundError(f"No module named {name!r}", name=name)
        if spec.has_location and spec.origin:
            return spec.origin
        return name

    def builtin_names(self) -> list[str]:
        names = set(sys.builtin_module_names) | set(sys.stdlib_module_names)
        return sorted(names)

    def run_main(self, path: str | Path, argv: Sequence[str] = ()) -> Any:
        """Run ``path`` as ``__main__`` through the active hook.

        Mirrors ``python path argv...``: the script's directory leads
        ``sys.path`` and ``sys.argv`` is replaced for the duration of the run.
        """
        script = os.path.abspath(path)
        saved_argv = sys.argv[:]
        sys.argv = [script, *argv]
        sys.path.insert(0, os.path.dirname(script))
        logger.info("Running %s", script)
        try:
            return self._active(script, None, True)
        finally:
            sys.argv = saved_argv
            try:
                sys.path.remove(os.path.dirname(script))
            except ValueError:
                pass
