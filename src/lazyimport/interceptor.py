"""Lazy Importer — the resolution hook that defers module loading.

Installed as the host's ``load`` hook, it decides for every import request
whether to import now or to hand back a :class:`DeferredHandle` that imports
on first use.  Deferral is only ever chosen for a module whose previous
classification (held in the :class:`TypeCache`) says a handle can stand in
for it faithfully.

Decision order for ``(request, parent, is_main)``:

  1. The entry point is always loaded.
  2. Anything imported while an excluded module loads is loaded.
  3. Dotted and relative requests are loaded when ``package_only`` is set.
  4. Excluded requests are loaded, suppressing deferral for their subtree.
  5. The request is resolved to a canonical path.
  6. A path already produced this session is returned from the module cache.
  7. A path with a proxiable classification gets a deferred handle.
  8. Anything else is loaded, classified and cached.

Only one importer should be installed on a host at a time.
"""

import logging
from typing import Any, Iterable, Optional

from lazyimport.config import LazyImportConfig, load_config
from lazyimport.deferred import CallableDeferredHandle, DeferredHandle
from lazyimport.exclusions import ExclusionMatcher
from lazyimport.host import HostLoader, ImportHost, LoadFunction
from lazyimport.typecache import Classification, TypeCache, classify

logger = logging.getLogger(__name__)


def _is_circular_stub(value: Any) -> bool:
    """Whether ``value`` may be a module caught halfway through a circular import.

    An empty namespace looks the same whether the module legitimately exports
    nothing or is still initializing, so neither is worth recording.  Real
    modules also say so directly through ``__spec__._initializing``.
    """
    if classify(value) is not Classification.PLAIN_OBJECT:
        return False
    if getattr(getattr(value, "__spec__", None), "_initializing", False):
        return True
    names = getattr(value, "__dict__", {})
    return not any(not name.startswith("__") for name in names)


class LazyImporter:
    """Installs and runs the lazy resolution hook on a host.

    Usage::

        importer = LazyImporter(exclusions=["numpy"])
        importer.enable()
        import widgets          # handle if widgets was seen as a function before
        importer.disable()

    Args:
        type_cache: Classification records; a fresh cache by default.
        exclusions: Regular expressions for requests never to defer.
        package_only: Only defer bare top-level package names.
        host: Import backend; :class:`ImportHost` by default.
    """

    def __init__(
        self,
        type_cache: Optional[TypeCache] = None,
        exclusions: Iterable[str] = (),
        package_only: bool = True,
        host: Optional[HostLoader] = None,
    ) -> None:
        self.type_cache = type_cache if type_cache is not None else TypeCache()
        self.package_only = package_only
        self.host = host if host is not None else ImportHost()
        self._matcher = ExclusionMatcher(self.host.builtin_names(), exclusions)
        self._module_cache: dict[str, Any] = {}
        self._hook: Optional[LoadFunction] = None
        self._previous: Optional[LoadFunction] = None

    @classmethod
    def from_config(
        cls,
        config: LazyImportConfig,
        type_cache: Optional[TypeCache] = None,
        host: Optional[HostLoader] = None,
    ) -> "LazyImporter":
        return cls(
            type_cache=type_cache,
            exclusions=config.exclusions,
            package_only=config.package_only,
            host=host,
        )

    # ── Lifecycle ──

    def enable(self) -> None:
        """Install the hook and start with an empty module cache.

        Enabling an enabled importer only clears the module cache; the hook is
        never stacked on itself.
        """
        self._module_cache = {}
        if self.is_enabled():
            logger.debug("already enabled; module cache cleared")
            return
        self._previous = self.host.load
        self._hook = self._make_lazy(self._previous)
        self.host.load = self._hook
        logger.debug("enabled")

    def disable(self) -> None:
        """Restore the previous hook and forget everything learned."""
        if self.is_enabled():
            self.host.load = self._previous
            self._hook = None
            self._previous = None
            self._module_cache = {}
            self.type_cache.reset()
        logger.debug("disabled")

    def is_enabled(self) -> bool:
        return self._hook is not None and self.host.load is self._hook

    def get_exclusion_patterns(self):
        """The compiled exclusion alternation."""
        return self._matcher.pattern

    # ── Resolution ──

    def _make_lazy(self, real_load: LoadFunction) -> LoadFunction:
        # Set while an excluded request loads; covers its whole import subtree.
        suppressed = False

        def lazy_load(request: str, parent: Any = None, is_main: bool = False) -> Any:
            nonlocal suppressed

            if is_main:
                logger.debug("[main] %s", request)
                return real_load(request, parent, is_main)

            if suppressed:
                logger.debug("[skip] %s", request)
                return real_load(request, parent, is_main)

            # Top-level packages are mostly export surfaces; submodules and
            # relative imports more often carry initialization side effects.
            if self.package_only and "." in request:
                logger.debug("[real] %s", request)
                return real_load(request, parent, is_main)

            if self._matcher.matches(request):
                suppressed = True
                try:
                    logger.debug("[real] %s", request)
                    return real_load(request, parent, is_main)
                finally:
                    suppressed = False

            filename = self.host.resolve_filename(request, parent, is_main)

            if filename in self._module_cache:
                logger.debug("[cache] %s %s", request, filename)
                return self._module_cache[filename]

            if self.type_cache.has_proxiable_type(filename):
                return self._create_handle(filename, real_load, request, parent, is_main)
            return self._load_module(filename, real_load, request, parent, is_main)

        return lazy_load

    def _load_module(self, filename, real_load, request, parent, is_main) -> Any:
        value = real_load(request, parent, is_main)
        classification = classify(value)
        if _is_circular_stub(value):
            logger.debug("[noop] %s %s %s", request, filename, classification.value)
        else:
            logger.debug("[type] %s %s %s", request, filename, classification.value)
            self.type_cache.record(filename, classification)
        self._module_cache[filename] = value
        return value

    def _create_handle(self, filename, real_load, request, parent, is_main) -> DeferredHandle:
        scaffold = self.type_cache.target_scaffold_for(filename)
        logger.debug("[proxy] %s %s %s", request, filename, scaffold.classification.value)

        def load() -> Any:
            logger.debug("[lazy] %s", request)
            value = real_load(request, parent, is_main)
            self._reclassify(filename, request, value)
            return value

        if scaffold.classification is Classification.FUNCTION:
            handle = CallableDeferredHandle(request, load, scaffold)
        else:
            handle = DeferredHandle(request, load, scaffold)
        self._module_cache[filename] = handle
        return handle

    def _reclassify(self, filename: str, request: str, value: Any) -> None:
        """Correct the record if a deferred module loaded as something else."""
        if not self.is_enabled() or _is_circular_stub(value):
            return
        classification = classify(value)
        if self.type_cache.classification_of(filename) is not classification:
            logger.debug("[retype] %s %s %s", request, filename, classification.value)
            self.type_cache.record(filename, classification)


# ── Process-wide service ──

_default_importer: Optional[LazyImporter] = None


def start(
    config: Optional[LazyImportConfig] = None,
    type_cache: Optional[TypeCache] = None,
) -> LazyImporter:
    """Enable the process-wide importer, creating it on first use.

    Handles are only created for paths the type cache already knows to be
    deferrable, so a fresh cache defers nothing during its first session.
    Seed it to defer from the first import::

        start(type_cache=TypeCache({"/site-packages/widgets/__init__.py": "function"}))
    """
    global _default_importer
    if _default_importer is None:
        _default_importer = LazyImporter.from_config(
            config if config is not None else load_config(),
            type_cache=type_cache,
        )
    _default_importer.enable()
    return _default_importer


def stop() -> None:
    """Disable and discard the process-wide importer."""
    global _default_importer
    if _default_importer is not None:
        _default_importer.disable()
        _default_importer = None
