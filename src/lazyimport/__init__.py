"""lazyimport — defer module imports until the module is first used."""

from lazyimport.config import ConfigError, LazyImportConfig, load_config
from lazyimport.deferred import (
    CallableDeferredHandle,
    DeferredHandle,
    DeferredHandleError,
    NotCallableError,
    NotConstructibleError,
    UnsupportedOperationError,
    delete_attribute,
    is_deferred,
    is_extensible,
    is_loaded,
    prevent_extensions,
)
from lazyimport.exclusions import ExclusionMatcher, ExclusionPatternError
from lazyimport.host import HostLoader, ImportHost
from lazyimport.interceptor import LazyImporter, start, stop
from lazyimport.typecache import Classification, Scaffold, TypeCache, classify

__all__ = [
    # Interceptor
    "LazyImporter",
    "start",
    "stop",
    # Hosts
    "HostLoader",
    "ImportHost",
    # Type Cache
    "TypeCache",
    "Classification",
    "Scaffold",
    "classify",
    # Deferred Handles
    "DeferredHandle",
    "CallableDeferredHandle",
    "DeferredHandleError",
    "NotCallableError",
    "NotConstructibleError",
    "UnsupportedOperationError",
    "is_deferred",
    "is_loaded",
    "is_extensible",
    "prevent_extensions",
    "delete_attribute",
    # Exclusions
    "ExclusionMatcher",
    "ExclusionPatternError",
    # Configuration
    "LazyImportConfig",
    "ConfigError",
    "load_config",
]
