"""Deferred Handle — a stand-in for a module that has not been loaded yet.

A handle is returned from ``import`` in place of a module whose previous
classification was FUNCTION or PLAIN_OBJECT.  The first operation of any kind
on it (attribute read, write or delete, ``dir()``, ``str()``, a call,
subclassing, ``isinstance``) performs the real import exactly once; every
operation then forwards to the loaded value.

Truthiness, ``==``, ``hash()`` and ``type()`` answer for the handle itself,
so they never trigger a load.
"""

import logging
import types
from typing import Any, Callable

from lazyimport.reflection import (
    delete_value_attribute,
    is_fixed_attribute,
    seal_module,
    value_is_extensible,
)
from lazyimport.typecache import Scaffold

logger = logging.getLogger(__name__)

_UNSET = object()

# ── Exceptions ──


class DeferredHandleError(TypeError):
    """Base exception for operations a deferred handle cannot honour."""


class NotCallableError(DeferredHandleError):
    """The loaded module was classified as a function but is not callable."""


class NotConstructibleError(DeferredHandleError):
    """The loaded module was used as a class but is not one."""


class UnsupportedOperationError(DeferredHandleError):
    """The operation cannot be emulated across a deferred handle."""


# ── Loading ──


def _get(handle: "DeferredHandle", slot: str) -> Any:
    return object.__getattribute__(handle, slot)


def _ensure_loaded(handle: "DeferredHandle") -> Any:
    """Load the real value on first use; later calls return the same value."""
    value = _get(handle, "_value")
    if value is _UNSET:
        value = _get(handle, "_loader")()
        object.__setattr__(handle, "_value", value)
    return value


# ── Handles ──


class DeferredHandle:
    """Record-shaped stand-in for a module classified as PLAIN_OBJECT.

    Args:
        request: The import request the handle was created for; named in
            every error the handle raises.
        loader: Zero-argument callable performing the real import.
        scaffold: The stand-in whose fixed attributes the handle must keep
            reporting consistently.
    """

    __slots__ = ("_request", "_loader", "_scaffold", "_value", "__weakref__")

    # Names answered by the handle itself instead of the loaded value.
    _OWN_ATTRIBUTES: frozenset = frozenset()

    def __init__(self, request: str, loader: Callable[[], Any], scaffold: Scaffold) -> None:
        object.__setattr__(self, "_request", request)
        object.__setattr__(self, "_loader", loader)
        object.__setattr__(self, "_scaffold", scaffold)
        object.__setattr__(self, "_value", _UNSET)

    def __getattribute__(self, name: str) -> Any:
        if name in type(self)._OWN_ATTRIBUTES:
            return object.__getattribute__(self, name)
        value = _ensure_loaded(self)
        try:
            return getattr(value, name)
        except AttributeError:
            scaffold = _get(self, "_scaffold")
            if name in scaffold.fixed_attributes:
                return getattr(scaffold.target, name)
            raise

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(_ensure_loaded(self), name, value)

    def __delattr__(self, name: str) -> None:
        if not delete_attribute(self, name):
            raise AttributeError(
                f"cannot delete fixed attribute {name!r} of module {_get(self, '_request')!r}"
            )

    def __dir__(self) -> list[str]:
        names = set(dir(_ensure_loaded(self)))
        names.update(_get(self, "_scaffold").fixed_attributes)
        return sorted(names)

    def __str__(self) -> str:
        return str(_ensure_loaded(self))

    def __repr__(self) -> str:
        return repr(_ensure_loaded(self))

    def __format__(self, format_spec: str) -> str:
        return format(_ensure_loaded(self), format_spec)


class CallableDeferredHandle(DeferredHandle):
    """Stand-in for a module classified as FUNCTION.

    Calling forwards to the loaded callable.  Class-like use (subclassing,
    ``isinstance``, ``issubclass``) forwards to the loaded class, as do
    subscription and ``|``.  Stored on a class, a handle binds the way the
    loaded value would.
    """

    __slots__ = ()

    _OWN_ATTRIBUTES = frozenset({"__mro_entries__"})

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        value = _ensure_loaded(self)
        if not callable(value):
            raise NotCallableError(
                f"Module {_get(self, '_request')!r} is not callable: possible classification mismatch"
            )
        return value(*args, **kwargs)

    def _loaded_class(self) -> type:
        value = _ensure_loaded(self)
        if not isinstance(value, type):
            raise NotConstructibleError(
                f"Module {_get(self, '_request')!r} is not a class: possible classification mismatch"
            )
        return value

    def __mro_entries__(self, bases: tuple) -> tuple:
        return (CallableDeferredHandle._loaded_class(self),)

    def __instancecheck__(self, instance: Any) -> bool:
        return isinstance(instance, CallableDeferredHandle._loaded_class(self))

    def __subclasscheck__(self, subclass: type) -> bool:
        return issubclass(subclass, CallableDeferredHandle._loaded_class(self))

    # Generic aliases and unions: ``Box[int]``, ``int | Box``.

    def __getitem__(self, item: Any) -> Any:
        return _ensure_loaded(self)[item]

    def __or__(self, other: Any) -> Any:
        return _ensure_loaded(self) | other

    def __ror__(self, other: Any) -> Any:
        return other | _ensure_loaded(self)

    def __get__(self, instance: Any, owner: Any = None) -> Any:
        value = _ensure_loaded(self)
        get = getattr(type(value), "__get__", None)
        if get is None:
            return value
        return get(value, instance, owner)


# ── Reflection ──


def is_deferred(obj: Any) -> bool:
    """Whether ``obj`` is a deferred handle; never triggers a load."""
    return issubclass(type(obj), DeferredHandle)


def is_loaded(handle: DeferredHandle) -> bool:
    """Whether the handle's real value has been loaded."""
    return _get(handle, "_value") is not _UNSET


def is_extensible(obj: Any) -> bool:
    """Whether new attributes can be bound on ``obj``.

    For a handle this loads the value; if the value is not extensible the
    handle's scaffold is marked non-extensible too, and a record scaffold is
    sealed so both sides agree on later queries.
    """
    if not is_deferred(obj):
        return value_is_extensible(obj)
    extensible = value_is_extensible(_ensure_loaded(obj))
    scaffold = _get(obj, "_scaffold")
    if not extensible and scaffold.extensible:
        scaffold.extensible = False
        if isinstance(scaffold.target, types.ModuleType):
            seal_module(scaffold.target)
    return extensible


def prevent_extensions(obj: Any) -> None:
    """Seal ``obj`` against new attributes.

    Handles cannot be sealed: the handle and its value would have to agree
    permanently on their attribute sets while the value may still be loaded
    later.

    Raises:
        UnsupportedOperationError: If ``obj`` is a deferred handle.
        TypeError: If ``obj`` is not a plain module.
    """
    if is_deferred(obj):
        raise UnsupportedOperationError(
            f"Deferred modules cannot be sealed; add {_get(obj, '_request')!r} to the exclusions"
        )
    seal_module(obj)


def delete_attribute(obj: Any, name: str) -> bool:
    """Delete ``name`` from ``obj``, returning ``False`` for fixed attributes."""
    if not is_deferred(obj):
        return delete_value_attribute(obj, name)
    value = _ensure_loaded(obj)
    if is_fixed_attribute(value, name):
        logger.debug("Refusing to delete fixed attribute %s of %s", name, _get(obj, "_request"))
        return False
    delattr(value, name)
    return True
