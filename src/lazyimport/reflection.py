"""Attribute introspection shared by scaffolds and deferred handles.

Python has no property descriptors with ``configurable``/``writable`` flags.
The closest equivalent is a C-level slot (member or getset descriptor) that
refuses assignment: ``function.__closure__``, ``module.__dict__`` and so on.
Those are called *fixed* attributes here.  A deferred handle must report
them consistently whether or not the real value has been loaded yet.

Extensibility is modelled the same way: an object is extensible when new
attributes can be bound on it.  Modules can be sealed by swapping their class
for :class:`SealedModule`, the usual ``module.__class__`` idiom.
"""

import types
from typing import Any

_SLOT_DESCRIPTORS = (types.MemberDescriptorType, types.GetSetDescriptorType)


class SealedModule(types.ModuleType):
    """Module that refuses new attributes; existing ones stay rebindable."""

    def __setattr__(self, name: str, value: Any) -> None:
        if name not in self.__dict__ and not hasattr(type(self), name):
            raise AttributeError(
                f"cannot add attribute {name!r} to sealed module {self.__name__!r}"
            )
        super().__setattr__(name, value)


def _static_descriptor(obj: Any, name: str) -> Any:
    for klass in type(obj).__mro__:
        if name in vars(klass):
            return vars(klass)[name]
    return None


def is_fixed_attribute(obj: Any, name: str) -> bool:
    """Whether ``name`` is a slot on ``obj`` that can be neither rebound nor deleted.

    The check rebinds the attribute to its current value, which is a no-op for
    every writable slot on the built-in types this is used with.
    """
    if not isinstance(_static_descriptor(obj, name), _SLOT_DESCRIPTORS):
        return False
    try:
        value = getattr(obj, name)
    except AttributeError:
        return False
    try:
        setattr(obj, name, value)
    except (AttributeError, TypeError):
        return True
    return False


def fixed_attributes(obj: Any) -> frozenset[str]:
    """All fixed attribute names of ``obj``."""
    names = {name for klass in type(obj).__mro__ for name in vars(klass)}
    return frozenset(name for name in names if is_fixed_attribute(obj, name))


def value_is_extensible(obj: Any) -> bool:
    """Whether new attributes can be bound on a (non-deferred) value."""
    if isinstance(obj, SealedModule):
        return False
    if isinstance(obj, types.ModuleType):
        return True
    return hasattr(obj, "__dict__")


def seal_module(module: types.ModuleType) -> None:
    """Make a plain module non-extensible in place."""
    if type(module) is SealedModule:
        return
    if type(module) is not types.ModuleType:
        raise TypeError(f"cannot seal {type(module).__name__} objects")
    module.__class__ = SealedModule


def delete_value_attribute(obj: Any, name: str) -> bool:
    """Delete ``name`` from ``obj``; ``False`` if it is a fixed attribute."""
    if is_fixed_attribute(obj, name):
        return False
    delattr(obj, name)
    return True
