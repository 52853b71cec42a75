"""Type Cache — what each imported module turned out to be.

Maps a canonical module path to the :class:`Classification` observed the last
time that path was really loaded.  The interceptor consults it on the *next*
resolution of the same path: only functions and plain namespaces can be
stood in for by a deferred handle, everything else is loaded eagerly.
"""

import functools
import inspect
import types
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from lazyimport.reflection import SealedModule, fixed_attributes

# ── Classification ──


class Classification(str, Enum):
    """Kind of value a module import produced."""

    FUNCTION = "function"
    PLAIN_OBJECT = "object"
    INSTANCE = "instance"
    NULL = "null"
    PRIMITIVE = "primitive"


_PRIMITIVE_TYPES = (str, bytes, bool, int, float, complex)

# Namespace-shaped types; anything else was produced by a specific class.
_PLAIN_TYPES = frozenset({types.ModuleType, SealedModule, types.SimpleNamespace, object})

_PROXIABLE = frozenset({Classification.FUNCTION, Classification.PLAIN_OBJECT})


def classify(value: Any) -> Classification:
    """Classify a freshly loaded value.

    Only routines, classes and partials count as functions.  Other callable
    objects are instances: a handle cannot stand in for the protocols their
    class may implement.
    """
    if inspect.isroutine(value) or isinstance(value, (type, functools.partial)):
        return Classification.FUNCTION
    if value is None:
        return Classification.NULL
    if isinstance(value, _PRIMITIVE_TYPES):
        return Classification.PRIMITIVE
    if type(value) in _PLAIN_TYPES:
        return Classification.PLAIN_OBJECT
    return Classification.INSTANCE


# ── Scaffold ──


def _function_scaffold(path: str) -> types.FunctionType:
    def scaffold(*args, **kwargs):
        raise TypeError(f"scaffold for {path!r} is not callable")

    return scaffold


@dataclass
class Scaffold:
    """Minimal stand-in of the right base kind behind a deferred handle.

    Attributes:
        classification: The classification the scaffold was built for.
        target: A stub function (FUNCTION) or an empty module (PLAIN_OBJECT).
        extensible: Cleared once the loaded value reports it is not extensible.
        fixed_attributes: Names the target can neither rebind nor delete.
    """

    classification: Classification
    target: Any
    extensible: bool = True
    fixed_attributes: frozenset[str] = field(init=False)

    def __post_init__(self) -> None:
        self.fixed_attributes = fixed_attributes(self.target)


# ── Type Cache ──


class TypeCache:
    """Process-wide record of module classifications.

    Usage::

        cache = TypeCache()
        cache.record("/site-packages/widgets/__init__.py", Classification.FUNCTION)
        cache.has_proxiable_type("/site-packages/widgets/__init__.py")  # True

    Args:
        records: Optional initial path → classification mapping.
    """

    def __init__(self, records: Optional[Mapping[str, Classification]] = None) -> None:
        self._types: dict[str, Classification] = {}
        for path, classification in (records or {}).items():
            self.record(path, classification)

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, path: object) -> bool:
        return path in self._types

    def classification_of(self, path: str) -> Optional[Classification]:
        """The recorded classification of ``path``, or ``None`` if unknown."""
        return self._types.get(path)

    def record(self, path: str, classification: Classification) -> None:
        """Record ``classification`` for ``path``; the last write wins."""
        self._types[path] = Classification(classification)

    def reset(self) -> None:
        """Forget every record."""
        self._types.clear()

    def as_dict(self) -> dict[str, Classification]:
        """Snapshot of all records."""
        return dict(self._types)

    @staticmethod
    def is_proxiable(classification: Optional[Classification]) -> bool:
        """Only functions and plain namespaces can be emulated losslessly."""
        return classification in _PROXIABLE

    def has_proxiable_type(self, path: str) -> bool:
        return self.is_proxiable(self.classification_of(path))

    def target_scaffold_for(self, path: str) -> Scaffold:
        """Build the scaffold a deferred handle for ``path`` fronts.

        Raises:
            ValueError: If ``path`` has no proxiable classification.
        """
        classification = self.classification_of(path)
        if classification is Classification.FUNCTION:
            return Scaffold(classification, _function_scaffold(path))
        if classification is Classification.PLAIN_OBJECT:
            return Scaffold(classification, types.ModuleType(path))
        raise ValueError(f"{path!r} has no proxiable classification: {classification}")
