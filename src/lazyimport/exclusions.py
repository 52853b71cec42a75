"""Exclusion Matcher — requests that are always imported eagerly.

Built once from the platform's built-in module names, the default patterns
and any caller-supplied regular expressions.  A request is excluded only when
it matches one of them in full.
"""

import re
from typing import Iterable

# Interpreter-reserved dunder modules such as __future__ and __main__.
DEFAULT_PATTERNS = (r"__\w+__",)


class ExclusionPatternError(ValueError):
    """A caller-supplied exclusion is not a valid regular expression."""


class ExclusionMatcher:
    """Immutable, anchored alternation of exclusion patterns.

    Args:
        builtin_names: Platform module names.  Private names (leading
            underscore) are dropped; the rest are matched literally.
        exclusions: Additional regular expressions from the caller.

    Raises:
        ExclusionPatternError: If a caller pattern does not compile.
    """

    def __init__(self, builtin_names: Iterable[str] = (), exclusions: Iterable[str] = ()) -> None:
        exclusions = list(exclusions)
        for pattern in exclusions:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ExclusionPatternError(
                    f"Invalid exclusion pattern {pattern!r}: {exc}"
                ) from exc

        builtins = [re.escape(name) for name in builtin_names if not name.startswith("_")]
        self._patterns = tuple(dict.fromkeys([*builtins, *DEFAULT_PATTERNS, *exclusions]))
        try:
            self._regex = re.compile(f"^(?:{'|'.join(self._patterns)})$")
        except re.error as exc:
            raise ExclusionPatternError(f"Exclusion patterns do not combine: {exc}") from exc

    @property
    def patterns(self) -> tuple[str, ...]:
        """Source patterns, deduplicated, in the order they were combined."""
        return self._patterns

    @property
    def pattern(self) -> re.Pattern:
        """The compiled alternation."""
        return self._regex

    def matches(self, request: str) -> bool:
        return self._regex.fullmatch(request) is not None
