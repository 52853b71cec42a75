"""Tests for the Exclusion Matcher."""

import re

import pytest

from lazyimport import ExclusionMatcher, ExclusionPatternError
from lazyimport.exclusions import DEFAULT_PATTERNS


class TestExclusionMatcher:
    def test_builtin_names_match(self):
        matcher = ExclusionMatcher(["os", "json"])
        assert matcher.matches("os")
        assert matcher.matches("json")

    def test_private_builtins_dropped(self):
        matcher = ExclusionMatcher(["_thread", "os"])
        assert not matcher.matches("_thread")
        assert "_thread" not in matcher.patterns

    def test_builtin_names_matched_literally(self):
        matcher = ExclusionMatcher(["a.b"])
        assert matcher.matches("a.b")
        assert not matcher.matches("axb")

    def test_default_dunder_pattern(self):
        matcher = ExclusionMatcher()
        assert matcher.matches("__future__")
        assert matcher.matches("__main__")
        assert not matcher.matches("future")

    def test_caller_patterns_are_regexes(self):
        matcher = ExclusionMatcher(exclusions=[r"numpy(\..*)?", "pand.s"])
        assert matcher.matches("numpy")
        assert matcher.matches("numpy.linalg")
        assert matcher.matches("pandas")

    @pytest.mark.parametrize("request_name", ["osx", "xos", "os.path", "my_os"])
    def test_partial_match_does_not_count(self, request_name):
        matcher = ExclusionMatcher(["os"])
        assert not matcher.matches(request_name)

    def test_alternation_inside_caller_pattern_stays_anchored(self):
        matcher = ExclusionMatcher(exclusions=["a|b"])
        assert matcher.matches("a")
        assert matcher.matches("b")
        assert not matcher.matches("ab")
        assert not matcher.matches("xa")

    def test_trailing_newline_not_matched(self):
        matcher = ExclusionMatcher(["os"])
        assert not matcher.matches("os\n")

    def test_patterns_deduplicated_in_order(self):
        matcher = ExclusionMatcher(["os", "sys", "os"], exclusions=["sys", "extra"])
        assert matcher.patterns == ("os", "sys", *DEFAULT_PATTERNS, "extra")

    def test_compiled_pattern_is_anchored(self):
        matcher = ExclusionMatcher(["os"])
        assert isinstance(matcher.pattern, re.Pattern)
        assert matcher.pattern.pattern.startswith("^(?:")
        assert matcher.pattern.pattern.endswith(")$")

    def test_invalid_pattern_named(self):
        with pytest.raises(ExclusionPatternError, match=r"\(unclosed"):
            ExclusionMatcher(exclusions=["(unclosed"])

    def test_invalid_pattern_is_value_error(self):
        with pytest.raises(ValueError):
            ExclusionMatcher(exclusions=["["])

    def test_accepts_generators(self):
        matcher = ExclusionMatcher((n for n in ["os"]), (p for p in ["extra"]))
        assert matcher.matches("os")
        assert matcher.matches("extra")
