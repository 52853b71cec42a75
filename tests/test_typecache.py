"""Tests for the Type Cache — classification, records, and scaffolds."""

import functools
import types

import pytest

from lazyimport import Classification, Scaffold, TypeCache, classify
from lazyimport.reflection import SealedModule


class Widget:
    pass


class CallableWidget:
    def __call__(self):
        return "called"


class ModuleSubclass(types.ModuleType):
    pass


# ── Classification ──


class TestClassify:
    @pytest.mark.parametrize(
        "value",
        [len, lambda: None, Widget, functools.partial(max, 0), "text".upper],
        ids=["builtin", "lambda", "class", "partial", "bound-method"],
    )
    def test_function(self, value):
        assert classify(value) is Classification.FUNCTION

    def test_null(self):
        assert classify(None) is Classification.NULL

    @pytest.mark.parametrize(
        "value",
        [types.ModuleType("m"), types.SimpleNamespace(a=1), object()],
        ids=["module", "namespace", "object"],
    )
    def test_plain_object(self, value):
        assert classify(value) is Classification.PLAIN_OBJECT

    def test_sealed_module_is_plain(self):
        module = types.ModuleType("m")
        module.__class__ = SealedModule
        assert classify(module) is Classification.PLAIN_OBJECT

    @pytest.mark.parametrize(
        "value",
        [Widget(), CallableWidget(), ModuleSubclass("m"), {"a": 1}, [1, 2]],
        ids=["instance", "callable-instance", "module-subclass", "dict", "list"],
    )
    def test_instance(self, value):
        assert classify(value) is Classification.INSTANCE

    @pytest.mark.parametrize("value", ["s", b"b", 1, 1.5, True, 2j])
    def test_primitive(self, value):
        assert classify(value) is Classification.PRIMITIVE


# ── Records ──


class TestTypeCache:
    def test_unknown_path(self, type_cache):
        assert type_cache.classification_of("/a.py") is None
        assert "/a.py" not in type_cache

    def test_record_and_read(self, type_cache):
        type_cache.record("/a.py", Classification.FUNCTION)
        assert type_cache.classification_of("/a.py") is Classification.FUNCTION
        assert "/a.py" in type_cache
        assert len(type_cache) == 1

    def test_last_write_wins(self, type_cache):
        type_cache.record("/a.py", Classification.FUNCTION)
        type_cache.record("/a.py", Classification.INSTANCE)
        assert type_cache.classification_of("/a.py") is Classification.INSTANCE
        assert len(type_cache) == 1

    def test_record_accepts_tag_strings(self, type_cache):
        type_cache.record("/a.py", "object")
        assert type_cache.classification_of("/a.py") is Classification.PLAIN_OBJECT

    def test_record_rejects_unknown_tag(self, type_cache):
        with pytest.raises(ValueError):
            type_cache.record("/a.py", "banana")

    def test_seeded_records(self):
        cache = TypeCache({"/a.py": Classification.FUNCTION, "/b.py": "null"})
        assert cache.classification_of("/a.py") is Classification.FUNCTION
        assert cache.classification_of("/b.py") is Classification.NULL

    def test_reset(self, type_cache):
        type_cache.record("/a.py", Classification.FUNCTION)
        type_cache.reset()
        assert len(type_cache) == 0
        assert type_cache.classification_of("/a.py") is None

    def test_as_dict_is_snapshot(self, type_cache):
        type_cache.record("/a.py", Classification.FUNCTION)
        snapshot = type_cache.as_dict()
        type_cache.reset()
        assert snapshot == {"/a.py": Classification.FUNCTION}


class TestProxiable:
    @pytest.mark.parametrize(
        "classification, expected",
        [
            (Classification.FUNCTION, True),
            (Classification.PLAIN_OBJECT, True),
            (Classification.INSTANCE, False),
            (Classification.NULL, False),
            (Classification.PRIMITIVE, False),
            (None, False),
        ],
    )
    def test_is_proxiable(self, classification, expected):
        assert TypeCache.is_proxiable(classification) is expected

    def test_has_proxiable_type(self, type_cache):
        type_cache.record("/f.py", Classification.FUNCTION)
        type_cache.record("/i.py", Classification.INSTANCE)
        assert type_cache.has_proxiable_type("/f.py")
        assert not type_cache.has_proxiable_type("/i.py")
        assert not type_cache.has_proxiable_type("/unknown.py")


# ── Scaffolds ──


class TestScaffold:
    def test_function_scaffold_is_callable(self, type_cache):
        type_cache.record("/f.py", Classification.FUNCTION)
        scaffold = type_cache.target_scaffold_for("/f.py")
        assert isinstance(scaffold, Scaffold)
        assert scaffold.classification is Classification.FUNCTION
        assert callable(scaffold.target)
        assert scaffold.extensible is True

    def test_function_scaffold_fixed_attributes(self, type_cache):
        type_cache.record("/f.py", Classification.FUNCTION)
        fixed = type_cache.target_scaffold_for("/f.py").fixed_attributes
        assert {"__closure__", "__globals__"} <= fixed
        assert "__name__" not in fixed
        assert "__defaults__" not in fixed

    def test_record_scaffold_is_empty_module(self, type_cache):
        type_cache.record("/o.py", Classification.PLAIN_OBJECT)
        scaffold = type_cache.target_scaffold_for("/o.py")
        assert type(scaffold.target) is types.ModuleType
        assert not callable(scaffold.target)
        assert "__dict__" in scaffold.fixed_attributes

    def test_each_scaffold_is_fresh(self, type_cache):
        type_cache.record("/o.py", Classification.PLAIN_OBJECT)
        assert type_cache.target_scaffold_for("/o.py").target is not (
            type_cache.target_scaffold_for("/o.py").target
        )

    @pytest.mark.parametrize("classification", [Classification.INSTANCE, None])
    def test_non_proxiable_has_no_scaffold(self, type_cache, classification):
        if classification is not None:
            type_cache.record("/x.py", classification)
        with pytest.raises(ValueError, match="no proxiable classification"):
            type_cache.target_scaffold_for("/x.py")
