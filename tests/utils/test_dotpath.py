"""
Tests for dot-path helpers.
"""
from modkernel.utils.dotpath import get_path, merge_defaults, set_path


class TestGetPath:

    def test_nested_lookup(self):
        data = {"a": {"b": {"c": 1}}}

        assert get_path(data, "a.b.c") == 1
        assert get_path(data, "a.b") == {"c": 1}

    def test_missing_segment_returns_default(self):
        data = {"a": {"b": 1}}

        assert get_path(data, "a.x.y", "d") == "d"
        assert get_path(data, "a.b.c", "d") == "d"
        assert get_path(None, "a", "d") == "d"
        assert get_path(data, "", "d") == "d"

    def test_falsy_values_are_returned(self):
        data = {"flag": False, "count": 0}

        assert get_path(data, "flag", True) is False
        assert get_path(data, "count", 5) == 0


class TestSetPath:

    def test_creates_intermediate_dicts(self):
        data = {}
        set_path(data, "a.b.c", 1)

        assert data == {"a": {"b": {"c": 1}}}

    def test_replaces_scalar_in_the_way(self):
        data = {"a": 1}
        set_path(data, "a.b", 2)

        assert data == {"a": {"b": 2}}


class TestMerging:

    def test_merge_defaults_keeps_existing(self):
        target = {"web": {"port": 8080}}
        merge_defaults(target, {"web": {"port": 3000, "host": "0.0.0.0"}, "debug": False})

        assert target == {"web": {"port": 8080, "host": "0.0.0.0"}, "debug": False}
