"""Tests for the structural value differ."""
import pytest

from infraseal.core.errors import CyclicStateError, InvalidStateError
from infraseal.core.value_differ import ROOT, Divergence, DivergenceKind, diff


def kinds_at(divergences):
    return [(d.path, d.kind) for d in divergences]


class TestPrimitives:
    def test_equal_primitives(self):
        assert diff(ROOT, "postgres-14.5", "postgres-14.5") == []
        assert diff(ROOT, 1, 1.0) == []
        assert diff(ROOT, None, None) == []

    def test_changed_primitive(self):
        result = diff(("dbVersion",), "postgres-14.5", "postgres-15.0")
        assert result == [
            Divergence(("dbVersion",), DivergenceKind.CHANGED, "postgres-14.5", "postgres-15.0")
        ]

    def test_primitive_type_mismatch(self):
        result = diff(("port",), 22, "22")
        assert kinds_at(result) == [(("port",), DivergenceKind.TYPE_MISMATCH)]

    def test_bool_and_number_mismatch(self):
        assert kinds_at(diff(ROOT, True, 1)) == [((), DivergenceKind.TYPE_MISMATCH)]

    def test_nan_equals_nan(self):
        assert diff(ROOT, {"ratio": float("nan")}, {"ratio": float("nan")}) == []


class TestMappings:
    def test_added_removed_and_nested(self):
        declared = {"a": 1, "nested": {"x": 1, "gone": True}}
        live = {"nested": {"x": 2, "new": "y"}, "a": 1, "extra": None}

        result = diff(ROOT, declared, live)

        assert kinds_at(result) == [
            (("extra",), DivergenceKind.ADDED),
            (("nested", "gone"), DivergenceKind.REMOVED),
            (("nested", "new"), DivergenceKind.ADDED),
            (("nested", "x"), DivergenceKind.CHANGED),
        ]
        assert result[1].declared is True and result[1].live is None
        assert result[2].live == "y" and result[2].declared is None

    def test_key_order_independence(self):
        first = {"b": {"y": 2, "x": 1}, "a": [1, 2]}
        second = {"a": [1, 2], "b": {"x": 1, "y": 2}}
        assert diff(ROOT, first, second) == []

        live_first = {"z": 0, "b": {"y": 3, "x": 1}, "a": [1]}
        live_second = {"a": [1], "b": {"x": 1, "y": 3}, "z": 0}
        assert diff(ROOT, first, live_first) == diff(ROOT, second, live_second)

    def test_mapping_vs_sequence_is_type_mismatch(self):
        result = diff(ROOT, {"rules": {"0": "allow"}}, {"rules": ["allow"]})
        assert kinds_at(result) == [(("rules",), DivergenceKind.TYPE_MISMATCH)]

    def test_non_string_key_rejected(self):
        with pytest.raises(InvalidStateError):
            diff(ROOT, {1: "a"}, {1: "a"})


class TestSequences:
    def test_reordering_is_reported(self):
        result = diff(("sg",), ["a", "b"], ["b", "a"])
        assert kinds_at(result) == [
            (("sg", 0), DivergenceKind.CHANGED),
            (("sg", 1), DivergenceKind.CHANGED),
        ]

    def test_declared_longer_reports_removed_tail(self):
        result = diff(("securityGroup",), ["allow_ssh", "allow_web"], ["allow_ssh"])
        assert result == [
            Divergence(("securityGroup", 1), DivergenceKind.REMOVED, "allow_web", None)
        ]

    def test_live_longer_reports_added_tail(self):
        result = diff(ROOT, [1], [1, 2, 3])
        assert kinds_at(result) == [
            ((1,), DivergenceKind.ADDED),
            ((2,), DivergenceKind.ADDED),
        ]

    def test_tuple_and_list_are_both_sequences(self):
        assert diff(ROOT, ("a", "b"), ["a", "b"]) == []

    def test_nested_elements_recurse(self):
        declared = [{"port": 22, "cidr": "0.0.0.0/0"}]
        live = [{"port": 22, "cidr": "10.0.0.0/8"}]
        assert kinds_at(diff(ROOT, declared, live)) == [((0, "cidr"), DivergenceKind.CHANGED)]


class TestCollections:
    def test_order_insensitive(self):
        assert diff(ROOT, frozenset(["a", "b", "c"]), {"c", "a", "b"}) == []

    def test_symmetric_difference(self):
        result = diff(("ids",), frozenset({"sg-1", "sg-2"}), frozenset({"sg-2", "sg-3"}))
        assert result == [
            Divergence(("ids",), DivergenceKind.REMOVED, "sg-1", None),
            Divergence(("ids",), DivergenceKind.ADDED, None, "sg-3"),
        ]

    def test_elements_reported_in_sorted_order(self):
        result = diff(ROOT, frozenset(), frozenset({"b", 3, "a", None}))
        assert [d.live for d in result] == [None, 3, "a", "b"]

    def test_true_is_distinct_from_one(self):
        result = diff(ROOT, frozenset({1}), frozenset({True}))
        assert kinds_at(result) == [((), DivergenceKind.REMOVED), ((), DivergenceKind.ADDED)]

    def test_collection_vs_sequence_is_type_mismatch(self):
        result = diff(ROOT, frozenset({"a"}), ["a"])
        assert kinds_at(result) == [((), DivergenceKind.TYPE_MISMATCH)]


class TestGuards:
    def test_inputs_are_not_mutated(self, declared_state, drifted_live_state):
        import copy

        declared_copy = copy.deepcopy(declared_state)
        live_copy = copy.deepcopy(drifted_live_state)
        diff(ROOT, declared_state, drifted_live_state)
        assert declared_state == declared_copy
        assert drifted_live_state == live_copy

    def test_cycle_in_both_trees(self):
        declared = {"self": None}
        declared["self"] = declared
        live = {"self": None}
        live["self"] = live
        with pytest.raises(CyclicStateError):
            diff(ROOT, declared, live)

    def test_same_object_on_both_sides(self, declared_state):
        assert diff(ROOT, declared_state, declared_state) == []
