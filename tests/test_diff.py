"""Tests for the diff engine."""
import pytest
from junos_templater.config_engine import (
    ChangeKind,
    ChangeRecord,
    DiffEngine,
    DiffOptions,
    Node,
    NodeKind,
    diff_trees,
    similarity,
    summarize_changes,
    text_to_tree,
)


def directive(name, value):
    return Node(NodeKind.DIRECTIVE, name, value)


class TestDiffTrees:
    """Tests for diff_trees with index-based array matching."""

    def test_identical_trees_have_no_changes(self, router_a):
        tree = text_to_tree(router_a)

        assert diff_trees(tree, tree) == []
        assert diff_trees(tree, text_to_tree(router_a)) == []

    def test_directive_value_change(self):
        """A changed directive value is one replace ending in its name."""
        old = text_to_tree("unit 0 {\n    family inet;\n}\n")
        new = text_to_tree("unit 0 {\n    family inet6;\n}\n")

        changes = diff_trees(old, new)

        assert len(changes) == 1
        change = changes[0]
        assert change.kind == ChangeKind.REPLACE
        assert change.semantic_path == ["unit", "0", "family"]
        assert change.structural_path == ["children", 0, "children", 0, "value"]
        assert change.old_value == "inet"
        assert change.new_value == "inet6"

    def test_sample_configs_semantic_paths(self, router_a, router_b):
        """Semantic paths name the stanzas leading to each change."""
        changes = diff_trees(text_to_tree(router_a), text_to_tree(router_b))

        paths = [change.semantic_path for change in changes]
        assert paths == [
            ["system", "host-name"],
            ["interfaces", "ge-0/0/1", "name"],
            ["interfaces", "ge-0/0/1", "description"],
            ["interfaces", "ge-0/0/1", "unit", "100", "family", "inet", "address"],
            ["protocols", "ospf", "area", "0.0.0.0", "interface"],
        ]
        assert all(change.kind == ChangeKind.REPLACE for change in changes)

    def test_container_value_change_is_named(self):
        """Changing "unit 0" to "unit 5" addresses the unit's name."""
        old = text_to_tree("ge-0/0/0 {\n    unit 0 {\n    }\n}\n")
        new = text_to_tree("ge-0/0/0 {\n    unit 5 {\n    }\n}\n")

        changes = diff_trees(old, new)

        assert [change.semantic_path for change in changes] == [["ge-0/0/0", "unit", "name"]]
        assert changes[0].old_value == "0"

    def test_added_and_removed_elements(self):
        """Extra trailing statements become add/remove records."""
        short = text_to_tree("system {\n    host-name r1;\n}\n")
        long = text_to_tree("system {\n    host-name r1;\n    domain-name example.net;\n}\n")

        added = diff_trees(short, long)
        removed = diff_trees(long, short)

        assert len(added) == 1
        assert added[0].kind == ChangeKind.ADD
        assert added[0].structural_path == ["children", 0, "children", 1]
        assert added[0].semantic_path == ["system", "domain-name"]
        assert added[0].node_type == "directive"
        assert added[0].new_value["value"] == "example.net"

        assert len(removed) == 1
        assert removed[0].kind == ChangeKind.REMOVE
        assert removed[0].old_value["name"] == "domain-name"

    def test_reverse_direction_swaps_values(self, router_a, router_b):
        """Replace records swap old/new values when arguments swap."""
        a, b = text_to_tree(router_a), text_to_tree(router_b)

        forward = diff_trees(a, b)
        backward = diff_trees(b, a)

        assert len(forward) == len(backward)
        for f, r in zip(forward, backward):
            assert f.structural_path == r.structural_path
            assert (f.old_value, f.new_value) == (r.new_value, r.old_value)

    def test_plain_json_values(self):
        """Any JSON-shaped value can be diffed."""
        changes = diff_trees({"a": [1, 2], "b": "x"}, {"a": [1, 3], "c": True})

        assert [(c.kind, c.structural_path) for c in changes] == [
            (ChangeKind.REPLACE, ["a", 1]),
            (ChangeKind.REMOVE_ATTRIBUTE, ["b"]),
            (ChangeKind.ADD_ATTRIBUTE, ["c"]),
        ]
        assert changes[0].semantic_path == ["a", "1"]
        assert changes[1].attribute == "b"
        assert changes[1].old_value == "x"
        assert changes[2].new_value is True

    def test_type_mismatch_is_single_replace(self):
        """Different value types produce one replace, no recursion."""
        changes = diff_trees({"a": {"x": 1}}, {"a": "flat"})

        assert len(changes) == 1
        assert changes[0].kind == ChangeKind.REPLACE
        assert changes[0].old_type == "object"
        assert changes[0].new_type == "string"

    def test_null_against_value(self):
        changes = diff_trees({"value": None}, {"value": "inet"})

        assert changes[0].kind == ChangeKind.REPLACE
        assert changes[0].old_value is None
        assert changes[0].old_type == "null"

    def test_primitives(self):
        assert diff_trees(1, 1) == []
        assert diff_trees(1, 1.0) == []
        assert diff_trees(True, 1)[0].old_type == "boolean"
        assert diff_trees("a", "b")[0].structural_path == []

    def test_ignored_attributes(self):
        """Location metadata is skipped unless the ignore list is cleared."""
        old = {"name": "mtu", "line": 3}
        new = {"name": "mtu", "line": 7}

        assert diff_trees(old, new) == []
        assert len(diff_trees(old, new, ignored_attributes=())) == 1

    def test_max_depth_stops_recursion(self):
        """Nothing below max_depth is compared, but attribute sets still are."""
        assert diff_trees({"x": 1}, {"x": 2}, max_depth=0) == []
        assert len(diff_trees({"x": 1}, {"y": 1}, max_depth=0)) == 2
        assert len(diff_trees({"x": {"y": 1}}, {"x": {"y": 2}}, max_depth=1)) == 0
        assert len(diff_trees({"x": {"y": 1}}, {"x": {"y": 2}}, max_depth=2)) == 1

    def test_options_object(self):
        engine = DiffEngine(DiffOptions(order_significant=False))

        assert engine.options.order_significant is False
        assert engine.diff([1, 2], [2, 1]) == []

    def test_options_and_overrides_rejected(self):
        with pytest.raises(TypeError):
            diff_trees([1], [2], DiffOptions(), max_depth=1)


class TestUnorderedDiff:
    """Tests for similarity-based array matching."""

    def test_reordered_statements_have_no_changes(self):
        old = Node.root([directive("family", "inet"), directive("mtu", "9000")])
        new = Node.root([directive("mtu", "9000"), directive("family", "inet")])

        assert diff_trees(old, new, order_significant=False) == []
        assert len(diff_trees(old, new)) > 0

    def test_reordered_interfaces_with_changed_unit(self):
        """Matched siblings are recursed; only the changed leaf is reported."""
        old = text_to_tree(
            "ge-0/0/0 {\n    unit 0 {\n    }\n}\n"
            "ge-0/0/1 {\n    unit 0 {\n    }\n}\n"
        )
        new = text_to_tree(
            "ge-0/0/1 {\n    unit 5 {\n    }\n}\n"
            "ge-0/0/0 {\n    unit 0 {\n    }\n}\n"
        )

        changes = diff_trees(old, new, order_significant=False)

        assert len(changes) == 1
        assert changes[0].kind == ChangeKind.REPLACE
        assert changes[0].structural_path == ["children", 1, "children", 0, "value"]
        assert changes[0].semantic_path == ["ge-0/0/1", "unit", "name"]
        assert (changes[0].old_value, changes[0].new_value) == ("0", "5")

    def test_unmatched_elements_removed_and_added(self):
        old = Node.root([directive("family", "inet")])
        new = Node.root([directive("mtu", "9000")])

        changes = diff_trees(old, new, order_significant=False)

        assert [change.kind for change in changes] == [ChangeKind.REMOVE, ChangeKind.ADD]
        assert changes[0].semantic_path == ["family"]
        assert changes[1].semantic_path == ["mtu"]

    def test_similar_values_are_matched(self):
        """Same directive with another value is a replace, not remove+add."""
        old = Node.root([directive("family", "inet")])
        new = Node.root([directive("family", "inet6")])

        changes = diff_trees(old, new, order_significant=False)

        assert len(changes) == 1
        assert changes[0].kind == ChangeKind.REPLACE


class TestSimilarity:
    """Tests for the similarity heuristic."""

    def test_primitives(self):
        assert similarity("a", "a") == 1.0
        assert similarity("a", "b") == 0.0
        assert similarity(1, "1") == 0.0

    def test_objects_with_different_type(self):
        assert similarity({"type": "block"}, {"type": "flag"}) == pytest.approx(0.1)

    def test_objects_same_shape(self):
        inet = directive("family", "inet").to_dict()
        inet6 = directive("family", "inet6").to_dict()

        assert similarity(inet, inet) == 1.0
        assert similarity(inet, inet6) == pytest.approx(0.75)

    def test_objects_without_identity_properties(self):
        assert similarity({"a": 1, "b": 2}, {"a": 1, "b": 3}) == pytest.approx(0.75)
        assert similarity({}, {}) == 1.0

    def test_arrays(self):
        assert similarity([], []) == 1.0
        assert similarity([], [1]) == pytest.approx(0.3)
        assert similarity([1, 2], [1, 2]) == 1.0
        assert similarity([1], [1, 2]) == pytest.approx(0.5)

    def test_ignored_properties_do_not_count(self):
        assert similarity({"id": 1, "line": 1}, {"id": 1}) == 1.0


class TestChangeRecord:
    """Tests for change record serialization and summaries."""

    def test_to_dict_replace(self):
        record = ChangeRecord(
            kind=ChangeKind.REPLACE,
            structural_path=["children", 0, "value"],
            semantic_path=["family"],
            old_value="inet",
            new_value="inet6",
        )

        assert record.to_dict() == {
            "type": "replace",
            "path": ["children", "0", "value"],
            "semanticPath": ["family"],
            "oldValue": "inet",
            "newValue": "inet6",
        }
        assert ChangeRecord.from_dict(record.to_dict()) == record

    def test_to_dict_only_relevant_values(self):
        added = ChangeRecord(kind=ChangeKind.ADD_ATTRIBUTE, new_value=1, attribute="x")
        removed = ChangeRecord(kind=ChangeKind.REMOVE, old_value=None)

        assert "oldValue" not in added.to_dict()
        assert added.to_dict()["property"] == "x"
        assert "newValue" not in removed.to_dict()
        assert removed.to_dict()["oldValue"] is None

    def test_value_presence_flags(self):
        added = ChangeRecord(kind=ChangeKind.ADD_ATTRIBUTE, new_value=1, attribute="x")
        replaced = ChangeRecord(kind=ChangeKind.REPLACE, old_value=1, new_value=2)

        assert added.has_new_value and not added.has_old_value
        assert replaced.has_old_value and replaced.has_new_value

    def test_attribute_survives_dict_round_trip(self):
        removed = ChangeRecord(
            kind=ChangeKind.REMOVE_ATTRIBUTE,
            structural_path=["children", 0, "value"],
            old_value="x",
            attribute="value",
        )

        assert ChangeRecord.from_dict(removed.to_dict()).attribute == "value"

    def test_summarize_no_changes(self):
        assert "No changes" in summarize_changes([])

    def test_summarize_changes(self, router_a, router_b):
        changes = diff_trees(text_to_tree(router_a), text_to_tree(router_b))

        summary = summarize_changes(changes)

        assert "Changes (5 total)" in summary
        assert "[~] replace system > host-name" in summary
        assert "'router-a' -> 'router-b'" in summary
