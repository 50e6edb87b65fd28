"""Tests for building and walking the checklist forest."""

import random

import pytest

from checktree.core.models import ChecklistNode
from checktree.core.services import (
    build_tree,
    children_of,
    collect_descendant_ids,
    count_completed,
    find_item_by_id,
    flatten_tree,
    next_position,
    remove_item_from_tree,
    sibling_group,
    update_item_in_tree,
)
from conftest import make_item


def ids(nodes):
    return [node.id for node in nodes]


def random_acyclic_rows(seed: int, count: int):
    """Rows whose parent always appears earlier, so chains are acyclic."""
    rng = random.Random(seed)
    rows = []
    for index in range(count):
        parent = None
        if rows and rng.random() < 0.6:
            parent = rng.choice(rows).id
        rows.append(make_item(f"n{index}", rng.randint(0, 20), parent_id=parent))
    rng.shuffle(rows)
    return rows


# =============================================================================
# build_tree
# =============================================================================


class TestBuildTree:
    """Tests for build_tree."""

    def test_roots_and_children_scenario(self):
        """Two roots, one child under the first."""
        rows = [make_item("1", 0), make_item("2", 1), make_item("3", 0, parent_id="1")]
        roots = build_tree(rows)
        assert ids(roots) == ["1", "2"]
        assert ids(roots[0].children) == ["3"]
        assert roots[1].children == []

    def test_levels_sorted_by_position(self, nested_rows):
        roots = build_tree(nested_rows)
        assert ids(roots) == ["a", "b", "c"]
        assert ids(roots[0].children) == ["a1", "a2"]
        assert ids(roots[0].children[0].children) == ["a1x"]

    def test_dangling_parent_becomes_root(self):
        rows = [make_item("a", 1), make_item("orphan", 0, parent_id="gone")]
        roots = build_tree(rows)
        assert ids(roots) == ["orphan", "a"]
        assert roots[0].parent_id == "gone"

    def test_equal_positions_keep_input_order(self):
        rows = [make_item("x", 0), make_item("y", 0), make_item("z", 0)]
        assert ids(build_tree(rows)) == ["x", "y", "z"]

    def test_empty_input(self):
        assert build_tree([]) == []

    @pytest.mark.parametrize("seed", [1, 7, 42, 2024])
    def test_item_count_preserved(self, seed):
        rows = random_acyclic_rows(seed, 60)
        assert len(flatten_tree(build_tree(rows))) == len(rows)

    @pytest.mark.parametrize("seed", [3, 99])
    def test_rebuild_is_idempotent(self, seed):
        rows = random_acyclic_rows(seed, 40)
        first = [root.model_dump() for root in build_tree(rows)]
        second = [root.model_dump() for root in build_tree(rows)]
        assert first == second

    def test_rebuild_from_nodes_ignores_old_children(self, nested_rows):
        roots = build_tree(nested_rows)
        rebuilt = build_tree(flatten_tree(roots))
        assert [r.model_dump() for r in rebuilt] == [r.model_dump() for r in roots]
        assert rebuilt[0] is not roots[0]

    def test_input_rows_are_not_modified(self, nested_rows):
        build_tree(nested_rows)
        assert all(not hasattr(row, "children") for row in nested_rows)


# =============================================================================
# Traversal helpers
# =============================================================================


class TestTraversal:
    """Tests for lookups over a built forest."""

    def test_flatten_is_depth_first(self, nested_rows):
        assert ids(flatten_tree(build_tree(nested_rows))) == ["a", "a1", "a1x", "a2", "b", "c"]

    def test_find_item_by_id(self, nested_rows):
        roots = build_tree(nested_rows)
        assert find_item_by_id(roots, "a1x").parent_id == "a1"
        assert find_item_by_id(roots, "missing") is None

    def test_sibling_group_returns_containing_list(self, nested_rows):
        roots = build_tree(nested_rows)
        assert sibling_group(roots, "b") is roots
        assert sibling_group(roots, "a2") is roots[0].children
        assert sibling_group(roots, "missing") is None

    def test_children_of(self, nested_rows):
        roots = build_tree(nested_rows)
        assert ids(children_of(roots, "a")) == ["a1", "a2"]
        assert ids(children_of(roots, None)) == ["a", "b", "c"]
        assert children_of(roots, "c") == []

    def test_next_position(self):
        assert next_position([]) == 0
        nodes = build_tree([make_item("p", 0), make_item("q", 5)])
        assert next_position(nodes) == 6

    def test_collect_descendant_ids_leaf_first(self, nested_rows):
        roots = build_tree(nested_rows)
        assert collect_descendant_ids(roots[0]) == ["a1x", "a1", "a2"]
        assert collect_descendant_ids(roots[1]) == []

    def test_count_completed(self):
        rows = [make_item("a", 0, completed=True), make_item("b", 1), make_item("c", 0, parent_id="a", completed=True)]
        assert count_completed(build_tree(rows)) == (2, 3)


# =============================================================================
# Local patches
# =============================================================================


class TestLocalPatches:
    """Tests for in-memory patches applied before the store confirms."""

    def test_update_item_in_tree(self, nested_rows):
        roots = build_tree(nested_rows)
        patched = update_item_in_tree(roots, "a1x", is_completed=True, text="done")
        assert patched is find_item_by_id(roots, "a1x")
        assert patched.is_completed is True
        assert patched.text == "done"

    def test_update_missing_item_returns_none(self, nested_rows):
        assert update_item_in_tree(build_tree(nested_rows), "missing", text="x") is None

    def test_remove_subtree(self, nested_rows):
        roots = build_tree(nested_rows)
        remaining = remove_item_from_tree(roots, ["a1x", "a1", "a2", "a"])
        assert ids(flatten_tree(remaining)) == ["b", "c"]

    def test_remove_single_item_promotes_children_to_root(self, nested_rows):
        roots = build_tree(nested_rows)
        remaining = remove_item_from_tree(roots, ["a"])
        assert ids(remaining) == ["a1", "a2", "b", "c"]
        assert ids(remaining[0].children) == ["a1x"]


class TestExport:
    """Tests for the camelCase export shape."""

    def test_export_uses_camel_case(self):
        roots = build_tree([make_item("a", 0), make_item("b", 0, parent_id="a", completed=True)])
        exported = roots[0].to_export_dict()
        assert exported["parentId"] is None
        assert exported["isCompleted"] is False
        child = exported["children"][0]
        assert child == {"id": "b", "parentId": "a", "text": "item b", "isCompleted": True, "position": 0, "children": []}

    def test_node_accepts_camel_case_input(self):
        node = ChecklistNode.model_validate({"id": "x", "taskId": "t", "parentId": "p", "text": "hi", "isCompleted": True, "position": 3})
        assert node.parent_id == "p"
        assert node.is_completed is True
