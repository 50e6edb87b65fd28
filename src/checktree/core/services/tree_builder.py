# ♥♥─── Checklist Tree Builder ─────────────────────────────────────────────────────
"""Build and walk the in-memory checklist forest.

The forest is always rebuilt from the flat row list. Rows whose ``parent_id``
points at a missing row are placed at the root so nothing is ever dropped.
``parent_id`` chains must be acyclic; rows caught in a cycle never reach a root.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from checktree.core.models import ChecklistItem, ChecklistNode
from checktree.custom_logger import log


if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


def _position_key(node: ChecklistNode) -> int:
    return node.position


def _fresh_node(item: ChecklistItem | ChecklistNode) -> ChecklistNode:
    """A childless node for a row, never sharing state with the input."""
    if isinstance(item, ChecklistNode):
        return item.model_copy(update={"children": []})
    return ChecklistNode.from_item(item)


def _sort_levels(nodes: list[ChecklistNode]) -> None:
    nodes.sort(key=_position_key)
    for node in nodes:
        if node.children:
            _sort_levels(node.children)


# ─── Build ──────────────────────────────────────────────────────────────────────
def build_tree(items: Iterable[ChecklistItem | ChecklistNode]) -> list[ChecklistNode]:
    """Convert a flat list of rows into a forest sorted by ``position``.

    Sorting is stable, so siblings sharing a position keep their input order.

    :param items: Stored rows or previously built nodes (their children are ignored).
    :returns: The root nodes, each with ``children`` populated recursively.
    """
    lookup: dict[str, ChecklistNode] = {}
    ordered: list[ChecklistNode] = []
    for item in items:
        node = _fresh_node(item)
        lookup[node.id] = node
        ordered.append(node)

    roots: list[ChecklistNode] = []
    for node in ordered:
        if node.parent_id is None:
            roots.append(node)
            continue
        parent = lookup.get(node.parent_id)
        if parent is None or parent is node:
            log.warning("Checklist item {} has dangling parent {}; placing it at the root.", node.id, node.parent_id)
            roots.append(node)
            continue
        parent.children.append(node)

    _sort_levels(roots)
    return roots


# ─── Traversal ──────────────────────────────────────────────────────────────────
def iter_tree(roots: Iterable[ChecklistNode], depth: int = 0) -> Iterator[tuple[ChecklistNode, int]]:
    """Yield ``(node, depth)`` pairs depth-first, parents before children."""
    for node in roots:
        yield node, depth
        yield from iter_tree(node.children, depth + 1)


def flatten_tree(roots: Iterable[ChecklistNode]) -> list[ChecklistNode]:
    """Return every node of the forest in depth-first display order."""
    return [node for node, _ in iter_tree(roots)]


def find_item_by_id(roots: Iterable[ChecklistNode], item_id: str) -> ChecklistNode | None:
    """Locate a node anywhere in the forest.

    :param roots: The forest to search.
    :param item_id: The id to look for.
    :returns: The node, or None when it is not present.
    """
    for node, _ in iter_tree(roots):
        if node.id == item_id:
            return node
    return None


def sibling_group(roots: list[ChecklistNode], item_id: str) -> list[ChecklistNode] | None:
    """Return the list that holds ``item_id``: the root list or its parent's ``children``."""
    if any(node.id == item_id for node in roots):
        return roots
    for node, _ in iter_tree(roots):
        if any(child.id == item_id for child in node.children):
            return node.children
    return None


def children_of(roots: Iterable[ChecklistNode], parent_id: str | None) -> list[ChecklistNode]:
    """Nodes whose ``parent_id`` equals ``parent_id`` (roots for None)."""
    return [node for node in flatten_tree(roots) if node.parent_id == parent_id]


def next_position(siblings: Iterable[ChecklistNode]) -> int:
    """``max(position) + 1`` over a sibling group, or 0 when it is empty."""
    return max((node.position for node in siblings), default=-1) + 1


def collect_descendant_ids(node: ChecklistNode) -> list[str]:
    """Ids below ``node``, deepest first, so they can be deleted leaf-first."""
    collected: list[str] = []
    for child in node.children:
        collected.extend(collect_descendant_ids(child))
        collected.append(child.id)
    return collected


def count_completed(roots: Iterable[ChecklistNode]) -> tuple[int, int]:
    """Return ``(completed, total)`` over the whole forest."""
    nodes = flatten_tree(roots)
    return sum(1 for node in nodes if node.is_completed), len(nodes)


# ─── Local Patches ──────────────────────────────────────────────────────────────
def update_item_in_tree(roots: Iterable[ChecklistNode], item_id: str, **fields: Any) -> ChecklistNode | None:
    """Assign ``fields`` on the matching node in place.

    :returns: The patched node, or None when ``item_id`` is not in the forest.
    """
    node = find_item_by_id(roots, item_id)
    if node is None:
        return None
    for field_name, value in fields.items():
        setattr(node, field_name, value)
    return node


def remove_item_from_tree(roots: Iterable[ChecklistNode], item_ids: Iterable[str]) -> list[ChecklistNode]:
    """Rebuild the forest without ``item_ids``.

    Children of a removed node that are not removed themselves fall back to the
    root, matching how the store leaves them.
    """
    removed = set(item_ids)
    return build_tree(node for node in flatten_tree(roots) if node.id not in removed)
