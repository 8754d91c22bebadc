"""Recursive traversal helpers over lists of forest nodes.

All helpers walk depth-first in pre-order, so "first match" always means the
first node in insertion order.
"""

from typing import Iterable, Iterator, List, Optional, Tuple

from schema_forest.forest.nodes import Node


def iter_preorder(nodes: Iterable[Node]) -> Iterator[Node]:
    """Yield every node of ``nodes`` and their descendants in pre-order."""
    for node in nodes:
        yield node
        yield from iter_preorder(node.children)


def iter_with_parents(
    nodes: Iterable[Node], parent: Optional[Node] = None, depth: int = 1
) -> Iterator[Tuple[Optional[Node], Node, int]]:
    """Yield ``(parent, node, depth)`` for every node in pre-order.

    Args:
        nodes: Sibling nodes to start from
        parent: Parent of ``nodes``, None for forest roots
        depth: Depth of ``nodes`` (roots are depth 1)
    """
    for node in nodes:
        yield parent, node, depth
        yield from iter_with_parents(node.children, node, depth + 1)


def find_node(nodes: Iterable[Node], node_id: str) -> Optional[Node]:
    for node in iter_preorder(nodes):
        if node.id == node_id:
            return node
    return None


def find_parent(nodes: Iterable[Node], node_id: str) -> Optional[Node]:
    """Find the immediate parent of ``node_id``; None for roots and unknown ids."""
    for node in iter_preorder(nodes):
        if any(child.id == node_id for child in node.children):
            return node
    return None


def collect_captions_by_type(nodes: Iterable[Node], type_name: str) -> List[str]:
    return [node.caption for node in iter_preorder(nodes) if node.type == type_name]


def collect_ids(nodes: Iterable[Node]) -> List[str]:
    return [node.id for node in iter_preorder(nodes)]
