"""Structural constraint checks for forest nodes.

The validator holds no state besides the registry it reads limits from. Each
check comes in two forms: a boolean ``is_*`` / ``validate_*`` predicate and a
raising ``check_*`` form whose exception names the offending node, which the
forest uses to explain a rejection.
"""

from typing import Optional

from schema_forest.errors import (
    ChildrenLimitExceededError,
    DepthExceededError,
    InvalidChildTypeError,
)
from schema_forest.forest.nodes import Node
from schema_forest.typology.registry import TypeRegistry


class ConstraintValidator:
    """Checks nodes and subtrees against the limits in a TypeRegistry.

    Attributes:
        registry: The type registry supplying the rules.
    """

    def __init__(self, registry: TypeRegistry):
        self.registry = registry

    def is_valid_depth(self, type_name: str, depth: int) -> bool:
        """Whether a node of ``type_name`` may sit at ``depth`` (roots are 1).

        Raises:
            UnknownTypeError: If the type is not registered
        """
        return _within(depth, self.registry.max_depth(type_name))

    def is_valid_children_count(self, type_name: str, count: int) -> bool:
        """Whether a node of ``type_name`` may hold ``count`` direct children.

        Raises:
            UnknownTypeError: If the type is not registered
        """
        return _within(count, self.registry.max_children(type_name))

    def check_subtree(self, node: Node, depth: int = 1) -> None:
        """Check depth and children count at every level of a subtree.

        The walk is depth-first in pre-order and stops at the first violation,
        so limits are enforced down to the deepest descendant rather than only
        at ``node`` itself.

        Args:
            node: Root of the subtree to check
            depth: Depth at which ``node`` sits (or would sit) in the forest

        Raises:
            DepthExceededError: If a node sits deeper than its type allows
            ChildrenLimitExceededError: If a node has too many children
            UnknownTypeError: If a node's type is not registered
        """
        if not self.is_valid_depth(node.type, depth):
            raise DepthExceededError(node.type, depth, self.registry.max_depth(node.type))

        count = len(node.children)
        if not self.is_valid_children_count(node.type, count):
            raise ChildrenLimitExceededError(node.type, count, self.registry.max_children(node.type))

        for child in node.children:
            self.check_subtree(child, depth + 1)

    def validate_subtree(self, node: Node, depth: int = 1) -> bool:
        """Boolean form of :meth:`check_subtree`."""
        try:
            self.check_subtree(node, depth)
        except (DepthExceededError, ChildrenLimitExceededError):
            return False
        return True

    def check_child_types(self, node: Node) -> None:
        """Check that every child in the subtree is a valid child of its parent.

        Raises:
            InvalidChildTypeError: For the first child whose type its parent's
                rule does not list
            UnknownTypeError: If a parent's type is not registered
        """
        for child in node.children:
            if not self.registry.is_child_type_allowed(node.type, child.type):
                raise InvalidChildTypeError(node.type, child.type)
            self.check_child_types(child)


def _within(value: int, limit: Optional[int]) -> bool:
    return limit is None or value <= limit
