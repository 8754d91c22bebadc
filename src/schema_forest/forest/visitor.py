"""Visitor pattern for traversing and processing forest nodes.

Node types are data (names from the type registry) rather than classes, so
dispatch is by type name: ``visit`` calls ``visit_<type>`` when the visitor
defines it and falls back to ``visit_node`` otherwise.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, List

if TYPE_CHECKING:
    from schema_forest.forest.nodes import Node


class ForestVisitor(ABC):
    """Abstract base class for forest visitors.

    Implementations can traverse the forest and perform operations like SQL
    generation, auditing or statistics collection.
    """

    def visit(self, node: "Node") -> Any:
        """Dispatch to the handler for the node's type.

        Args:
            node: The node to visit

        Returns:
            Result of the selected handler
        """
        handler = getattr(self, f"visit_{node.type}", None)
        if handler is None or not callable(handler):
            return self.visit_node(node)
        return handler(node)

    def descend(self, node: "Node") -> List[Any]:
        """Visit each child of ``node`` in order and collect the results."""
        return [child.accept(self) for child in node.children]

    @abstractmethod
    def visit_node(self, node: "Node") -> Any:
        """Visit a node whose type has no dedicated handler.

        Args:
            node: The node to visit

        Returns:
            Processed result
        """
        pass
