"""Exception hierarchy for schema-forest.

Admission errors describe a structural mutation that was refused. They are
recoverable: the forest is left exactly as it was before the call.
"""

from typing import Optional


class ForestError(Exception):
    """Base class for all schema-forest errors."""


class UnknownTypeError(ForestError, KeyError):
    """Raised when a type name is not present in the type registry."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Node type '{type_name}' does not exist")

    def __str__(self) -> str:
        return self.args[0]


class NodeNotFoundError(ForestError):
    """Raised when an operation targets a node id that is not in the forest."""

    def __init__(self, node_id: str, role: str = "node") -> None:
        self.node_id = node_id
        super().__init__(f"No {role} found with id '{node_id}'")


class AdmissionError(ForestError):
    """Base class for rejected structural mutations."""


class InvalidChildTypeError(AdmissionError):
    """Raised when a child type is not allowed under a parent type."""

    def __init__(self, parent_type: str, child_type: str) -> None:
        self.parent_type = parent_type
        self.child_type = child_type
        super().__init__(
            f"A node of type '{child_type}' is not a valid child for a node of type '{parent_type}'"
        )


class DepthExceededError(AdmissionError):
    """Raised when a node would sit deeper than its type's maxDepth."""

    def __init__(self, type_name: str, depth: int, max_depth: Optional[int]) -> None:
        self.type_name = type_name
        self.depth = depth
        self.max_depth = max_depth
        super().__init__(
            f"A node of type '{type_name}' cannot be placed at depth {depth} "
            f"(maximum allowed depth is {max_depth})"
        )


class ChildrenLimitExceededError(AdmissionError):
    """Raised when a node would hold more children than its type allows."""

    def __init__(self, type_name: str, count: int, max_children: Optional[int]) -> None:
        self.type_name = type_name
        self.count = count
        self.max_children = max_children
        super().__init__(
            f"A node of type '{type_name}' cannot hold {count} children "
            f"(maximum allowed is {max_children})"
        )


class UniqueTypeViolationError(AdmissionError):
    """Raised when a second instance of a globally unique type is added."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(f"Only one node of type '{type_name}' is allowed in the forest")


class DuplicateNodeIdError(AdmissionError):
    """Raised when an explicit node id is already used in the forest."""

    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"A node with id '{node_id}' already exists")


class DuplicateCaptionError(AdmissionError):
    """Raised when a rename would repeat a caption within its uniqueness scope."""

    def __init__(self, caption: str, scope: str) -> None:
        self.caption = caption
        super().__init__(f"The caption '{caption}' already exists in {scope}")


class OperationNotAllowedError(ForestError):
    """Raised when a type rule forbids renaming or deleting its nodes."""

    def __init__(self, action: str, type_name: str) -> None:
        self.action = action
        self.type_name = type_name
        super().__init__(f"Action '{action}' is not allowed on nodes of type '{type_name}'")


class MissingRootError(ForestError):
    """Raised by the compiler when no top-level node has type 'root'."""


class MissingRootTypeError(ForestError):
    """Raised when the type registry has no 'root' rule to synthesize a root from."""


class TypeRuleSourceError(ForestError):
    """Raised when the type-rule table cannot be read or parsed."""
