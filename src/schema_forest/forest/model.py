"""The node forest: a typed, constraint-checked tree of designer nodes.

Structural mutations run an admission check before they touch anything. When
a check fails the forest is left exactly as it was, the reason is handed to the
injected reporter and the call returns False. Registry lookups of unknown
types are configuration defects and raise instead.
"""

import logging
from collections import Counter
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Union

from schema_forest.errors import (
    AdmissionError,
    ChildrenLimitExceededError,
    DepthExceededError,
    DuplicateCaptionError,
    DuplicateNodeIdError,
    ForestError,
    InvalidChildTypeError,
    NodeNotFoundError,
    OperationNotAllowedError,
    UniqueTypeViolationError,
)
from schema_forest.forest.builder import (
    DEFAULT_CAPTION,
    DEFAULT_TYPE,
    NodeData,
    NodeFactory,
    forest_node_list,
)
from schema_forest.forest.captions import generate_unique_caption, sanitize_caption
from schema_forest.forest.nodes import Node, Property
from schema_forest.forest.reporting import InputProvider, LoggingReporter, Reporter
from schema_forest.forest.traversal import (
    collect_captions_by_type,
    collect_ids,
    find_node,
    find_parent,
    iter_preorder,
    iter_with_parents,
)
from schema_forest.typology.registry import ROOT_TYPE, TypeRegistry
from schema_forest.validator.constraints import ConstraintValidator

logger = logging.getLogger(__name__)

DEFAULT_ROOT_ID = "root"
DEFAULT_ROOT_CAPTION = "New Project"

ForestData = Union[None, Mapping[str, Any], Sequence[NodeData]]


class NodeForest:
    """An ordered forest of typed nodes sharing one TypeRegistry.

    Invariants kept by every successful mutation: node types are registered,
    ids are unique across the forest, a ``unique`` type has at most one
    instance, sibling captions are distinct, and every node respects its
    type's depth and children limits.

    Attributes:
        registry: Type rules governing the forest.
        validator: Constraint checks over ``registry``.
        reporter: Receives descriptions of rejected operations.
        input_provider: Asked for captions the caller did not supply.
        factory: Builds nodes from plain data.
        caption_separator: Replacement for whitespace runs in captions.

    Example:
        >>> forest = NodeForest.from_plain_data(registry, {"nodes": []})
        >>> forest.add_child("root", {"type": "table", "caption": "Users"})
        True
    """

    def __init__(
        self,
        registry: TypeRegistry,
        reporter: Optional[Reporter] = None,
        input_provider: Optional[InputProvider] = None,
        id_factory: Optional[Callable[[], str]] = None,
        caption_separator: str = "_",
    ) -> None:
        self.registry = registry
        self.validator = ConstraintValidator(registry)
        self.reporter = reporter or LoggingReporter()
        self.input_provider = input_provider
        self.factory = NodeFactory(id_factory)
        self.caption_separator = caption_separator
        self._nodes: List[Node] = []

    @classmethod
    def from_plain_data(
        cls, registry: TypeRegistry, forest_data: ForestData, **kwargs: Any
    ) -> "NodeForest":
        """Create a forest and load ``forest_data`` into it.

        Args:
            registry: Type rules for the forest
            forest_data: Snapshot accepted by :meth:`load`
            **kwargs: Passed to the constructor

        Returns:
            The loaded forest
        """
        forest = cls(registry, **kwargs)
        forest.load(forest_data)
        return forest

    @property
    def nodes(self) -> List[Node]:
        """Root nodes, in order."""
        return self._nodes

    def __iter__(self) -> Iterator[Node]:
        return iter_preorder(self._nodes)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    # Loading and export

    def load(self, forest_data: ForestData) -> None:
        """Replace the forest's content with a snapshot.

        Args:
            forest_data: ``{"nodes": [...]}``, a list of node dicts, or None.
                Empty input yields a single root built from the ``root`` rule.

        Raises:
            MissingRootTypeError: If input is empty and no ``root`` type exists
        """
        node_list = forest_node_list(forest_data)
        if node_list:
            self._nodes = self.factory.build_many(node_list)
            return

        rule = self.registry.root_rule()
        root_options = {
            "id": rule.id or DEFAULT_ROOT_ID,
            "caption": rule.caption or DEFAULT_ROOT_CAPTION,
            "type": ROOT_TYPE,
            "icon": rule.icon or {},
        }
        self._nodes = [self.factory.build(root_options)]
        logger.info("No nodes provided, created default root '%s'", root_options["caption"])

    def to_plain_data(self) -> Dict[str, List[Dict[str, Any]]]:
        """Export the forest as ``{"nodes": [...]}``, the same shape :meth:`load` reads."""
        return {"nodes": [node.to_plain_data() for node in self._nodes]}

    # Queries

    def find_by_id(self, node_id: str) -> Optional[Node]:
        return find_node(self._nodes, node_id)

    def find_parent_by_id(self, node_id: str) -> Optional[Node]:
        """Find the parent of a node; None when it is a root or does not exist."""
        return find_parent(self._nodes, node_id)

    def depth_of(self, node_id: str) -> int:
        """Length of the parent chain from the node to its root (roots are 1).

        Raises:
            NodeNotFoundError: If the node does not exist
        """
        for _, node, depth in iter_with_parents(self._nodes):
            if node.id == node_id:
                return depth
        raise NodeNotFoundError(node_id)

    def breadcrumb(self, node_id: str) -> List[Dict[str, str]]:
        """Navigation path from the root down to the node.

        Returns:
            ``[{"label": caption, "id": id}, ...]`` root first; empty if the node
            does not exist
        """
        crumbs: List[Dict[str, str]] = []
        current = self.find_by_id(node_id)
        while current is not None:
            crumbs.insert(0, {"label": current.caption, "id": current.id})
            current = self.find_parent_by_id(current.id)
        return crumbs

    def child_types(self, parent_id: str) -> List[str]:
        parent = self.find_by_id(parent_id)
        if parent is None:
            return []
        return [child.type for child in parent.children]

    def captions_of_type(self, type_name: str) -> List[str]:
        return collect_captions_by_type(self._nodes, type_name)

    def has_node_of_type(self, type_name: str) -> bool:
        return any(node.type == type_name for node in self)

    def type_census(self) -> Dict[str, int]:
        """Count nodes per type, in order of first appearance."""
        return dict(Counter(node.type for node in self))

    # Mutations

    def add_child(self, parent_id: str, node_data: NodeData) -> bool:
        """Add a new node (with any subtree it carries) under a parent.

        The caption is sanitized and made unique among its siblings, then the
        child type, unique-type, id, children-count and depth checks run. The
        node is appended only if all of them pass.

        Args:
            parent_id: Id of the parent node
            node_data: Plain node data or a Node to copy

        Returns:
            True if the node was added, False if it was rejected

        Raises:
            UnknownTypeError: If the new node's type is not registered
        """
        try:
            parent, node = self._admit_child(parent_id, node_data)
        except (NodeNotFoundError, AdmissionError) as e:
            self._reject(e)
            return False

        parent.children.append(node)
        logger.debug("Added %s '%s' (%s) under '%s'", node.type, node.caption, node.id, parent.id)
        return True

    def remove_node(self, node_id: str) -> bool:
        """Remove a node and its subtree.

        Returns:
            True if the node was found and removed
        """
        parent = self.find_parent_by_id(node_id)
        siblings = parent.children if parent is not None else self._nodes
        for index, node in enumerate(siblings):
            if node.id == node_id:
                del siblings[index]
                logger.debug("Removed %s '%s' (%s)", node.type, node.caption, node_id)
                return True

        self._reject(NodeNotFoundError(node_id))
        return False

    def update_node(self, node_id: str, patch: Mapping[str, Any]) -> bool:
        """Shallow-merge ``patch`` into a node in place.

        ``children`` and ``properties`` given as plain data are converted to
        models; other values are assigned as-is.

        Returns:
            True if the node was found and updated
        """
        node = self.find_by_id(node_id)
        if node is None:
            self._reject(NodeNotFoundError(node_id))
            return False

        for key, value in patch.items():
            if key == "children":
                value = [child if isinstance(child, Node) else self.factory.build(child) for child in value]
            elif key == "properties":
                value = [
                    prop if isinstance(prop, Property) else Property.model_validate(prop)
                    for prop in value
                ]
            setattr(node, key, value)
        return True

    def rename_node(self, node_id: str, caption: Optional[str] = None) -> bool:
        """Rename a node if its type allows it.

        When ``caption`` is None the input provider is asked for one. Unlike
        :meth:`add_child`, a caption already used in the node's uniqueness
        scope is rejected rather than suffixed.

        Returns:
            True if the node was renamed
        """
        node = self.find_by_id(node_id)
        if node is None:
            self._reject(NodeNotFoundError(node_id))
            return False

        try:
            if not self.registry.can_rename(node.type):
                raise OperationNotAllowedError("rename", node.type)

            if caption is None and self.input_provider is not None:
                caption = self.input_provider.request_caption(f"Enter the new name for '{node.caption}':")
            sanitized = sanitize_caption(caption or "", self.caption_separator)
            if not sanitized:
                self.reporter.report("Rename cancelled or caption is empty.")
                return False

            parent = self.find_parent_by_id(node_id)
            taken = self._scope_captions(parent, node.type, exclude=node)
            if sanitized in taken:
                raise DuplicateCaptionError(sanitized, self._scope_name(parent))
        except (AdmissionError, OperationNotAllowedError) as e:
            self._reject(e)
            return False

        node.caption = sanitized
        return True

    def delete_node(self, node_id: str) -> bool:
        """Remove a node if its type allows deletion."""
        node = self.find_by_id(node_id)
        if node is None:
            self._reject(NodeNotFoundError(node_id))
            return False
        if not self.registry.can_delete(node.type):
            self._reject(OperationNotAllowedError("delete", node.type))
            return False
        return self.remove_node(node_id)

    # Auditing

    def check(self) -> List[str]:
        """Audit the whole forest against the registry.

        Loading does not validate a snapshot; this reports every problem found
        in it: unknown types, invalid child types, depth and children limits,
        extra instances of unique types, duplicate ids and caption clashes.

        Returns:
            Problem descriptions, empty when the forest is consistent
        """
        problems: List[str] = []
        seen_ids = set()
        unique_counts: Counter = Counter()

        problems.extend(self._sibling_problems(None, self._nodes))
        for parent, node, depth in iter_with_parents(self._nodes):
            where = f"{node.caption} ({node.id})"
            if node.id in seen_ids:
                problems.append(f"{where}: {DuplicateNodeIdError(node.id)}")
            seen_ids.add(node.id)

            if node.type not in self.registry:
                problems.append(f"{where}: Node type '{node.type}' does not exist")
                continue

            if parent is not None and parent.type in self.registry:
                if not self.registry.is_child_type_allowed(parent.type, node.type):
                    problems.append(f"{where}: {InvalidChildTypeError(parent.type, node.type)}")
            if not self.validator.is_valid_depth(node.type, depth):
                error = DepthExceededError(node.type, depth, self.registry.max_depth(node.type))
                problems.append(f"{where}: {error}")
            if not self.validator.is_valid_children_count(node.type, len(node.children)):
                max_children = self.registry.max_children(node.type)
                error = ChildrenLimitExceededError(node.type, len(node.children), max_children)
                problems.append(f"{where}: {error}")

            if self.registry.is_unique(node.type):
                unique_counts[node.type] += 1
            problems.extend(self._sibling_problems(node, node.children))

        for type_name, count in unique_counts.items():
            if count > 1:
                problems.append(f"{UniqueTypeViolationError(type_name)} (found {count})")
        return problems

    # Internals

    def _admit_child(self, parent_id: str, node_data: NodeData):
        parent = self.find_by_id(parent_id)
        if parent is None:
            raise NodeNotFoundError(parent_id, "parent node")

        options = node_data.to_plain_data() if isinstance(node_data, Node) else dict(node_data)
        child_type = options.get("type") or DEFAULT_TYPE
        rule = self.registry.get_rule(child_type)
        options["type"] = child_type
        options["caption"] = self._resolve_caption(parent, child_type, options.get("caption"))

        if not self.registry.is_child_type_allowed(parent.type, child_type):
            raise InvalidChildTypeError(parent.type, child_type)

        if options.get("properties") is None:
            options["properties"] = [prop.to_plain_data() for prop in rule.properties]
        candidate = self.factory.build(options)
        self.validator.check_child_types(candidate)

        present = {node.type for node in self}
        for node in iter_preorder([candidate]):
            if self.registry.is_unique(node.type):
                if node.type in present:
                    raise UniqueTypeViolationError(node.type)
                present.add(node.type)

        existing_ids = set(collect_ids(self._nodes))
        candidate_ids = collect_ids([candidate])
        for node_id in candidate_ids:
            if node_id in existing_ids:
                raise DuplicateNodeIdError(node_id)
            existing_ids.add(node_id)

        count = len(parent.children) + 1
        if not self.validator.is_valid_children_count(parent.type, count):
            raise ChildrenLimitExceededError(parent.type, count, self.registry.max_children(parent.type))
        self.validator.check_subtree(candidate, self.depth_of(parent.id) + 1)
        return parent, candidate

    def _resolve_caption(self, parent: Node, type_name: str, requested: Optional[str]) -> str:
        caption = sanitize_caption(requested or "", self.caption_separator)
        if not caption and self.input_provider is not None:
            answer = self.input_provider.request_caption(f"Enter a caption for the new {type_name}:")
            caption = sanitize_caption(answer or "", self.caption_separator)
        if not caption:
            caption = self.registry.get_rule(type_name).caption or DEFAULT_CAPTION

        taken = self._scope_captions(parent, type_name)
        return generate_unique_caption(caption, taken, self.caption_separator)

    def _scope_captions(
        self, parent: Optional[Node], type_name: str, exclude: Optional[Node] = None
    ) -> List[str]:
        """Captions a node of ``type_name`` under ``parent`` must not repeat.

        Siblings always share one caption space. A ``unique`` type also avoids
        the captions of its own type anywhere in the forest.
        """
        siblings = parent.children if parent is not None else self._nodes
        taken = [node.caption for node in siblings if node is not exclude]
        if self.registry.get_rule(type_name).unique:
            taken.extend(
                node.caption for node in self if node.type == type_name and node is not exclude
            )
        return taken

    def _scope_name(self, parent: Optional[Node]) -> str:
        if parent is None:
            return "the root level"
        return f"the {parent.type} '{parent.caption}'"

    def _sibling_problems(self, parent: Optional[Node], siblings: List[Node]) -> List[str]:
        owner = f"{parent.caption} ({parent.id})" if parent is not None else "root level"
        return [
            f"{owner}: caption '{caption}' is used by more than one child"
            for caption in _duplicates(node.caption for node in siblings)
        ]

    def _reject(self, error: ForestError) -> None:
        logger.debug("Rejected operation: %s", error)
        self.reporter.report(str(error), error)


def _duplicates(captions) -> List[str]:
    counts = Counter(captions)
    return [caption for caption, count in counts.items() if count > 1]
