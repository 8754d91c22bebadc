"""Factory for turning plain node data into Node models.

This module is the single place where nodes are created, so every node in a
forest gets the same defaults whether it was loaded from a snapshot or added
interactively.
"""

import logging
import uuid
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from schema_forest.forest.nodes import Node, Property

logger = logging.getLogger(__name__)

DEFAULT_CAPTION = "Untitled"
DEFAULT_TYPE = "field"

NodeData = Union[Node, Mapping[str, Any]]

_KNOWN_KEYS = {
    "id",
    "caption",
    "type",
    "icon",
    "li_attr",
    "a_attr",
    "state",
    "properties",
    "children",
}


def forest_node_list(forest_data: Any) -> List[NodeData]:
    """Normalize a forest snapshot to its list of root node entries.

    Accepts the ``{"nodes": [...]}`` wrapper, a bare list of nodes, or None.
    """
    if not forest_data:
        return []
    if isinstance(forest_data, Mapping):
        return list(forest_data.get("nodes") or [])
    return list(forest_data)


def unique_id(prefix: str = "node") -> str:
    """Generate a random node id such as ``node-3f9c0a1b2d4e``."""
    random_part = uuid.uuid4().hex[:12]
    return f"{prefix}-{random_part}" if prefix else random_part


class NodeFactory:
    """Builds Node trees from plain data, filling defaults.

    Missing ids are generated, a missing caption becomes ``Untitled`` and a
    missing type becomes ``field``. Children are built recursively. Keys the
    Node model does not declare are passed through unchanged.
    """

    def __init__(self, id_factory: Optional[Callable[[], str]] = None, lenient_properties: bool = False):
        """Initialize the factory.

        Args:
            id_factory: Callable returning a fresh id; defaults to :func:`unique_id`
            lenient_properties: Drop property entries that are not valid
                properties instead of raising
        """
        self.id_factory = id_factory or unique_id
        self.lenient_properties = lenient_properties

    def build(self, options: NodeData) -> Node:
        """Convert node options into a Node with its whole subtree.

        Args:
            options: Plain node data or an existing Node (copied, ids kept)

        Returns:
            A new Node instance

        Raises:
            ValidationError: If a property entry is malformed and the factory
                is not lenient
        """
        if isinstance(options, Node):
            options = options.to_plain_data()

        extras = {key: value for key, value in options.items() if key not in _KNOWN_KEYS}
        properties = options.get("properties") or []

        return Node(
            id=options.get("id") or self.id_factory(),
            caption=options.get("caption") or DEFAULT_CAPTION,
            type=options.get("type") or DEFAULT_TYPE,
            icon=options.get("icon") or {},
            li_attr=options.get("li_attr") or {},
            a_attr=options.get("a_attr") or {},
            state=options.get("state") or {},
            properties=(
                self.build_usable_properties(properties)
                if self.lenient_properties
                else self.build_properties(properties)
            ),
            children=self.build_many(options.get("children") or []),
            **extras,
        )

    def build_many(self, options_list: Iterable[NodeData]) -> List[Node]:
        return [self.build(options) for options in options_list]

    @staticmethod
    def build_properties(properties: Iterable[Union[Property, Mapping[str, Any]]]) -> List[Property]:
        return [
            prop.model_copy(deep=True) if isinstance(prop, Property) else Property.model_validate(prop)
            for prop in properties
        ]

    @staticmethod
    def build_usable_properties(properties: Any) -> List[Property]:
        """Build the entries of a property list that form valid properties.

        Entries that are not mappings, and mappings that fail validation, are
        skipped at every nesting level.
        """
        if not isinstance(properties, (list, tuple)):
            return []

        usable = []
        for prop in properties:
            if isinstance(prop, Property):
                usable.append(prop.model_copy(deep=True))
                continue
            if not isinstance(prop, Mapping):
                logger.debug("Skipping property entry of type %s", type(prop).__name__)
                continue
            data = dict(prop)
            data["properties"] = NodeFactory.build_usable_properties(prop.get("properties"))
            try:
                usable.append(Property.model_validate(data))
            except ValidationError as e:
                logger.debug("Skipping invalid property '%s': %s", prop.get("caption"), e)
        return usable
