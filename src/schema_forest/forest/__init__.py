"""Forest module for representing the designer tree as typed nodes.

The :class:`~schema_forest.forest.model.NodeForest` container lives in
``schema_forest.forest.model``; it depends on the typology package, which in
turn uses the node models exported here.
"""

from schema_forest.forest.builder import NodeFactory, forest_node_list, unique_id
from schema_forest.forest.captions import generate_unique_caption, sanitize_caption
from schema_forest.forest.nodes import Node, Property, find_property
from schema_forest.forest.reporting import (
    InputProvider,
    LoggingReporter,
    QueuedInputProvider,
    RecordingReporter,
    Reporter,
)
from schema_forest.forest.visitor import ForestVisitor

__all__ = [
    "Node",
    "Property",
    "find_property",
    "NodeFactory",
    "forest_node_list",
    "unique_id",
    "generate_unique_caption",
    "sanitize_caption",
    "Reporter",
    "LoggingReporter",
    "RecordingReporter",
    "InputProvider",
    "QueuedInputProvider",
    "ForestVisitor",
]
