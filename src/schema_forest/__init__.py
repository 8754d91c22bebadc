"""Schema Forest - Typed database design trees compiled to SQL DDL."""

from schema_forest.config import Config, load_config
from schema_forest.errors import (
    AdmissionError,
    ForestError,
    MissingRootError,
    NodeNotFoundError,
    UnknownTypeError,
)
from schema_forest.forest.model import NodeForest
from schema_forest.forest.nodes import Node, Property
from schema_forest.generator.sql import SchemaCompiler, compile_forest
from schema_forest.typology.json_source import JsonTypeRuleSource
from schema_forest.typology.registry import TypeRegistry
from schema_forest.validator.constraints import ConstraintValidator

__version__ = "0.1.0"

__all__ = [
    "Config",
    "load_config",
    "NodeForest",
    "Node",
    "Property",
    "TypeRegistry",
    "JsonTypeRuleSource",
    "ConstraintValidator",
    "SchemaCompiler",
    "compile_forest",
    "ForestError",
    "AdmissionError",
    "UnknownTypeError",
    "NodeNotFoundError",
    "MissingRootError",
]
