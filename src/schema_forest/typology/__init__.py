"""Node type rules and the registry that serves them."""

from schema_forest.typology.base import NodeTypeAction, TypeRule, TypeRuleSource
from schema_forest.typology.json_source import JsonTypeRuleSource
from schema_forest.typology.registry import TypeRegistry

__all__ = ["NodeTypeAction", "TypeRule", "TypeRuleSource", "JsonTypeRuleSource", "TypeRegistry"]
