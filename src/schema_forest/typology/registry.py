"""Type registry: the read-only table of node type rules."""

import json
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from schema_forest.errors import MissingRootTypeError, UnknownTypeError
from schema_forest.typology.base import NodeTypeAction, TypeRule

ROOT_TYPE = "root"

DEFAULT_ICON = {"type": "class", "value": "bi bi-file-earmark"}


class TypeRegistry:
    """Holds the structural rules of every node type.

    The registry is a pure lookup table with no knowledge of any tree. Rules are
    frozen pydantic models and the mapping itself is exposed read-only, so a
    registry does not change after it has been loaded.

    Example:
        >>> registry = TypeRegistry({"root": {"validChildren": ["table"]}, "table": {}})
        >>> registry.is_child_type_allowed("root", "table")
        True
    """

    def __init__(self, types: Optional[Mapping[str, Union[TypeRule, Mapping[str, Any]]]] = None):
        """Initialize the registry.

        Args:
            types: Mapping of type name to a TypeRule or its plain-data form
        """
        rules: Dict[str, TypeRule] = {}
        for name, rule in (types or {}).items():
            rules[name] = rule if isinstance(rule, TypeRule) else TypeRule.model_validate(rule)
        self._rules = MappingProxyType(rules)

    @property
    def rules(self) -> Mapping[str, TypeRule]:
        return self._rules

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._rules

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def get_rule(self, type_name: str) -> TypeRule:
        """Get the rule for a type.

        Args:
            type_name: The node type name

        Returns:
            The TypeRule bound to ``type_name``

        Raises:
            UnknownTypeError: If the type is not registered
        """
        try:
            return self._rules[type_name]
        except KeyError:
            raise UnknownTypeError(type_name) from None

    def root_rule(self) -> TypeRule:
        """Get the rule used to synthesize a default root node.

        Raises:
            MissingRootTypeError: If no ``root`` type is registered
        """
        if ROOT_TYPE not in self._rules:
            raise MissingRootTypeError(f"The type registry has no '{ROOT_TYPE}' type")
        return self._rules[ROOT_TYPE]

    def valid_child_types(self, type_name: str) -> List[str]:
        return list(self.get_rule(type_name).valid_children)

    def is_child_type_allowed(self, parent_type: str, child_type: str) -> bool:
        """Check whether ``child_type`` may be a direct child of ``parent_type``.

        An unlisted child type is simply not allowed; only an unknown parent
        type is an error.

        Raises:
            UnknownTypeError: If ``parent_type`` is not registered
        """
        return child_type in self.get_rule(parent_type).valid_children

    def max_children(self, type_name: str) -> Optional[int]:
        """Maximum number of direct children, None when unbounded (missing or 0)."""
        return self.get_rule(type_name).max_children or None

    def max_depth(self, type_name: str) -> Optional[int]:
        """Maximum depth (roots are depth 1), None when unbounded (missing or 0)."""
        return self.get_rule(type_name).max_depth or None

    def is_unique(self, type_name: str) -> bool:
        return self.get_rule(type_name).unique

    def icon(self, type_name: str, default: Any = None) -> Any:
        """Get a type's icon, falling back to ``default`` or the generic file icon."""
        icon = self.get_rule(type_name).icon
        if icon:
            return icon
        return dict(DEFAULT_ICON) if default is None else default

    def action_details(self, type_name: str, action: str) -> Optional[NodeTypeAction]:
        return self.get_rule(type_name).actions.get(action)

    def is_action_allowed(self, type_name: str, action: str) -> bool:
        return action in self.get_rule(type_name).actions

    def can_rename(self, type_name: str) -> bool:
        rule = self.get_rule(type_name)
        return rule.rename_allowed or "rename" in rule.actions

    def can_delete(self, type_name: str) -> bool:
        rule = self.get_rule(type_name)
        return rule.delete_allowed or "delete" in rule.actions

    def type_names(self) -> List[str]:
        return list(self._rules)

    def descriptions(self) -> Dict[str, str]:
        """Map every type name to its description."""
        return {
            name: rule.description or "No description" for name, rule in self._rules.items()
        }

    def export_json(self) -> str:
        """Export the rule table as a JSON string using the table's camelCase keys."""
        payload = {
            name: rule.model_dump(mode="json", by_alias=True, exclude_unset=True)
            for name, rule in self._rules.items()
        }
        return json.dumps(payload, indent=2)

    def __repr__(self) -> str:
        return f"TypeRegistry(types={self.type_names()!r})"
