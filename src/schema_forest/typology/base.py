"""Base typology classes for schema-forest.

This module defines the type-rule data models and the abstract interface for
loading a type-rule table from different sources.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from schema_forest.forest.nodes import Property

if TYPE_CHECKING:
    from schema_forest.typology.registry import TypeRegistry


class NodeTypeAction(BaseModel):
    """An action offered on nodes of a type (rename, delete, add, ...).

    Attributes:
        label: Human readable label of the action.
        callback: Name of the UI callback bound to the action.
        type_to_add: For ``add`` actions, the type of node created.
    """

    model_config = ConfigDict(
        frozen=True, extra="allow", alias_generator=to_camel, populate_by_name=True
    )

    label: str = Field(default="", description="Human readable label")
    callback: Optional[str] = Field(default=None, description="UI callback name")
    type_to_add: Optional[str] = Field(default=None, description="Type created by 'add' actions")


class TypeRule(BaseModel):
    """Structural and behavioural rules bound to one node type name.

    Field names follow Python conventions; the camelCase names used by the
    type table (``maxChildren``, ``validChildren``, ...) are accepted as aliases.
    Missing or zero limits mean unbounded, missing flags mean False.

    Attributes:
        max_children: Maximum number of direct children; None or 0 is unbounded.
        max_depth: Maximum depth (roots are depth 1); None or 0 is unbounded.
        valid_children: Ordered type names allowed as direct children.
        unique: At most one node of this type may exist in the whole forest.
        unique_within_parent: Captions must differ among siblings (always enforced).
        rename_allowed: Whether nodes of this type may be renamed.
        delete_allowed: Whether nodes of this type may be deleted.
        icon: Opaque icon metadata.
        properties: Property schema seeded into new nodes of this type.
        actions: Named actions offered by the UI.
    """

    model_config = ConfigDict(
        frozen=True, extra="allow", alias_generator=to_camel, populate_by_name=True
    )

    id: Optional[str] = Field(default=None, description="Optional identifier for the type")
    name: Optional[str] = Field(default=None, description="Readable type name")
    caption: Optional[str] = Field(default=None, description="Default caption for new nodes")
    description: Optional[str] = Field(default=None, description="Short description")
    max_children: Optional[int] = Field(default=None, ge=0)
    max_depth: Optional[int] = Field(default=None, ge=0)
    valid_children: List[str] = Field(default_factory=list)
    unique: bool = False
    unique_within_parent: bool = False
    rename_allowed: bool = False
    delete_allowed: bool = False
    icon: Any = None
    properties: List[Property] = Field(default_factory=list)
    actions: Dict[str, NodeTypeAction] = Field(default_factory=dict)


class TypeRuleSource(ABC):
    """Abstract base class for loading type-rule tables.

    Implementations handle where the table comes from (a JSON file, an inline
    mapping, a remote store); the registry only ever sees validated rules.
    """

    @abstractmethod
    def fetch_rules(self) -> Dict[str, TypeRule]:
        """Load the rule table.

        Returns:
            Mapping of type name to validated TypeRule.

        Raises:
            TypeRuleSourceError: If the table cannot be read or parsed.
        """
        raise NotImplementedError("Subclasses must implement fetch_rules")

    def fetch_registry(self) -> "TypeRegistry":
        """Load the rule table and wrap it in a TypeRegistry.

        This is the method application code should use.

        Returns:
            A TypeRegistry over the loaded rules.
        """
        from schema_forest.typology.registry import TypeRegistry

        return TypeRegistry(self.fetch_rules())
