"""Node and property models for the typed schema forest.

A node is one entry of the designer tree (database root, group, table, field,
settings, ...). Its ``type`` names a rule in the type registry; the node itself
knows nothing about those rules. Presentation data (icon, ``li_attr``,
``a_attr``, ``state`` and any extra keys) is carried through untouched.
"""

import copy
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from schema_forest.forest.visitor import ForestVisitor


class Property(BaseModel):
    """A labelled entry of a node's property tree.

    Properties form a heterogeneous tree keyed by caption. The ``type`` field is
    the form-field kind (``input-group``, ``radio``, ``checkbox``, ``text``, ...)
    and acts as the tag of the union; only ``caption`` is needed to look an
    entry up. Keys the model does not declare are kept and dumped back as-is.

    Attributes:
        caption: Label used for lookup.
        type: Form-field kind.
        value: Entered value, if any.
        checked: Selection state for option-style entries.
        required: Whether the form requires a value.
        properties: Nested sub-properties.
    """

    model_config = ConfigDict(extra="allow")

    caption: str = Field(default="", description="Label used to look the property up")
    type: Optional[str] = Field(default=None, description="Form-field kind")
    value: Any = Field(default=None, description="Entered value")
    checked: Any = Field(default=None, description="Selection state for options")
    required: Any = Field(default=False, description="Whether a value is required")
    properties: List["Property"] = Field(default_factory=list, description="Sub-properties")

    @field_validator("caption", mode="before")
    @classmethod
    def _caption_as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("properties", mode="before")
    @classmethod
    def _properties_as_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def is_set(self) -> bool:
        """Whether the entry is checked or carries a truthy value."""
        return bool(self.checked) or bool(self.value)

    def find(self, *captions: str) -> Optional["Property"]:
        """Find a direct sub-property by caption, see :func:`find_property`."""
        return find_property(self.properties, *captions)

    def to_plain_data(self) -> Dict[str, Any]:
        """Dump the property with exactly the keys it was built from."""
        return self.model_dump(exclude_unset=True)


def find_property(properties: Iterable[Property], *captions: str) -> Optional[Property]:
    """Return the first property whose caption is one of ``captions``.

    Args:
        properties: Properties to scan (not recursive)
        captions: Accepted captions, in any order

    Returns:
        The matching property or None
    """
    wanted = set(captions)
    for prop in properties:
        if prop.caption in wanted:
            return prop
    return None


class Node(BaseModel):
    """A node of the schema forest.

    Children are owned: a node appears in exactly one ``children`` list or in
    the forest's root list. There is no parent pointer; parents are found by
    searching the forest.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Identifier, unique across the forest")
    caption: str = Field(..., description="Display label")
    type: str = Field(..., description="Name of the type rule governing this node")
    icon: Any = Field(default_factory=dict, description="Icon override")
    li_attr: Dict[str, Any] = Field(default_factory=dict)
    a_attr: Dict[str, Any] = Field(default_factory=dict)
    state: Dict[str, Any] = Field(default_factory=dict)
    properties: List[Property] = Field(default_factory=list)
    children: List["Node"] = Field(default_factory=list)

    def accept(self, visitor: "ForestVisitor") -> Any:
        """Accept a visitor for the visitor pattern.

        Args:
            visitor: The visitor to accept

        Returns:
            Result of the visitor's visit operation
        """
        return visitor.visit(self)

    def find_property(self, *captions: str) -> Optional[Property]:
        return find_property(self.properties, *captions)

    def to_plain_data(self) -> Dict[str, Any]:
        """Mirror this node and its subtree as plain dicts and lists."""
        data: Dict[str, Any] = {
            "id": self.id,
            "caption": self.caption,
            "icon": copy.deepcopy(self.icon),
            "li_attr": copy.deepcopy(self.li_attr),
            "a_attr": copy.deepcopy(self.a_attr),
            "state": copy.deepcopy(self.state),
            "properties": [prop.to_plain_data() for prop in self.properties],
            "children": [child.to_plain_data() for child in self.children],
            "type": self.type,
        }
        if self.model_extra:
            data.update(copy.deepcopy(self.model_extra))
        return data
