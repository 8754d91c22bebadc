"""Recovery of column facts from a field node's property tree.

Field properties are a free-form tree of labelled groups built by the UI's
form schema. The compiler only needs four facts from it, looked up by caption:

- ``Data Type``: the caption of the checked option is the SQL type
- ``Length``: the first sub-property's value is the length
- ``Database options value``: a truthy ``Primary key`` option
- ``Check options value``: a truthy ``Required`` option

Anything missing or malformed falls back to the defaults below.
"""

from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from schema_forest.forest.nodes import Property, find_property

DEFAULT_DATA_TYPE = "VARCHAR"
DEFAULT_LENGTH = "255"

DATA_TYPE_CAPTIONS = ("Data Type",)
# "Lenght" is the spelling used by existing project files
LENGTH_CAPTIONS = ("Length", "Lenght")
DATABASE_OPTIONS_CAPTIONS = ("Database options value",)
CHECK_OPTIONS_CAPTIONS = ("Check options value",)
PRIMARY_KEY_CAPTION = "Primary key"
REQUIRED_CAPTION = "Required"


class FieldFacts(BaseModel):
    """The column facts of one field node.

    Attributes:
        data_type: SQL type name, e.g. ``INT``.
        length: Length or precision text placed in parentheses.
        primary_key: Whether the column is the primary key.
        required: Whether the column is NOT NULL.
    """

    model_config = ConfigDict(frozen=True)

    data_type: str = Field(default=DEFAULT_DATA_TYPE, description="SQL type name")
    length: str = Field(default=DEFAULT_LENGTH, description="Length or precision")
    primary_key: bool = Field(default=False, description="Whether the column is the primary key")
    required: bool = Field(default=False, description="Whether the column is NOT NULL")

    @classmethod
    def from_properties(cls, properties: Iterable[Property]) -> "FieldFacts":
        """Extract the facts from a field's properties.

        Args:
            properties: The field node's top-level properties

        Returns:
            FieldFacts with defaults for whatever could not be found
        """
        properties = list(properties)
        return cls(
            data_type=_data_type(find_property(properties, *DATA_TYPE_CAPTIONS)),
            length=_length(find_property(properties, *LENGTH_CAPTIONS)),
            primary_key=_option_set(
                find_property(properties, *DATABASE_OPTIONS_CAPTIONS), PRIMARY_KEY_CAPTION
            ),
            required=_option_set(find_property(properties, *CHECK_OPTIONS_CAPTIONS), REQUIRED_CAPTION),
        )


def _data_type(group: Optional[Property]) -> str:
    if group is None:
        return DEFAULT_DATA_TYPE
    for option in group.properties:
        if option.checked and option.caption.strip():
            return option.caption.strip()
    # A select-style group may store the chosen type directly
    if isinstance(group.value, str) and group.value.strip():
        return group.value.strip()
    return DEFAULT_DATA_TYPE


def _length(group: Optional[Property]) -> str:
    if group is None:
        return DEFAULT_LENGTH
    value = group.properties[0].value if group.properties else group.value
    if not value or isinstance(value, bool):
        return DEFAULT_LENGTH
    text = str(value).strip()
    return text or DEFAULT_LENGTH


def _option_set(group: Optional[Property], caption: str) -> bool:
    if group is None:
        return False
    return any(option.caption == caption and option.is_set for option in group.properties)
