"""Shared fixtures: a small designer type table and a shop forest."""

import copy
from typing import Any, Dict, List

import pytest

from schema_forest.forest.model import NodeForest
from schema_forest.forest.reporting import RecordingReporter
from schema_forest.typology.registry import TypeRegistry

DATA_TYPES = ["INT", "VARCHAR", "DATE", "DECIMAL"]


def field_properties(
    data_type: str = "VARCHAR",
    length: str = "255",
    primary_key: bool = False,
    required: bool = False,
) -> List[Dict[str, Any]]:
    """Build a field property tree shaped like the designer's form schema."""
    return [
        {
            "id": "data-type",
            "caption": "Data Type",
            "type": "input-group",
            "properties": [
                {"caption": name, "type": "radio", "checked": name == data_type}
                for name in DATA_TYPES
            ],
        },
        {
            "id": "length",
            "caption": "Lenght",
            "type": "input-group",
            "properties": [{"caption": "Size", "type": "text", "value": length}],
        },
        {
            "caption": "Database options value",
            "type": "input-group",
            "properties": [
                {"caption": "Primary key", "type": "checkbox", "value": primary_key},
                {"caption": "Auto increment", "type": "checkbox", "value": False},
            ],
        },
        {
            "caption": "Check options value",
            "type": "input-group",
            "properties": [{"caption": "Required", "type": "checkbox", "value": required}],
        },
    ]


TYPES: Dict[str, Any] = {
    "root": {
        "id": "root",
        "description": "Database",
        "unique": True,
        "maxDepth": 1,
        "validChildren": ["group", "table", "settings"],
        "renameAllowed": True,
        "icon": {"type": "class", "value": "bi bi-database"},
    },
    "group": {
        "caption": "Group",
        "description": "Folder of tables",
        "maxDepth": 4,
        "validChildren": ["group", "table"],
        "uniqueWithinParent": True,
        "renameAllowed": True,
        "deleteAllowed": True,
    },
    "table": {
        "description": "Database table",
        "maxChildren": 3,
        "maxDepth": 5,
        "validChildren": ["field"],
        "uniqueWithinParent": True,
        "actions": {
            "rename": {"label": "Rename table", "callback": "renameNode"},
            "delete": {"label": "Delete table", "callback": "deleteNode"},
            "add": {"label": "Add field", "callback": "addNode", "typeToAdd": "field"},
        },
    },
    "field": {
        "description": "Table column",
        "maxDepth": 6,
        "renameAllowed": True,
        "deleteAllowed": True,
        "properties": field_properties(),
    },
    "settings": {
        "caption": "Settings",
        "unique": True,
    },
}


SHOP: Dict[str, Any] = {
    "nodes": [
        {
            "id": "root",
            "caption": "Shop",
            "type": "root",
            "icon": {"type": "class", "value": "bi bi-database"},
            "state": {"opened": True},
            "children": [
                {
                    "id": "users",
                    "caption": "Users",
                    "type": "table",
                    "children": [
                        {
                            "id": "users-id",
                            "caption": "id",
                            "type": "field",
                            "properties": field_properties("INT", "11", primary_key=True, required=True),
                        },
                        {
                            "id": "users-email",
                            "caption": "email",
                            "type": "field",
                            "properties": field_properties("VARCHAR", "120", required=True),
                        },
                    ],
                }
            ],
        }
    ]
}


@pytest.fixture
def types() -> Dict[str, Any]:
    return copy.deepcopy(TYPES)


@pytest.fixture
def registry(types) -> TypeRegistry:
    return TypeRegistry(types)


@pytest.fixture
def shop_data() -> Dict[str, Any]:
    return copy.deepcopy(SHOP)


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def forest(registry, shop_data, reporter) -> NodeForest:
    return NodeForest.from_plain_data(registry, shop_data, reporter=reporter)


@pytest.fixture(name="field_properties")
def field_properties_fixture():
    return field_properties
