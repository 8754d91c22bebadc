"""Unit tests for the node forest.

These tests cover loading and export, the admission checks run by
``add_child`` and the guarded rename/delete operations. Every rejected
mutation must leave the forest exactly as it was.
"""

import pytest

from schema_forest.errors import (
    ChildrenLimitExceededError,
    DepthExceededError,
    DuplicateCaptionError,
    DuplicateNodeIdError,
    InvalidChildTypeError,
    MissingRootTypeError,
    NodeNotFoundError,
    OperationNotAllowedError,
    UniqueTypeViolationError,
    UnknownTypeError,
)
from schema_forest.forest.model import NodeForest
from schema_forest.forest.nodes import Node, Property
from schema_forest.forest.reporting import QueuedInputProvider, RecordingReporter
from schema_forest.typology.registry import TypeRegistry


def add_group_chain(forest, parent_id, levels):
    """Add nested groups below ``parent_id`` and return the id of the deepest."""
    for level in range(levels):
        assert forest.add_child(parent_id, {"id": f"g{level}", "type": "group", "caption": f"G{level}"})
        parent_id = f"g{level}"
    return parent_id


class TestLoading:
    """Tests for building a forest from plain data."""

    def test_load_snapshot(self, forest) -> None:
        assert [node.id for node in forest.nodes] == ["root"]
        assert len(forest) == 4
        assert [node.id for node in forest] == ["root", "users", "users-id", "users-email"]

    def test_empty_input_creates_default_root(self, registry) -> None:
        for empty in (None, {}, {"nodes": []}, []):
            forest = NodeForest.from_plain_data(registry, empty)

            assert len(forest.nodes) == 1
            root = forest.nodes[0]
            assert root.id == "root"
            assert root.caption == "New Project"
            assert root.type == "root"
            assert root.icon == {"type": "class", "value": "bi bi-database"}

    def test_default_root_uses_rule_caption(self, types) -> None:
        types["root"]["caption"] = "Warehouse"
        del types["root"]["id"]

        forest = NodeForest.from_plain_data(TypeRegistry(types), None)

        assert forest.nodes[0].id == "root"
        assert forest.nodes[0].caption == "Warehouse"

    def test_empty_input_without_root_type(self) -> None:
        with pytest.raises(MissingRootTypeError):
            NodeForest.from_plain_data(TypeRegistry({"table": {}}), None)

    def test_round_trip(self, forest, registry) -> None:
        exported = forest.to_plain_data()

        reloaded = NodeForest.from_plain_data(registry, exported)

        assert reloaded.to_plain_data() == exported

    def test_export_keeps_presentation_data(self, forest) -> None:
        root = forest.to_plain_data()["nodes"][0]

        assert root["state"] == {"opened": True}
        assert root["icon"] == {"type": "class", "value": "bi bi-database"}
        assert root["children"][0]["children"][0]["properties"][0]["id"] == "data-type"

    def test_load_replaces_content(self, forest) -> None:
        forest.load({"nodes": [{"id": "other", "caption": "Other", "type": "root"}]})

        assert [node.id for node in forest] == ["other"]


class TestQueries:
    """Tests for lookups that do not modify the forest."""

    def test_find_by_id(self, forest) -> None:
        assert forest.find_by_id("users-email").caption == "email"
        assert forest.find_by_id("missing") is None

    def test_find_parent_by_id(self, forest) -> None:
        assert forest.find_parent_by_id("users-id").id == "users"
        assert forest.find_parent_by_id("root") is None

    def test_depth_of(self, forest) -> None:
        assert forest.depth_of("root") == 1
        assert forest.depth_of("users") == 2
        assert forest.depth_of("users-id") == 3

    def test_depth_of_missing_node(self, forest) -> None:
        with pytest.raises(NodeNotFoundError):
            forest.depth_of("missing")

    def test_breadcrumb(self, forest) -> None:
        assert forest.breadcrumb("users-id") == [
            {"label": "Shop", "id": "root"},
            {"label": "Users", "id": "users"},
            {"label": "id", "id": "users-id"},
        ]
        assert forest.breadcrumb("missing") == []

    def test_child_types(self, forest) -> None:
        assert forest.child_types("users") == ["field", "field"]
        assert forest.child_types("missing") == []

    def test_captions_of_type(self, forest) -> None:
        assert forest.captions_of_type("field") == ["id", "email"]

    def test_has_node_of_type(self, forest) -> None:
        assert forest.has_node_of_type("table") is True
        assert forest.has_node_of_type("settings") is False

    def test_type_census(self, forest) -> None:
        assert forest.type_census() == {"root": 1, "table": 1, "field": 2}


class TestAddChild:
    """Tests for admission of new nodes."""

    def test_add_table(self, forest) -> None:
        assert forest.add_child("root", {"id": "orders", "type": "table", "caption": "Orders"}) is True

        orders = forest.find_by_id("orders")
        assert forest.find_parent_by_id("orders").id == "root"
        assert orders.caption == "Orders"
        assert forest.child_types("root") == ["table", "table"]

    def test_added_node_gets_generated_id(self, registry, shop_data) -> None:
        forest = NodeForest.from_plain_data(registry, shop_data, id_factory=lambda: "generated")

        assert forest.add_child("root", {"type": "table", "caption": "Orders"})

        assert forest.find_by_id("generated").caption == "Orders"

    def test_add_node_instance(self, forest) -> None:
        node = Node(id="orders", caption="Orders", type="table")

        assert forest.add_child("root", node)

        added = forest.find_by_id("orders")
        assert added is not node

    def test_new_field_gets_rule_properties(self, forest, registry) -> None:
        assert forest.add_child("users", {"id": "users-name", "type": "field", "caption": "name"})

        node = forest.find_by_id("users-name")
        assert [prop.caption for prop in node.properties] == [
            prop.caption for prop in registry.get_rule("field").properties
        ]
        # Seeded properties are copies of the rule's schema
        node.properties[0].caption = "changed"
        assert registry.get_rule("field").properties[0].caption == "Data Type"

    def test_given_properties_are_kept(self, forest) -> None:
        assert forest.add_child(
            "users", {"id": "users-name", "type": "field", "caption": "name", "properties": []}
        )

        assert forest.find_by_id("users-name").properties == []

    def test_missing_type_defaults_to_field(self, forest) -> None:
        assert forest.add_child("users", {"id": "users-name", "caption": "name"})

        assert forest.find_by_id("users-name").type == "field"

    def test_caption_is_sanitized(self, forest) -> None:
        assert forest.add_child("root", {"id": "lines", "type": "table", "caption": "  order   lines "})

        assert forest.find_by_id("lines").caption == "order_lines"

    def test_custom_caption_separator(self, registry, shop_data) -> None:
        forest = NodeForest.from_plain_data(registry, shop_data, caption_separator="-")

        assert forest.add_child("root", {"id": "lines", "type": "table", "caption": "order lines"})

        assert forest.find_by_id("lines").caption == "order-lines"

    def test_duplicate_field_captions_are_suffixed(self, forest) -> None:
        assert forest.add_child("root", {"id": "orders", "type": "table", "caption": "Orders"})
        assert forest.add_child("orders", {"id": "f1", "type": "field", "caption": "Field"})
        assert forest.add_child("orders", {"id": "f2", "type": "field", "caption": "Field"})
        assert forest.add_child("orders", {"id": "f3", "type": "field", "caption": "Field"})

        assert [child.caption for child in forest.find_by_id("orders").children] == [
            "Field",
            "Field_1",
            "Field_2",
        ]

    def test_duplicate_sibling_table_caption_is_suffixed(self, forest) -> None:
        assert forest.add_child("root", {"id": "users-2", "type": "table", "caption": "Users"})

        assert forest.find_by_id("users-2").caption == "Users_1"

    def test_same_caption_allowed_in_other_parent(self, forest) -> None:
        assert forest.add_child("root", {"id": "grp", "type": "group", "caption": "Archive"})
        assert forest.add_child("grp", {"id": "old-users", "type": "table", "caption": "Users"})

        assert forest.find_by_id("old-users").caption == "Users"

    def test_sibling_captions_differ_across_types(self, registry) -> None:
        forest = NodeForest.from_plain_data(registry, None)

        assert forest.add_child("root", {"id": "g1", "type": "group", "caption": "Sales"})
        assert forest.add_child("root", {"id": "t1", "type": "table", "caption": "Sales"})

        assert forest.find_by_id("t1").caption == "Sales_1"

    def test_sibling_captions_differ_without_uniqueness_flags(self) -> None:
        """Siblings never share a caption, even when no type asks for it."""
        registry = TypeRegistry(
            {
                "root": {"validChildren": ["table"]},
                "table": {"validChildren": ["field"]},
                "field": {},
            }
        )
        forest = NodeForest.from_plain_data(registry, None)

        assert forest.add_child("root", {"id": "t", "type": "table", "caption": "T"})
        assert forest.add_child("t", {"id": "f1", "type": "field", "caption": "Field"})
        assert forest.add_child("t", {"id": "f2", "type": "field", "caption": "Field"})

        assert [child.caption for child in forest.find_by_id("t").children] == ["Field", "Field_1"]

    def test_unique_type_ignores_captions_of_other_types(self, forest) -> None:
        assert forest.add_child("root", {"id": "settings", "type": "settings", "caption": "id"})

        assert forest.find_by_id("settings").caption == "id"

    def test_zero_limits_do_not_block_children(self) -> None:
        registry = TypeRegistry(
            {
                "root": {"maxChildren": 0, "maxDepth": 0, "validChildren": ["table"]},
                "table": {"maxChildren": 0, "maxDepth": 0},
            }
        )
        forest = NodeForest.from_plain_data(registry, None, reporter=RecordingReporter())

        assert forest.add_child("root", {"id": "t1", "type": "table", "caption": "Orders"}) is True
        assert forest.add_child("root", {"id": "t2", "type": "table", "caption": "Users"}) is True

        assert [child.id for child in forest.find_by_id("root").children] == ["t1", "t2"]
        assert forest.check() == []

    def test_empty_caption_asks_input_provider(self, registry, shop_data) -> None:
        provider = QueuedInputProvider(["  Order items "])
        forest = NodeForest.from_plain_data(registry, shop_data, input_provider=provider)

        assert forest.add_child("root", {"id": "items", "type": "table"})

        assert forest.find_by_id("items").caption == "Order_items"
        assert provider.prompts == ["Enter a caption for the new table:"]

    def test_empty_caption_falls_back_to_rule_caption(self, forest) -> None:
        assert forest.add_child("root", {"id": "grp", "type": "group", "caption": " "})

        assert forest.find_by_id("grp").caption == "Group"

    def test_empty_caption_falls_back_to_untitled(self, registry, shop_data) -> None:
        forest = NodeForest.from_plain_data(registry, shop_data, input_provider=QueuedInputProvider([]))

        assert forest.add_child("root", {"id": "t1", "type": "table"})
        assert forest.add_child("root", {"id": "t2", "type": "table"})

        assert forest.find_by_id("t1").caption == "Untitled"
        assert forest.find_by_id("t2").caption == "Untitled_1"

    def test_unknown_type_raises(self, forest) -> None:
        before = forest.to_plain_data()

        with pytest.raises(UnknownTypeError):
            forest.add_child("root", {"type": "view", "caption": "Report"})

        assert forest.to_plain_data() == before


class TestAdmissionRejections:
    """Rejected additions report a reason and change nothing."""

    def assert_rejected(self, forest, reporter, parent_id, node_data, error_type) -> None:
        before = forest.to_plain_data()

        assert forest.add_child(parent_id, node_data) is False

        assert forest.to_plain_data() == before
        assert isinstance(reporter.errors[-1], error_type)
        assert reporter.messages[-1] == str(reporter.errors[-1])

    def test_missing_parent(self, forest, reporter) -> None:
        self.assert_rejected(forest, reporter, "missing", {"type": "table"}, NodeNotFoundError)
        assert "missing" in reporter.messages[-1]

    def test_invalid_child_type(self, forest, reporter) -> None:
        self.assert_rejected(forest, reporter, "root", {"type": "field"}, InvalidChildTypeError)
        assert "not a valid child" in reporter.messages[-1]

    def test_nothing_below_field(self, forest, reporter) -> None:
        self.assert_rejected(forest, reporter, "users-id", {"type": "field"}, InvalidChildTypeError)

    def test_invalid_type_inside_subtree(self, forest, reporter) -> None:
        node_data = {"type": "table", "caption": "Orders", "children": [{"type": "group"}]}

        self.assert_rejected(forest, reporter, "root", node_data, InvalidChildTypeError)

    def test_children_limit(self, forest, reporter) -> None:
        assert forest.add_child("users", {"id": "users-name", "type": "field", "caption": "name"})

        self.assert_rejected(
            forest, reporter, "users", {"type": "field", "caption": "age"}, ChildrenLimitExceededError
        )
        assert len(forest.find_by_id("users").children) == 3

    def test_children_limit_inside_subtree(self, forest, reporter) -> None:
        node_data = {"type": "table", "caption": "Orders", "children": [{"type": "field"} for _ in range(4)]}

        self.assert_rejected(forest, reporter, "root", node_data, ChildrenLimitExceededError)

    def test_depth_limit(self, forest, reporter) -> None:
        deepest = add_group_chain(forest, "root", 3)
        assert forest.depth_of(deepest) == 4

        self.assert_rejected(forest, reporter, deepest, {"type": "group"}, DepthExceededError)
        assert reporter.errors[-1].depth == 5

    def test_depth_allows_types_with_deeper_limit(self, forest) -> None:
        deepest = add_group_chain(forest, "root", 3)

        assert forest.add_child(deepest, {"id": "deep-table", "type": "table", "caption": "Deep"})
        assert forest.add_child("deep-table", {"id": "deep-field", "type": "field", "caption": "x"})
        assert forest.depth_of("deep-field") == 6

    def test_depth_limit_inside_subtree(self, forest, reporter) -> None:
        node_data = {
            "type": "group",
            "caption": "A",
            "children": [
                {"type": "group", "caption": "B", "children": [
                    {"type": "group", "caption": "C", "children": [{"type": "group", "caption": "D"}]}
                ]}
            ],
        }

        self.assert_rejected(forest, reporter, "root", node_data, DepthExceededError)

    def test_unique_type(self, forest, reporter) -> None:
        assert forest.add_child("root", {"id": "settings", "type": "settings"})

        self.assert_rejected(forest, reporter, "root", {"type": "settings"}, UniqueTypeViolationError)
        assert forest.type_census()["settings"] == 1

    def test_duplicate_id(self, forest, reporter) -> None:
        self.assert_rejected(
            forest, reporter, "root", {"id": "users", "type": "table", "caption": "Orders"}, DuplicateNodeIdError
        )

    def test_duplicate_id_inside_subtree(self, forest, reporter) -> None:
        node_data = {
            "id": "orders",
            "type": "table",
            "caption": "Orders",
            "children": [{"id": "users-id", "type": "field"}],
        }

        self.assert_rejected(forest, reporter, "root", node_data, DuplicateNodeIdError)

    def test_default_reporter_logs_warning(self, registry, shop_data, caplog) -> None:
        forest = NodeForest.from_plain_data(registry, shop_data)

        with caplog.at_level("WARNING", logger="schema_forest.forest"):
            assert forest.add_child("root", {"type": "field"}) is False

        assert "not a valid child" in caplog.text


class TestStructuralEdits:
    """Tests for remove, update, rename and delete."""

    def test_remove_node(self, forest) -> None:
        assert forest.remove_node("users") is True

        assert forest.find_by_id("users") is None
        assert forest.find_by_id("users-id") is None
        assert len(forest) == 1

    def test_remove_root(self, forest) -> None:
        assert forest.remove_node("root") is True
        assert forest.nodes == []

    def test_remove_missing_node(self, forest, reporter) -> None:
        assert forest.remove_node("missing") is False
        assert isinstance(reporter.errors[-1], NodeNotFoundError)

    def test_update_node(self, forest) -> None:
        assert forest.update_node(
            "users-email",
            {"caption": "mail", "state": {"selected": True}, "properties": [{"caption": "Note", "value": "x"}]},
        )

        node = forest.find_by_id("users-email")
        assert node.caption == "mail"
        assert node.state == {"selected": True}
        assert isinstance(node.properties[0], Property)
        assert node.properties[0].value == "x"

    def test_update_node_children(self, forest) -> None:
        assert forest.update_node("users", {"children": [{"id": "only", "caption": "only", "type": "field"}]})

        assert forest.child_types("users") == ["field"]
        assert forest.find_by_id("only").caption == "only"

    def test_update_missing_node(self, forest, reporter) -> None:
        assert forest.update_node("missing", {"caption": "x"}) is False
        assert isinstance(reporter.errors[-1], NodeNotFoundError)

    def test_rename_node(self, forest) -> None:
        assert forest.rename_node("users", "  site users ") is True

        assert forest.find_by_id("users").caption == "site_users"

    def test_rename_to_own_caption(self, forest) -> None:
        assert forest.rename_node("users", "Users") is True

    def test_rename_asks_input_provider(self, registry, shop_data) -> None:
        provider = QueuedInputProvider(["Customers"])
        forest = NodeForest.from_plain_data(registry, shop_data, input_provider=provider)

        assert forest.rename_node("users") is True

        assert forest.find_by_id("users").caption == "Customers"
        assert provider.prompts == ["Enter the new name for 'Users':"]

    def test_rename_cancelled(self, forest, reporter) -> None:
        assert forest.rename_node("users", "   ") is False

        assert forest.find_by_id("users").caption == "Users"
        assert reporter.messages[-1] == "Rename cancelled or caption is empty."

    def test_rename_rejects_duplicate_in_scope(self, forest, reporter) -> None:
        assert forest.rename_node("users-email", "id") is False

        assert forest.find_by_id("users-email").caption == "email"
        assert isinstance(reporter.errors[-1], DuplicateCaptionError)

    def test_rename_not_allowed(self, forest, reporter) -> None:
        assert forest.add_child("root", {"id": "settings", "type": "settings"})

        assert forest.rename_node("settings", "Config") is False
        assert isinstance(reporter.errors[-1], OperationNotAllowedError)

    def test_rename_missing_node(self, forest, reporter) -> None:
        assert forest.rename_node("missing", "x") is False
        assert isinstance(reporter.errors[-1], NodeNotFoundError)

    def test_delete_node(self, forest) -> None:
        assert forest.delete_node("users-email") is True
        assert forest.find_by_id("users-email") is None

    def test_delete_not_allowed(self, forest, reporter) -> None:
        assert forest.delete_node("root") is False

        assert forest.find_by_id("root") is not None
        assert isinstance(reporter.errors[-1], OperationNotAllowedError)


class TestCheck:
    """Tests for auditing loaded data."""

    def test_consistent_forest(self, forest) -> None:
        assert forest.check() == []

    def test_reports_every_problem(self, registry) -> None:
        data = {
            "nodes": [
                {
                    "id": "root",
                    "caption": "Shop",
                    "type": "root",
                    "children": [
                        {"id": "t1", "caption": "Users", "type": "table", "children": [
                            {"id": "f1", "caption": "id", "type": "field"},
                            {"id": "f2", "caption": "id", "type": "field"},
                            {"id": "f3", "caption": "x", "type": "field"},
                            {"id": "f4", "caption": "y", "type": "field"},
                        ]},
                        {"id": "t2", "caption": "Users", "type": "table"},
                        {"id": "f1", "caption": "loose", "type": "field"},
                        {"id": "v1", "caption": "Report", "type": "view"},
                    ],
                },
                {"id": "root-2", "caption": "Other", "type": "root"},
            ]
        }
        forest = NodeForest.from_plain_data(registry, data, reporter=RecordingReporter())

        problems = forest.check()
        text = "\n".join(problems)

        assert "caption 'id' is used by more than one child" in text
        assert "Shop (root): caption 'Users' is used by more than one child" in problems
        assert "Node type 'view' does not exist" in text
        assert "'field' is not a valid child for a node of type 'root'" in text
        assert "loose (f1): A node with id 'f1' already exists" in problems
        assert "Only one node of type 'root' is allowed in the forest (found 2)" in problems
        assert "Users (t1): A node of type 'table' cannot hold 4 children (maximum allowed is 3)" in problems
