#!/usr/bin/env python3
"""Example showing how a project forest is edited and compiled.

It loads the type rules next to this file, opens the shop project, adds an
orders table through the same admission checks the designer uses, audits the
result and prints the generated DDL.
"""

import json
from pathlib import Path

from schema_forest import JsonTypeRuleSource, NodeForest, compile_forest
from schema_forest.forest.nodes import Node
from schema_forest.forest.reporting import RecordingReporter
from schema_forest.forest.visitor import ForestVisitor

EXAMPLES_DIR = Path(__file__).parent


class FieldCounterVisitor(ForestVisitor):
    """Custom visitor that counts the fields of every table."""

    def __init__(self):
        self.fields_per_table = {}

    def visit_table(self, node: Node) -> None:
        self.fields_per_table[node.caption] = sum(1 for child in node.children if child.type == "field")

    def visit_node(self, node: Node) -> None:
        self.descend(node)


def main():
    """Run the example."""
    registry = JsonTypeRuleSource(path=EXAMPLES_DIR / "types.json").fetch_registry()
    shop = json.loads((EXAMPLES_DIR / "shop.json").read_text(encoding="utf-8"))

    reporter = RecordingReporter()
    forest = NodeForest.from_plain_data(registry, shop, reporter=reporter)

    print("=" * 80)
    print("Editing the project")
    print("=" * 80)

    forest.add_child("root", {"id": "orders", "type": "table", "caption": "Orders"})
    forest.add_child("orders", {"id": "orders-id", "type": "field", "caption": "id"})
    forest.add_child("orders", {"id": "orders-user", "type": "field", "caption": "user id"})
    # A second "Users" table becomes "Users_1"
    forest.add_child("root", {"id": "users-copy", "type": "table", "caption": "Users"})
    # Fields cannot hold children: rejected and reported
    forest.add_child("orders-id", {"type": "field", "caption": "nested"})

    for node in forest:
        crumbs = " / ".join(crumb["label"] for crumb in forest.breadcrumb(node.id))
        print(f"{node.type:8} {crumbs}")

    print()
    print("Rejected operations:")
    for message in reporter.messages:
        print(f"  - {message}")

    print()
    print("Audit:", forest.check() or "no problems")

    counter = FieldCounterVisitor()
    for root in forest.nodes:
        root.accept(counter)
    print("Fields per table:", counter.fields_per_table)

    print()
    print("=" * 80)
    print("Generated DDL")
    print("=" * 80)
    print(compile_forest(forest.to_plain_data()))


if __name__ == "__main__":
    main()
