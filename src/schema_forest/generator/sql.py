"""DDL generation module using the forest visitor pattern.

This module lowers a forest snapshot into a MySQL-style script: one
``CREATE DATABASE`` for the root node followed by one ``CREATE TABLE`` per
table node, in pre-order, wherever the table sits under the root.
"""

import logging
from typing import Any, List

from pydantic import BaseModel, Field

from schema_forest.errors import MissingRootError
from schema_forest.forest.builder import NodeFactory, forest_node_list
from schema_forest.forest.nodes import Node
from schema_forest.forest.visitor import ForestVisitor
from schema_forest.generator.properties import FieldFacts
from schema_forest.typology.registry import ROOT_TYPE

logger = logging.getLogger(__name__)

FIELD_TYPE = "field"


class CompiledStatement(BaseModel):
    """SQL produced for a single node.

    Attributes:
        node_id: Id of the root or table node the statement belongs to.
        sql: The statement text, including its trailing blank line.
    """

    node_id: str = Field(..., description="Id of the node the SQL was generated from")
    sql: str = Field(..., description="Generated SQL text")


def quote_identifier(name: str) -> str:
    """Backtick-quote an identifier, doubling any embedded backticks.

    Args:
        name: Database, table or column name

    Returns:
        Quoted identifier (e.g., '`order lines`')
    """
    return "`" + name.replace("`", "``") + "`"


class DDLGeneratorVisitor(ForestVisitor):
    """Forest visitor collecting a CREATE TABLE statement for each table node.

    Tables are emitted in the order they are visited; every node's children are
    descended into, so tables nested under groups at any depth are found.
    """

    def __init__(self, indent: str = "  "):
        """Initialize the DDL generator visitor.

        Args:
            indent: Prefix for each column definition line
        """
        self.indent = indent
        self.statements: List[CompiledStatement] = []

    def visit_table(self, node: Node) -> None:
        """Emit the table's CREATE TABLE statement, then descend."""
        self.statements.append(CompiledStatement(node_id=node.id, sql=self.table_sql(node)))
        self.descend(node)

    def visit_node(self, node: Node) -> None:
        self.descend(node)

    def table_sql(self, node: Node) -> str:
        """Build the CREATE TABLE statement for a table node.

        Only direct children of type ``field`` become columns. A table without
        fields yields a comment, since an empty column list is not valid DDL.

        Args:
            node: The table node

        Returns:
            SQL text ending with a blank line
        """
        fields = [child for child in node.children if child.type == FIELD_TYPE]
        table_name = quote_identifier(node.caption)
        if not fields:
            logger.warning("Table '%s' has no fields and was skipped", node.caption)
            return f"-- Table {table_name} has no fields and was not created.\n\n"

        columns = [self.indent + self.column_sql(field) for field in fields]
        return f"CREATE TABLE IF NOT EXISTS {table_name} (\n" + ",\n".join(columns) + "\n);\n\n"

    @staticmethod
    def column_sql(field: Node) -> str:
        """Build a column definition, e.g. "`id` INT(11) NOT NULL PRIMARY KEY"."""
        facts = FieldFacts.from_properties(field.properties)
        column = f"{quote_identifier(field.caption)} {facts.data_type}({facts.length})"
        if facts.required:
            column += " NOT NULL"
        if facts.primary_key:
            column += " PRIMARY KEY"
        return column


class SchemaCompiler:
    """Generates a DDL script from a forest snapshot.

    This is the main interface for SQL generation. The snapshot is plain data in
    the forest export shape (``{"nodes": [...]}`` or a bare list of nodes); it is
    not modified.
    """

    def __init__(self, forest_data: Any):
        """Initialize the compiler.

        Args:
            forest_data: Forest snapshot, as produced by ``NodeForest.to_plain_data``
        """
        # Missing ids stay empty so that output never depends on generated ids.
        # Malformed property entries are dropped and their columns use defaults.
        self.nodes = NodeFactory(id_factory=str, lenient_properties=True).build_many(
            forest_node_list(forest_data)
        )

    def find_root(self) -> Node:
        """Find the database root among the top-level nodes.

        Returns:
            The first top-level node of type ``root``

        Raises:
            MissingRootError: If no top-level node has type ``root``
        """
        roots = [node for node in self.nodes if node.type == ROOT_TYPE]
        if not roots:
            raise MissingRootError(f"No top-level node of type '{ROOT_TYPE}' found in the forest")
        if len(roots) > 1:
            logger.warning(
                "Found %d top-level '%s' nodes, compiling only '%s'",
                len(roots),
                ROOT_TYPE,
                roots[0].caption,
            )
        return roots[0]

    def compile_statements(self) -> List[CompiledStatement]:
        """Generate one statement for the database and one per table node.

        Returns:
            Statements in script order, the database statement first

        Raises:
            MissingRootError: If the snapshot has no top-level root node
        """
        root = self.find_root()
        database = quote_identifier(root.caption)
        statements = [
            CompiledStatement(
                node_id=root.id,
                sql=f"CREATE DATABASE IF NOT EXISTS {database};\nUSE {database};\n\n",
            )
        ]

        visitor = DDLGeneratorVisitor()
        visitor.descend(root)
        statements.extend(visitor.statements)
        return statements

    def compile(self) -> str:
        """Generate the complete script.

        Returns:
            The DDL script as one string

        Raises:
            MissingRootError: If the snapshot has no top-level root node
        """
        return "".join(statement.sql for statement in self.compile_statements())


def compile_statements(forest_data: Any) -> List[CompiledStatement]:
    """Convenience function returning the per-node statements of a snapshot."""
    return SchemaCompiler(forest_data).compile_statements()


def compile_forest(forest_data: Any) -> str:
    """Convenience function to generate a DDL script from a forest snapshot.

    Args:
        forest_data: Forest snapshot in the export shape

    Returns:
        The DDL script
    """
    return SchemaCompiler(forest_data).compile()
