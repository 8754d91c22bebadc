"""SQL generation modules."""

from schema_forest.generator.properties import FieldFacts
from schema_forest.generator.sql import (
    CompiledStatement,
    DDLGeneratorVisitor,
    SchemaCompiler,
    compile_forest,
    compile_statements,
)

__all__ = [
    "FieldFacts",
    "CompiledStatement",
    "DDLGeneratorVisitor",
    "SchemaCompiler",
    "compile_forest",
    "compile_statements",
]
