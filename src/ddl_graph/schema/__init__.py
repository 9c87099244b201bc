"""CREATE TABLE extraction, schema graph, and creation-order resolution.

Provides statement parsing (``assemble_table``, ``split_create_statements``),
the schema graph (``TableCollection``), and creation-order resolution
(``resolve_creation_order``, ``diagnose_creation_order``).

Usage:
    from ddl_graph.schema import TableCollection, split_create_statements

    db = TableCollection(name="shop")
    for statement in split_create_statements(dump):
        db.add_table_from_query(statement)
    db.link_all_tables()
    order = db.resolve_creation_order()
"""

from ddl_graph.schema.assembler import assemble_table, split_create_statements
from ddl_graph.schema.builder import (
    build_field,
    build_foreign_key_stub,
    build_index,
    build_primary_key,
)
from ddl_graph.schema.comparator import compare_collections, compare_tables
from ddl_graph.schema.collection import TableCollection
from ddl_graph.schema.models import (
    Field,
    ForeignKey,
    Index,
    OrderDiagnosis,
    PrimaryKey,
    SchemaComparison,
    Table,
    TableDiff,
    UnresolvedTable,
)
from ddl_graph.schema.patterns import DEFAULT_PATTERNS, FieldMatch, PatternSet
from ddl_graph.schema.resolver import diagnose_creation_order, resolve_creation_order

__all__ = [
    "assemble_table",
    "split_create_statements",
    "build_field",
    "build_index",
    "build_primary_key",
    "build_foreign_key_stub",
    "TableCollection",
    "compare_collections",
    "compare_tables",
    "Field",
    "PrimaryKey",
    "Index",
    "ForeignKey",
    "Table",
    "UnresolvedTable",
    "OrderDiagnosis",
    "TableDiff",
    "SchemaComparison",
    "PatternSet",
    "FieldMatch",
    "DEFAULT_PATTERNS",
    "resolve_creation_order",
    "diagnose_creation_order",
]
