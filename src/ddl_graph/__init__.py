"""ddl-graph: CREATE TABLE extraction and foreign-key creation ordering.

Builds a cross-referenced schema model from quoted-identifier CREATE TABLE
statements and resolves the order in which the tables can be created, or
diagnoses the circular / missing references that prevent it.

Usage:
    from ddl_graph import TableCollection, split_create_statements
    from ddl_graph import UnresolvableOrderError, load_graph_config
"""

__version__ = "0.1.0"

# Config
from ddl_graph.config.loader import load_graph_config
from ddl_graph.config.models import GraphConfig

# Errors
from ddl_graph.errors import (
    DanglingFieldReferenceError,
    DDLGraphError,
    DuplicateTableError,
    FieldParseError,
    MalformedClauseError,
    MissingReferencedTableError,
    UnknownFieldReferenceError,
    UnknownTableError,
    UnresolvableOrderError,
)

# Schema
from ddl_graph.schema.assembler import assemble_table, split_create_statements
from ddl_graph.schema.comparator import compare_collections
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
from ddl_graph.schema.patterns import PatternSet
from ddl_graph.schema.resolver import diagnose_creation_order, resolve_creation_order

__all__ = [
    # Config
    "load_graph_config",
    "GraphConfig",
    # Errors
    "DDLGraphError",
    "MalformedClauseError",
    "FieldParseError",
    "UnknownFieldReferenceError",
    "DuplicateTableError",
    "MissingReferencedTableError",
    "DanglingFieldReferenceError",
    "UnknownTableError",
    "UnresolvableOrderError",
    # Schema
    "assemble_table",
    "split_create_statements",
    "TableCollection",
    "compare_collections",
    "PatternSet",
    "resolve_creation_order",
    "diagnose_creation_order",
    # Models
    "Field",
    "PrimaryKey",
    "Index",
    "ForeignKey",
    "Table",
    "UnresolvedTable",
    "OrderDiagnosis",
    "TableDiff",
    "SchemaComparison",
]
