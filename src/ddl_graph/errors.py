"""Exception hierarchy for DDL extraction and schema graph operations.

Every error raised by ddl_graph derives from ``DDLGraphError`` so callers
(and the CLI) can catch the whole family in one place.

Usage:
    from ddl_graph.errors import DDLGraphError, UnresolvableOrderError

    try:
        order = collection.resolve_creation_order()
    except UnresolvableOrderError as e:
        print(e.diagnosis.format_report())
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ddl_graph.schema.models import OrderDiagnosis


class DDLGraphError(Exception):
    """Base class for all ddl_graph errors."""

    pass


# ============================================================================
# Extraction errors
# ============================================================================


class MalformedClauseError(DDLGraphError):
    """Raised when a line does not match the clause shape it was classified as."""

    def __init__(self, line: str, reason: str = "Unable to parse clause"):
        self.line = line
        self.reason = reason
        super().__init__(f"{reason}: {line!r}")


class FieldParseError(MalformedClauseError):
    """Raised when a column definition line cannot be parsed."""

    def __init__(self, line: str):
        super().__init__(line, "Unable to extract field name and type")


class UnknownFieldReferenceError(DDLGraphError):
    """Raised when an index or primary key names a column the table lacks."""

    def __init__(self, field: str, line: str):
        self.field = field
        self.line = line
        super().__init__(f"Field '{field}' does not exist (referenced by {line!r})")


# ============================================================================
# Graph errors
# ============================================================================


class DuplicateTableError(DDLGraphError):
    """Raised when adding a table whose name is already in the collection."""

    def __init__(self, table: str, collection: str = ""):
        self.table = table
        self.collection = collection
        super().__init__(f"Table '{table}' already exists in DB '{collection}'")


class MissingReferencedTableError(DDLGraphError):
    """Raised when a foreign key targets a table that is not in the collection."""

    def __init__(self, table: str, foreign_key: str, source_table: str = ""):
        self.table = table
        self.foreign_key = foreign_key
        self.source_table = source_table
        super().__init__(
            f"Unable to link schema, table '{table}' seems to be missing "
            f"(FK '{foreign_key}' on '{source_table}')"
        )


class DanglingFieldReferenceError(DDLGraphError):
    """Raised when a foreign key targets a field the referenced table lacks."""

    def __init__(self, foreign_key: str, field: str, table: str):
        self.foreign_key = foreign_key
        self.field = field
        self.table = table
        super().__init__(
            f"FK '{foreign_key}' invalid: '{field}' does not exist "
            f"in reference table '{table}'"
        )


class UnknownTableError(DDLGraphError):
    """Raised when removing a table by a name the collection does not hold."""

    def __init__(self, table: str, collection: str = ""):
        self.table = table
        self.collection = collection
        super().__init__(f"Table '{table}' does not exist in DB '{collection}'")


# ============================================================================
# Resolution errors
# ============================================================================


class UnresolvableOrderError(DDLGraphError):
    """Raised when no creation order satisfies every foreign key.

    Carries the ``OrderDiagnosis`` describing what each stuck table is
    still waiting on.
    """

    def __init__(self, diagnosis: "OrderDiagnosis"):
        self.diagnosis = diagnosis
        super().__init__(diagnosis.format_report())
