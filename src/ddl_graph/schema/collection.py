"""Schema graph: table ownership, foreign key linking, integrity maintenance.

``TableCollection`` is the sole owner of its ``Table`` models. Links between
tables are table names, kept symmetric at all times:

    "b" in tables["a"].depends_on  <=>  "a" in tables["b"].dependants

and every ``ForeignKey.reference`` is either ``None`` or the name of a
table present in the collection.

The collection does no locking. Callers sharing one instance across
threads must serialise every mutating call.

Usage:
    from ddl_graph.schema.collection import TableCollection

    db = TableCollection(name="shop")
    for statement in statements:
        db.add_table_from_query(statement)
    db.link_all_tables(with_integrity_check=True)

    for table in db.resolve_creation_order():
        print(table.name)
"""

import logging
from collections.abc import Iterator

from ddl_graph.errors import (
    DanglingFieldReferenceError,
    DuplicateTableError,
    MissingReferencedTableError,
    UnknownTableError,
)
from ddl_graph.schema.assembler import assemble_table
from ddl_graph.schema.comparator import compare_collections
from ddl_graph.schema.models import ForeignKey, OrderDiagnosis, SchemaComparison, Table
from ddl_graph.schema.patterns import DEFAULT_PATTERNS, PatternSet
from ddl_graph.schema.resolver import diagnose_creation_order, resolve_creation_order

logger = logging.getLogger(__name__)


class TableCollection:
    """A database: every table of one schema and the links between them.

    Args:
        name: Database name, used in messages and ``definition_string()``.
        charset: Default character set for ``CREATE DATABASE``.
        drop_existing: Prefix ``definition_string()`` with ``DROP SCHEMA``.
        patterns: Pattern set used by ``add_table_from_query()``.
    """

    def __init__(
        self,
        name: str = "",
        charset: str = "utf8",
        drop_existing: bool = False,
        patterns: PatternSet = DEFAULT_PATTERNS,
    ):
        self.name = name
        self.charset = charset
        self.drop_existing = drop_existing
        self.patterns = patterns
        self.tables: dict[str, Table] = {}

    def __repr__(self) -> str:
        return f"TableCollection(name={self.name!r}, tables={list(self.tables)!r})"

    def __len__(self) -> int:
        return len(self.tables)

    def __iter__(self) -> Iterator[Table]:
        return iter(self.tables.values())

    def __contains__(self, name: object) -> bool:
        return name in self.tables

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def has_table(self, name: str) -> bool:
        return name in self.tables

    def get_table(self, name: str) -> Table | None:
        """Return the table called ``name``, or ``None``."""
        return self.tables.get(name)

    def depends_on_tables(self, table: Table) -> list[Table]:
        """Tables that ``table`` depends on, resolved from their names."""
        return [self.tables[name] for name in sorted(table.depends_on)]

    def dependant_tables(self, table: Table) -> list[Table]:
        """Tables that depend on ``table``, resolved from their names."""
        return [self.tables[name] for name in sorted(table.dependants)]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_table(self, table: Table, error_on_duplicate: bool = False) -> "TableCollection":
        """Add a table and link every foreign key whose target is present.

        Foreign keys whose target table has not been added yet stay as
        stubs; ``link_all_tables()`` resolves them later.

        Args:
            table: Table to add. Its links are reset by the collection.
            error_on_duplicate: Raise instead of replacing a table with the
                same name.

        Returns:
            This collection.

        Raises:
            DuplicateTableError: If ``error_on_duplicate`` and the name is
                taken. The collection is left unchanged.
        """
        existing = self.tables.get(table.name)
        if existing is not None:
            if error_on_duplicate:
                raise DuplicateTableError(table.name, self.name)
            if existing is table:
                return self
            logger.debug(f"Replacing table {table.name} in DB {self.name}")
            self.unlink_table(existing)
            del self.tables[table.name]

        table.depends_on.clear()
        table.dependants.clear()
        for fk in table.foreign_keys.values():
            fk.reference = None

        self.tables[table.name] = table

        for fk in table.foreign_keys.values():
            if fk.reference_table in self.tables:
                self._link(table, fk)

        return self

    def add_table_from_query(self, statement: str, error_on_duplicate: bool = False) -> Table:
        """Assemble a CREATE TABLE statement and add the result.

        Raises:
            MalformedClauseError: If the statement cannot be assembled.
            DuplicateTableError: See ``add_table()``.
        """
        table = assemble_table(statement, self.patterns)
        self.add_table(table, error_on_duplicate)
        return table

    def link_all_tables(self, with_integrity_check: bool = True) -> "TableCollection":
        """Resolve every foreign key stub across the collection.

        With ``with_integrity_check``, already linked keys are re-verified
        and missing targets are errors. Without it, stubs whose target
        table is absent are left unresolved.

        All checks run before any link is made, so a failure leaves the
        collection unchanged.

        Returns:
            This collection.

        Raises:
            MissingReferencedTableError: A target table is absent (integrity
                check only).
            DanglingFieldReferenceError: A target field is absent on the
                target table (integrity check only).
        """
        pending: list[tuple[Table, ForeignKey]] = []

        for table in self.tables.values():
            for fk in table.foreign_keys.values():
                if fk.is_linked:
                    if with_integrity_check:
                        self._check_reference_field(fk, self.tables[fk.reference])
                    continue

                target = self.tables.get(fk.reference_table)
                if target is None:
                    if with_integrity_check:
                        raise MissingReferencedTableError(fk.reference_table, fk.name, table.name)
                    logger.warning(
                        f"FK {fk.name} on {table.name} left unresolved: "
                        f"table {fk.reference_table} is missing"
                    )
                    continue

                if with_integrity_check:
                    self._check_reference_field(fk, target)
                pending.append((table, fk))

        for table, fk in pending:
            self._link(table, fk)

        return self

    def unlink_table(self, table: Table) -> None:
        """Strip every link to and from ``table``.

        Dependants lose the foreign keys that reference ``table``; tables
        it depends on forget it as a dependant; its own foreign keys become
        stubs again.
        """
        for name in list(table.dependants):
            dependant = self.tables.get(name)
            if dependant is None or dependant is table:
                continue
            for fk_name, fk in list(dependant.foreign_keys.items()):
                if fk.reference == table.name:
                    logger.debug(f"Dropping FK {fk_name} on {dependant.name}")
                    del dependant.foreign_keys[fk_name]
            dependant.depends_on.discard(table.name)

        for name in list(table.depends_on):
            target = self.tables.get(name)
            if target is not None:
                target.dependants.discard(table.name)

        for fk in table.foreign_keys.values():
            fk.reference = None

        table.depends_on.clear()
        table.dependants.clear()

    def remove_table(self, table: Table) -> "TableCollection":
        """Unlink and remove ``table``. No-op if it is not in the collection."""
        if self.tables.get(table.name) is not table:
            return self

        self.unlink_table(table)
        del self.tables[table.name]
        logger.debug(f"Removed table {table.name} from DB {self.name}")
        return self

    def remove_table_by_name(self, name: str) -> "TableCollection":
        """Unlink and remove the table called ``name``.

        Raises:
            UnknownTableError: If no such table exists.
        """
        table = self.tables.get(name)
        if table is None:
            raise UnknownTableError(name, self.name)
        return self.remove_table(table)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def get_missing_tables(self, target: "TableCollection") -> list[Table]:
        """Tables of ``target`` that this collection lacks, in target order."""
        return [table for table in target if table.name not in self.tables]

    def add_missing_tables(self, source: "TableCollection") -> list[Table]:
        """Copy every table of ``source`` missing here, then link the copies.

        Each foreign key of a copied table must target a table already
        present here or one copied in the same call. The tables in
        ``source`` are not modified.

        Returns:
            The copies added to this collection.

        Raises:
            MissingReferencedTableError: If a copied table references a
                table found in neither collection. Nothing is added.
        """
        missing = self.get_missing_tables(source)
        incoming = {table.name for table in missing}

        for table in missing:
            for fk in table.foreign_keys.values():
                if fk.reference_table not in self.tables and fk.reference_table not in incoming:
                    raise MissingReferencedTableError(fk.reference_table, fk.name, table.name)

        added = []
        for table in missing:
            copy = table.model_copy(deep=True)
            self.add_table(copy)
            added.append(copy)

        # Copies added early may reference copies added after them
        for copy in added:
            for fk in copy.foreign_keys.values():
                if not fk.is_linked:
                    self._link(copy, fk)

        logger.debug(f"Added {len(added)} missing tables to DB {self.name}")
        return added

    def compare(self, target: "TableCollection") -> SchemaComparison:
        """See ``ddl_graph.schema.comparator.compare_collections``."""
        return compare_collections(self, target)

    # ------------------------------------------------------------------
    # Resolution and rendering
    # ------------------------------------------------------------------

    def resolve_creation_order(self) -> list[Table]:
        """See ``ddl_graph.schema.resolver.resolve_creation_order``."""
        return resolve_creation_order(self)

    def diagnose_creation_order(self) -> OrderDiagnosis:
        """See ``ddl_graph.schema.resolver.diagnose_creation_order``."""
        return diagnose_creation_order(self)

    def get_create_statements(self) -> dict[str, str]:
        """CREATE TABLE statements keyed by table name, in creation order.

        Raises:
            UnresolvableOrderError: If no creation order exists.
        """
        return {table.name: table.definition_string() for table in self.resolve_creation_order()}

    def definition_string(self) -> str:
        """Render ``CREATE DATABASE`` for this collection."""
        quote = self.patterns.quote
        pre = ""
        if self.drop_existing:
            pre = f"DROP SCHEMA IF EXISTS {quote}{self.name}{quote};\n"
        return (
            f"{pre}CREATE DATABASE IF NOT EXISTS {quote}{self.name}{quote} "
            f"DEFAULT CHARACTER SET {self.charset};"
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _link(self, table: Table, fk: ForeignKey) -> None:
        target = self.tables[fk.reference_table]
        fk.reference = target.name
        # A self reference never blocks creation
        if target is table:
            return
        table.depends_on.add(target.name)
        target.dependants.add(table.name)
        logger.debug(f"Linked {table.name} -> {target.name} via FK {fk.name}")

    @staticmethod
    def _check_reference_field(fk: ForeignKey, target: Table) -> None:
        if not target.has_field(fk.reference_field):
            raise DanglingFieldReferenceError(fk.name, fk.reference_field, target.name)
