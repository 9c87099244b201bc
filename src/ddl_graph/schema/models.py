"""Pydantic models for the extracted schema and order diagnosis.

This module contains schema-domain models:
- Entity models: Field, PrimaryKey, Index, ForeignKey, Table
- Comparison models: TableDiff, SchemaComparison
- Resolution models: UnresolvedTable, OrderDiagnosis

Tables never hold other Table objects. Links between tables (``depends_on``,
``dependants``, ``ForeignKey.reference``) are table names resolved through
the owning ``TableCollection``.
"""

from pydantic import BaseModel, ConfigDict, Field as ModelField

from ddl_graph.schema.patterns import DEFAULT_PATTERNS


# ============================================================================
# Entity Models
# ============================================================================


class DefinitionModel(BaseModel):
    """Base for entities that render back to a DDL clause."""

    def definition_string(self) -> str:
        raise NotImplementedError

    def is_equal(self, other: "DefinitionModel") -> bool:
        """True if both entities render the same definition.

        Raises:
            TypeError: If ``other`` is a different kind of entity.
        """
        if type(other) is not type(self):
            raise TypeError(
                f"Cannot compare {type(self).__name__} to {type(other).__name__}"
            )
        return self.definition_string() == other.definition_string()


class Field(DefinitionModel):
    """A column of a table.

    Example:
        >>> col = Field(name="id", data_type="int(11)")
        >>> col.nullable, col.signed
        (True, True)
    """

    model_config = ConfigDict(frozen=True)

    name: str
    data_type: str
    default_value: str = ""
    attributes: str = ""
    nullable: bool = True
    auto_increment: bool = False
    is_primary_key: bool = False
    signed: bool = True

    def definition_string(self, quote: str = "`") -> str:
        """Render the column back as a definition clause."""
        parts = [f"{quote}{self.name}{quote}", self.data_type]
        if self.attributes:
            parts.append(self.attributes)
        return " ".join(parts)


class PrimaryKey(DefinitionModel):
    """Primary key of a table: names of its member fields."""

    fields: list[str] = ModelField(default_factory=list)

    def contains_field(self, name: str) -> bool:
        return name in self.fields

    def definition_string(self, quote: str = "`") -> str:
        columns = ",".join(f"{quote}{name}{quote}" for name in self.fields)
        return f"PRIMARY KEY ({columns})"


class Index(DefinitionModel):
    """Secondary index of a table."""

    name: str
    unique: bool = False
    fields: list[str] = ModelField(default_factory=list)

    def contains_field(self, name: str) -> bool:
        return name in self.fields

    def definition_string(self, quote: str = "`") -> str:
        columns = ",".join(f"{quote}{name}{quote}" for name in self.fields)
        prefix = "UNIQUE KEY" if self.unique else "KEY"
        return f"{prefix} {quote}{self.name}{quote} ({columns})"


class ForeignKey(DefinitionModel):
    """Foreign key constraint owned by a table.

    ``reference`` is the name of the linked target table, or ``None``
    while the key is an unresolved stub.

    Example:
        >>> fk = ForeignKey(name="fk_user", key_field="user_id",
        ...                 reference_table="users", reference_field="id")
        >>> fk.is_linked
        False
    """

    name: str
    key_field: str
    reference_table: str
    reference_field: str
    constraints: list[str] = ModelField(default_factory=list)  # ON DELETE / ON UPDATE
    reference: str | None = None

    @property
    def is_linked(self) -> bool:
        """True once the key is resolved to a table in the collection."""
        return self.reference is not None

    def definition_string(self, quote: str = "`") -> str:
        parts = [
            f"CONSTRAINT {quote}{self.name}{quote} FOREIGN KEY ({quote}{self.key_field}{quote})",
            f"REFERENCES {quote}{self.reference_table}{quote} ({quote}{self.reference_field}{quote})",
        ]
        parts.extend(self.constraints)
        return " ".join(parts)


class Table(DefinitionModel):
    """A table assembled from one CREATE TABLE statement.

    ``depends_on`` and ``dependants`` are maintained by ``TableCollection``
    only; they are inverse views of the same foreign-key relationship.
    """

    name: str
    create_statement: str = ""
    fields: dict[str, Field] = ModelField(default_factory=dict)
    primary_key: PrimaryKey | None = None
    indexes: dict[str, Index] = ModelField(default_factory=dict)
    foreign_keys: dict[str, ForeignKey] = ModelField(default_factory=dict)
    depends_on: set[str] = ModelField(default_factory=set)
    dependants: set[str] = ModelField(default_factory=set)

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def has_index(self, name: str) -> bool:
        return name in self.indexes

    def has_foreign_key(self, name: str) -> bool:
        return name in self.foreign_keys

    @property
    def has_primary_key(self) -> bool:
        return self.primary_key is not None

    @property
    def unresolved_foreign_keys(self) -> list[ForeignKey]:
        """Foreign keys that are still stubs."""
        return [fk for fk in self.foreign_keys.values() if not fk.is_linked]

    def definition_string(self) -> str:
        """Return the retained statement without the ``AUTO_INCREMENT=<n>`` option."""
        return DEFAULT_PATTERNS.strip_auto_increment(self.create_statement)


# ============================================================================
# Resolution Models
# ============================================================================


class UnresolvedTable(BaseModel):
    """A table the order resolver could not place."""

    table: str
    waiting_on: list[str] = ModelField(default_factory=list)
    message: str = ""


class OrderDiagnosis(BaseModel):
    """Outcome of creation-order resolution.

    Example:
        >>> diagnosis = OrderDiagnosis(resolved=["users"])
        >>> diagnosis.resolvable
        True
        >>> diagnosis.format_report()
        'Creation order resolved (1 tables)'
    """

    resolved: list[str] = ModelField(default_factory=list)
    unresolved: list[UnresolvedTable] = ModelField(default_factory=list)

    @property
    def resolvable(self) -> bool:
        return not self.unresolved

    @property
    def waiting_on(self) -> dict[str, set[str]]:
        """Mapping of stuck table name to the set of tables it still waits on."""
        return {item.table: set(item.waiting_on) for item in self.unresolved}

    def format_report(self) -> str:
        """Format the diagnosis as a human-readable report."""
        if self.resolvable:
            return f"Creation order resolved ({len(self.resolved)} tables)"

        lines = ["Table sorting error, possible circular references:"]
        for item in sorted(self.unresolved, key=lambda u: u.table):
            lines.append(f"  - {item.message}")
        return "\n".join(lines)


# ============================================================================
# Comparison Models
# ============================================================================


class TableDiff(BaseModel):
    """Entity-level differences of one table present in both schemas.

    ``missing_*`` exist in the target but not the base, ``extra_*`` exist
    in the base only, ``changed_*`` exist in both with different
    definitions.
    """

    table: str
    missing_fields: list[str] = ModelField(default_factory=list)
    extra_fields: list[str] = ModelField(default_factory=list)
    changed_fields: list[str] = ModelField(default_factory=list)
    missing_indexes: list[str] = ModelField(default_factory=list)
    extra_indexes: list[str] = ModelField(default_factory=list)
    changed_indexes: list[str] = ModelField(default_factory=list)
    missing_foreign_keys: list[str] = ModelField(default_factory=list)
    extra_foreign_keys: list[str] = ModelField(default_factory=list)
    changed_foreign_keys: list[str] = ModelField(default_factory=list)
    primary_key_changed: bool = False

    @property
    def has_changes(self) -> bool:
        return self.primary_key_changed or any(
            getattr(self, name)
            for name in type(self).model_fields
            if name not in ("table", "primary_key_changed")
        )


class SchemaComparison(BaseModel):
    """Result of comparing a base schema against a target schema.

    Example:
        >>> result = SchemaComparison(identical=True)
        >>> result.format_report()
        'Schemas identical'
    """

    identical: bool
    missing_tables: list[str] = ModelField(default_factory=list)
    extra_tables: list[str] = ModelField(default_factory=list)
    changed_tables: list[TableDiff] = ModelField(default_factory=list)

    def format_report(self) -> str:
        """Format the comparison as a human-readable report."""
        if self.identical:
            return "Schemas identical"

        lines = ["Schemas differ:"]

        if self.missing_tables:
            lines.append(f"\n  Missing tables ({len(self.missing_tables)}):")
            for table in self.missing_tables:
                lines.append(f"    - {table}")

        if self.extra_tables:
            lines.append(f"\n  Extra tables ({len(self.extra_tables)}):")
            for table in self.extra_tables:
                lines.append(f"    - {table}")

        if self.changed_tables:
            lines.append(f"\n  Changed tables ({len(self.changed_tables)}):")
            for diff in self.changed_tables:
                lines.append(f"    - {diff.table}")
                for label, names in (
                    ("missing fields", diff.missing_fields),
                    ("extra fields", diff.extra_fields),
                    ("changed fields", diff.changed_fields),
                    ("missing indexes", diff.missing_indexes),
                    ("extra indexes", diff.extra_indexes),
                    ("changed indexes", diff.changed_indexes),
                    ("missing foreign keys", diff.missing_foreign_keys),
                    ("extra foreign keys", diff.extra_foreign_keys),
                    ("changed foreign keys", diff.changed_foreign_keys),
                ):
                    if names:
                        lines.append(f"        {label}: {', '.join(names)}")
                if diff.primary_key_changed:
                    lines.append("        primary key changed")

        return "\n".join(lines)
