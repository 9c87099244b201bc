"""Build typed schema entities from single clause lines.

Each builder takes one trimmed line of a CREATE TABLE statement and
returns one entity, or raises. Index and primary key builders resolve the
column names they mention against the fields already parsed for the table.

Usage:
    from ddl_graph.schema.builder import build_field, build_index

    field = build_field("`id` int(10) unsigned NOT NULL AUTO_INCREMENT,")
    field.signed, field.nullable, field.auto_increment
    # (False, False, True)

    index = build_index("UNIQUE KEY `uq_email` (`email`),", {"email": email_field})
"""

from collections.abc import Mapping

from ddl_graph.errors import (
    FieldParseError,
    MalformedClauseError,
    UnknownFieldReferenceError,
)
from ddl_graph.schema.models import Field, ForeignKey, Index, PrimaryKey
from ddl_graph.schema.patterns import DEFAULT_PATTERNS, PatternSet


def build_field(line: str, patterns: PatternSet = DEFAULT_PATTERNS) -> Field:
    """Build a ``Field`` from a column definition line.

    Flags are derived from the attribute text, case-insensitively:
    ``unsigned`` clears ``signed``, ``not null`` clears ``nullable``,
    ``auto_increment`` sets ``auto_increment``. The default value is only
    taken when a ``default `` token is present.

    Raises:
        FieldParseError: If the line does not match the column shape.
    """
    try:
        match = patterns.field_definition(line)
    except MalformedClauseError:
        raise FieldParseError(line) from None

    attributes = match.attribute_text
    lower_attr = attributes.lower()

    return Field(
        name=match.name,
        data_type=match.data_type,
        default_value=match.default if "default " in lower_attr else "",
        attributes=attributes,
        nullable="not null" not in lower_attr,
        auto_increment="auto_increment" in lower_attr,
        signed="unsigned" not in lower_attr,
    )


def _resolve_field_names(
    names: list[str], owning_fields: Mapping[str, Field], line: str
) -> list[str]:
    for name in names:
        if name not in owning_fields:
            raise UnknownFieldReferenceError(name, line)
    return list(names)


def build_index(
    line: str,
    owning_fields: Mapping[str, Field],
    patterns: PatternSet = DEFAULT_PATTERNS,
) -> Index:
    """Build an ``Index`` from a ``KEY`` / ``UNIQUE KEY`` line.

    The first identifier is the index name, the rest are column names.

    Raises:
        MalformedClauseError: If the line has no name plus at least one column.
        UnknownFieldReferenceError: If a column is not in ``owning_fields``.
    """
    names = patterns.identifiers(line)
    if len(names) < 2:
        raise MalformedClauseError(line, "Unable to reliably parse index line")

    return Index(
        name=names[0],
        unique="unique" in line.lower(),
        fields=_resolve_field_names(names[1:], owning_fields, line),
    )


def build_primary_key(
    line: str,
    owning_fields: Mapping[str, Field],
    patterns: PatternSet = DEFAULT_PATTERNS,
) -> PrimaryKey:
    """Build a ``PrimaryKey`` from a ``PRIMARY KEY (...)`` line.

    Raises:
        MalformedClauseError: If no column names can be extracted.
        UnknownFieldReferenceError: If a column is not in ``owning_fields``.
    """
    names = patterns.identifiers(line)
    if not names:
        raise MalformedClauseError(line, "Failed to extract fields from PK definition")

    return PrimaryKey(fields=_resolve_field_names(names, owning_fields, line))


def build_foreign_key_stub(line: str, patterns: PatternSet = DEFAULT_PATTERNS) -> ForeignKey:
    """Build an unlinked ``ForeignKey`` from a ``CONSTRAINT ... FOREIGN KEY`` line.

    The target table is only recorded by name; ``reference`` stays ``None``
    until the owning collection links it.

    Raises:
        MalformedClauseError: If the four identifiers cannot be extracted.
    """
    name, key_field, reference_table, reference_field = patterns.foreign_key_definition(line)
    return ForeignKey(
        name=name,
        key_field=key_field,
        reference_table=reference_table,
        reference_field=reference_field,
        constraints=patterns.constraint_actions(line),
    )
