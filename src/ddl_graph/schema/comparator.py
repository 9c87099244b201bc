"""Schema comparison between two table collections.

Compares a base schema (the one to upgrade) against a target schema by
table name, then entity by entity using ``definition_string()``.
Pure logic -- no I/O.

Usage:
    from ddl_graph.schema.comparator import compare_collections

    result = compare_collections(base, target)
    if not result.identical:
        print(result.format_report())
"""

from typing import TYPE_CHECKING

from ddl_graph.schema.models import DefinitionModel, SchemaComparison, Table, TableDiff

if TYPE_CHECKING:
    from ddl_graph.schema.collection import TableCollection


def _diff_entities(
    base: dict[str, DefinitionModel],
    target: dict[str, DefinitionModel],
) -> tuple[list[str], list[str], list[str]]:
    """Return (missing, extra, changed) entity names, each sorted."""
    missing = sorted(set(target) - set(base))
    extra = sorted(set(base) - set(target))
    changed = sorted(
        name for name in set(base) & set(target) if not base[name].is_equal(target[name])
    )
    return missing, extra, changed


def compare_tables(base: Table, target: Table) -> TableDiff:
    """Compare two versions of one table.

    Example:
        >>> diff = compare_tables(base_users, target_users)
        >>> diff.missing_fields
        ['email']
    """
    missing_fields, extra_fields, changed_fields = _diff_entities(base.fields, target.fields)
    missing_indexes, extra_indexes, changed_indexes = _diff_entities(base.indexes, target.indexes)
    missing_fks, extra_fks, changed_fks = _diff_entities(base.foreign_keys, target.foreign_keys)

    if base.primary_key is None or target.primary_key is None:
        primary_key_changed = base.primary_key is not target.primary_key
    else:
        primary_key_changed = not base.primary_key.is_equal(target.primary_key)

    return TableDiff(
        table=base.name,
        missing_fields=missing_fields,
        extra_fields=extra_fields,
        changed_fields=changed_fields,
        missing_indexes=missing_indexes,
        extra_indexes=extra_indexes,
        changed_indexes=changed_indexes,
        missing_foreign_keys=missing_fks,
        extra_foreign_keys=extra_fks,
        changed_foreign_keys=changed_fks,
        primary_key_changed=primary_key_changed,
    )


def compare_collections(base: "TableCollection", target: "TableCollection") -> SchemaComparison:
    """Compare a base schema against a target schema.

    Args:
        base: Schema to upgrade.
        target: Desired schema.

    Returns:
        ``SchemaComparison`` with:

        - ``missing_tables``: tables in *target* absent from *base*
        - ``extra_tables``: tables in *base* absent from *target*
        - ``changed_tables``: a ``TableDiff`` for every shared table whose
          fields, indexes, foreign keys or primary key differ
        - ``identical``: ``True`` if all three are empty
    """
    base_names = set(base.tables)
    target_names = set(target.tables)

    changed = []
    for name in sorted(base_names & target_names):
        diff = compare_tables(base.tables[name], target.tables[name])
        if diff.has_changes:
            changed.append(diff)

    missing = sorted(target_names - base_names)
    extra = sorted(base_names - target_names)

    return SchemaComparison(
        identical=not (missing or extra or changed),
        missing_tables=missing,
        extra_tables=extra,
        changed_tables=changed,
    )
