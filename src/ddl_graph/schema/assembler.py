"""Assemble ``Table`` models from CREATE TABLE statement text.

Expects one clause per line, as produced by ``SHOW CREATE TABLE`` or
``mysqldump``:

    CREATE TABLE `orders` (
      `id` int(10) unsigned NOT NULL AUTO_INCREMENT,
      `user_id` int(10) unsigned NOT NULL,
      PRIMARY KEY (`id`),
      KEY `idx_user` (`user_id`),
      CONSTRAINT `fk_orders_user` FOREIGN KEY (`user_id`) REFERENCES `users` (`id`)
    ) ENGINE=InnoDB AUTO_INCREMENT=42 DEFAULT CHARSET=utf8;

The first line yields the table name; the first and last lines are not
classified. Any line that fails to build aborts the whole statement.

Usage:
    from ddl_graph.schema.assembler import assemble_table, split_create_statements

    for statement in split_create_statements(Path("dump.sql").read_text()):
        table = assemble_table(statement)
"""

import logging

from ddl_graph.errors import MalformedClauseError
from ddl_graph.schema.builder import (
    build_field,
    build_foreign_key_stub,
    build_index,
    build_primary_key,
)
from ddl_graph.schema.models import Table
from ddl_graph.schema.patterns import DEFAULT_PATTERNS, PatternSet

logger = logging.getLogger(__name__)


def assemble_table(statement: str, patterns: PatternSet = DEFAULT_PATTERNS) -> Table:
    """Parse one CREATE TABLE statement into a ``Table``.

    Lines are classified by first match: leading quote character is a
    column, ``PRIMARY KEY`` is the primary key, ``CONSTRAINT`` is a foreign
    key, anything else is an index.

    Args:
        statement: Full statement text, one clause per line.
        patterns: Pattern set for the identifier quote character.

    Returns:
        The assembled table with unlinked foreign key stubs.

    Raises:
        MalformedClauseError: If no table name is found, the clause list is
            missing or not closed, a line does not match its clause shape,
            or a column, index or constraint name repeats.
        FieldParseError: If a column line cannot be parsed.
        UnknownFieldReferenceError: If an index or primary key names a
            column not defined above it.
    """
    lines = statement.strip().splitlines()
    if not lines:
        raise MalformedClauseError(statement, "Empty statement")

    name = patterns.first_identifier(lines[0])
    if len(lines) < 2:
        raise MalformedClauseError(lines[0], f"No clause list found for table '{name}'")
    if not lines[-1].lstrip().startswith(")"):
        raise MalformedClauseError(lines[-1], f"Clause list of table '{name}' is not closed")

    table = Table(name=name, create_statement=statement.strip())

    for raw_line in lines[1:-1]:
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith(patterns.quote):
            field = build_field(line, patterns)
            if field.name in table.fields:
                raise MalformedClauseError(line, f"Duplicate field '{field.name}'")
            table.fields[field.name] = field
        elif "PRIMARY KEY" in line:
            primary_key = build_primary_key(line, table.fields, patterns)
            for field_name in primary_key.fields:
                table.fields[field_name] = table.fields[field_name].model_copy(
                    update={"is_primary_key": True}
                )
            table.primary_key = primary_key
        elif "CONSTRAINT" in line:
            fk = build_foreign_key_stub(line, patterns)
            if fk.name in table.foreign_keys:
                raise MalformedClauseError(line, f"Duplicate constraint '{fk.name}'")
            table.foreign_keys[fk.name] = fk
        else:
            index = build_index(line, table.fields, patterns)
            if index.name in table.indexes:
                raise MalformedClauseError(line, f"Duplicate index '{index.name}'")
            table.indexes[index.name] = index

    logger.debug(
        f"Assembled table {name}: {len(table.fields)} fields, "
        f"{len(table.indexes)} indexes, {len(table.foreign_keys)} foreign keys"
    )
    return table


def split_create_statements(content: str, patterns: PatternSet = DEFAULT_PATTERNS) -> list[str]:
    """Extract every CREATE TABLE statement from a schema dump.

    Comments and other statement types (views, triggers, SET directives)
    are skipped.

    Example:
        >>> split_create_statements("SET NAMES utf8;\\nCREATE TABLE `a` (\\n  `id` int\\n);")
        ['CREATE TABLE `a` (\\n  `id` int\\n);']
    """
    return patterns.create_statements(content)
