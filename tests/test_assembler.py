"""Tests for CREATE TABLE statement assembly.

Verifies line classification, primary key flagging, abort-on-first-error
behaviour, definition string rendering, and dump splitting.
"""

import textwrap

import pytest

from ddl_graph.errors import (
    FieldParseError,
    MalformedClauseError,
    UnknownFieldReferenceError,
)
from ddl_graph.schema.assembler import assemble_table, split_create_statements
from ddl_graph.schema.patterns import PatternSet

USERS_SQL = textwrap.dedent("""\
    CREATE TABLE `users` (
      `id` int(10) unsigned NOT NULL AUTO_INCREMENT,
      `email` varchar(255) NOT NULL,
      `name` varchar(100) DEFAULT NULL,
      `score` decimal(10, 2) NOT NULL DEFAULT '0.00',
      PRIMARY KEY (`id`),
      UNIQUE KEY `uq_email` (`email`)
    ) ENGINE=InnoDB AUTO_INCREMENT=42 DEFAULT CHARSET=utf8;
""")

ORDERS_SQL = textwrap.dedent("""\
    CREATE TABLE `orders` (
      `id` int(10) unsigned NOT NULL AUTO_INCREMENT,
      `user_id` int(10) unsigned NOT NULL,
      `total` decimal(10,2) NOT NULL DEFAULT '0.00',
      PRIMARY KEY (`id`),
      KEY `idx_user` (`user_id`),
      CONSTRAINT `fk_orders_user` FOREIGN KEY (`user_id`) REFERENCES `users` (`id`) ON DELETE CASCADE
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8;
""")


# ------------------------------------------------------------------
# Successful assembly
# ------------------------------------------------------------------


class TestAssembleTable:
    """Verify a well-formed statement becomes a complete Table."""

    def test_table_name(self):
        """Table name comes from the first line."""
        assert assemble_table(USERS_SQL).name == "users"

    def test_fields_in_definition_order(self):
        """Every column line becomes a field keyed by its name."""
        table = assemble_table(USERS_SQL)
        assert list(table.fields) == ["id", "email", "name", "score"]
        assert table.fields["score"].data_type == "decimal(10, 2)"
        assert table.fields["name"].default_value == "NULL"

    def test_primary_key_flags_fields(self):
        """Primary key members are flagged is_primary_key."""
        table = assemble_table(USERS_SQL)
        assert table.has_primary_key
        assert table.primary_key.fields == ["id"]
        assert table.fields["id"].is_primary_key is True
        assert table.fields["email"].is_primary_key is False
        # other flags survive the copy
        assert table.fields["id"].auto_increment is True

    def test_unique_index(self):
        """UNIQUE KEY line becomes a unique index."""
        table = assemble_table(USERS_SQL)
        assert table.has_index("uq_email")
        assert table.indexes["uq_email"].unique is True
        assert table.indexes["uq_email"].fields == ["email"]

    def test_foreign_key_stub(self):
        """CONSTRAINT line becomes an unlinked foreign key."""
        table = assemble_table(ORDERS_SQL)
        fk = table.foreign_keys["fk_orders_user"]
        assert fk.reference_table == "users"
        assert fk.reference_field == "id"
        assert fk.constraints == ["ON DELETE CASCADE"]
        assert fk.reference is None
        assert table.indexes["idx_user"].unique is False

    def test_no_links_before_collection(self):
        """A freshly assembled table has no dependency links."""
        table = assemble_table(ORDERS_SQL)
        assert table.depends_on == set()
        assert table.dependants == set()
        assert [fk.name for fk in table.unresolved_foreign_keys] == ["fk_orders_user"]

    def test_map_keys_match_entity_names(self):
        """Field, index and FK map keys equal the entity's own name."""
        table = assemble_table(ORDERS_SQL)
        for mapping in (table.fields, table.indexes, table.foreign_keys):
            for key, entity in mapping.items():
                assert key == entity.name

    def test_statement_retained(self):
        """The original statement text is kept on the table."""
        table = assemble_table(USERS_SQL)
        assert table.create_statement == USERS_SQL.strip()

    def test_definition_string_strips_auto_increment_option(self):
        """definition_string() drops AUTO_INCREMENT=<n> but keeps column flags."""
        definition = assemble_table(USERS_SQL).definition_string()
        assert "AUTO_INCREMENT=42" not in definition
        assert ") ENGINE=InnoDB DEFAULT CHARSET=utf8;" in definition
        assert "NOT NULL AUTO_INCREMENT," in definition

    def test_blank_lines_skipped(self):
        """Blank lines inside the clause list are ignored."""
        sql = "CREATE TABLE `t` (\n  `id` int NOT NULL,\n\n  PRIMARY KEY (`id`)\n);"
        table = assemble_table(sql)
        assert list(table.fields) == ["id"]

    def test_index_named_like_keyword_stays_index(self):
        """A lower-case 'constraint' in an index name does not make it a foreign key."""
        sql = "CREATE TABLE `t` (\n  `a` int,\n  KEY `constraint_idx` (`a`)\n);"
        table = assemble_table(sql)
        assert table.has_index("constraint_idx")
        assert table.foreign_keys == {}

    def test_custom_quote(self):
        """A PatternSet for double quotes assembles ANSI-quoted statements."""
        sql = '''CREATE TABLE "t" (\n  "id" integer NOT NULL,\n  PRIMARY KEY ("id")\n);'''
        table = assemble_table(sql, PatternSet('"'))
        assert table.name == "t"
        assert table.fields["id"].is_primary_key is True

    def test_deterministic(self):
        """Assembling the same text twice yields equal tables."""
        assert assemble_table(ORDERS_SQL) == assemble_table(ORDERS_SQL)


# ------------------------------------------------------------------
# Failures abort the whole statement
# ------------------------------------------------------------------


class TestAssembleTableErrors:
    """Verify any bad line aborts assembly with the matching error."""

    def test_missing_table_name(self):
        """An unquoted table name is fatal."""
        with pytest.raises(MalformedClauseError, match="No quoted identifier"):
            assemble_table("CREATE TABLE users (\n  `id` int\n);")

    def test_empty_statement(self):
        """Empty text is malformed."""
        with pytest.raises(MalformedClauseError):
            assemble_table("   ")

    def test_single_line_statement(self):
        """A statement without a clause list on its own lines is malformed."""
        with pytest.raises(MalformedClauseError, match="No clause list"):
            assemble_table("CREATE TABLE `t` (`id` int);")

    def test_bad_field_line(self):
        """A broken column aborts with FieldParseError."""
        sql = "CREATE TABLE `t` (\n  `id` int NOT NULL,\n  `broken`,\n  PRIMARY KEY (`id`)\n);"
        with pytest.raises(FieldParseError):
            assemble_table(sql)

    def test_index_on_unknown_column(self):
        """An index over an undefined column aborts."""
        sql = "CREATE TABLE `t` (\n  `id` int NOT NULL,\n  KEY `idx_x` (`x`)\n);"
        with pytest.raises(UnknownFieldReferenceError):
            assemble_table(sql)

    def test_primary_key_before_column(self):
        """A primary key naming a column defined later aborts."""
        sql = "CREATE TABLE `t` (\n  PRIMARY KEY (`id`),\n  `id` int NOT NULL\n);"
        with pytest.raises(UnknownFieldReferenceError):
            assemble_table(sql)

    def test_malformed_constraint(self):
        """A CHECK constraint is not a valid foreign key line."""
        sql = "CREATE TABLE `t` (\n  `qty` int,\n  CONSTRAINT `chk_qty` CHECK (`qty` > 0)\n);"
        with pytest.raises(MalformedClauseError):
            assemble_table(sql)

    def test_duplicate_field_name(self):
        """Two columns with one name are rejected."""
        sql = "CREATE TABLE `t` (\n  `a` int,\n  `a` varchar(10)\n);"
        with pytest.raises(MalformedClauseError, match="Duplicate field 'a'"):
            assemble_table(sql)

    def test_unclosed_clause_list(self):
        """A statement cut off before its closing line is malformed."""
        sql = "CREATE TABLE `t` (\n  `a` int,\n  `b` int,"
        with pytest.raises(MalformedClauseError, match="not closed"):
            assemble_table(sql)

    def test_duplicate_index_name(self):
        """Two indexes with one name are rejected."""
        sql = "CREATE TABLE `t` (\n  `a` int,\n  KEY `idx` (`a`),\n  KEY `idx` (`a`)\n);"
        with pytest.raises(MalformedClauseError, match="Duplicate index"):
            assemble_table(sql)


# ------------------------------------------------------------------
# Dump splitting
# ------------------------------------------------------------------


class TestSplitCreateStatements:
    """Verify a dump is split into assemblable statements."""

    def test_split_and_assemble(self):
        """Every CREATE TABLE block of a dump assembles."""
        dump = "SET FOREIGN_KEY_CHECKS=0;\n" + USERS_SQL + "\n" + ORDERS_SQL
        statements = split_create_statements(dump)
        assert [assemble_table(s).name for s in statements] == ["users", "orders"]

    def test_no_statements(self):
        """A dump without CREATE TABLE yields an empty list."""
        assert split_create_statements("SET NAMES utf8;") == []

    def test_semicolon_in_quoted_values_keeps_whole_table(self):
        """Columns, keys and FKs after a quoted ; are all assembled."""
        orders = textwrap.dedent("""\
            CREATE TABLE `orders` (
              `id` int(11) NOT NULL,
              `sep` varchar(1) NOT NULL DEFAULT ';',
              `note` varchar(50) DEFAULT NULL COMMENT 'split; here',
              `user_id` int(11) NOT NULL,
              PRIMARY KEY (`id`),
              CONSTRAINT `fk_user` FOREIGN KEY (`user_id`) REFERENCES `users` (`id`)
            ) ENGINE=InnoDB;
        """)
        dump = USERS_SQL + "\n" + orders

        statements = split_create_statements(dump)
        table = assemble_table(statements[1])

        assert len(statements) == 2
        assert list(table.fields) == ["id", "sep", "note", "user_id"]
        assert table.fields["sep"].default_value == "';'"
        assert "fk_user" in table.foreign_keys
        assert table.has_primary_key
