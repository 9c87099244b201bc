"""Compiled clause patterns for quoted-identifier CREATE TABLE text.

A ``PatternSet`` holds every regular expression the extractor needs,
compiled once for a given identifier quote character. Instances are
immutable after construction; ``DEFAULT_PATTERNS`` covers the MySQL
backtick dialect and is shared module-wide.

Usage:
    from ddl_graph.schema.patterns import DEFAULT_PATTERNS

    DEFAULT_PATTERNS.identifiers("PRIMARY KEY (`id`,`lang`)")
    # ['id', 'lang']

    match = DEFAULT_PATTERNS.field_definition("`id` int(11) NOT NULL AUTO_INCREMENT,")
    match.name, match.data_type
    # ('id', 'int(11)')
"""

import re
from dataclasses import dataclass

from ddl_graph.errors import MalformedClauseError


@dataclass(frozen=True)
class FieldMatch:
    """Captured groups of a column definition line.

    Example:
        FieldMatch(name="price", data_type="decimal(10, 2)", attributes="unsigned",
                   not_null="NOT NULL", marker="DEFAULT '0.00'", default="'0.00'")
    """

    name: str
    data_type: str
    attributes: str
    not_null: str
    marker: str
    default: str

    @property
    def attribute_text(self) -> str:
        """Attribute text, NOT NULL marker and DEFAULT/AUTO_INCREMENT marker joined."""
        parts = [self.attributes, self.not_null]
        if self.marker != ",":
            parts.append(self.marker)
        return " ".join(part for part in parts if part)


class PatternSet:
    """Immutable set of compiled clause patterns for one quote character.

    Args:
        quote: Single character wrapping identifiers (default: backtick).

    Raises:
        ValueError: If ``quote`` is not exactly one character.
    """

    __slots__ = (
        "_quote",
        "_generic",
        "_field_def",
        "_fk_def",
        "_fk_actions",
        "_auto_increment_option",
        "_create_table",
    )

    def __init__(self, quote: str = "`"):
        if len(quote) != 1 or quote.isspace():
            raise ValueError(f"Quote must be a single non-space character, got {quote!r}")

        q = re.escape(quote)
        name = rf"{q}([^{q}]+){q}"

        object.__setattr__(self, "_quote", quote)
        # Table names, PK and index field lists
        object.__setattr__(self, "_generic", re.compile(name))
        object.__setattr__(
            self,
            "_field_def",
            re.compile(
                rf"^{name}\s+([^\s(,]+(?:\([^)]*\))?)\s*(.*?)\s*(NOT NULL)?\s*"
                rf"(DEFAULT\s+([^,]+)|AUTO_INCREMENT|,|$)",
                re.IGNORECASE,
            ),
        )
        # constraint name, key field, referenced table, referenced field
        object.__setattr__(
            self,
            "_fk_def",
            re.compile(
                rf"{name}[^(]+\(\s*{name}[^)]*\)[^{q}]+{name}[^(]*\(\s*{name}"
            ),
        )
        object.__setattr__(
            self,
            "_fk_actions",
            re.compile(
                r"\bON\s+(DELETE|UPDATE)\s+"
                r"(CASCADE|SET\s+NULL|SET\s+DEFAULT|NO\s+ACTION|RESTRICT)",
                re.IGNORECASE,
            ),
        )
        object.__setattr__(
            self, "_auto_increment_option", re.compile(r"\s*AUTO_INCREMENT=\d+", re.IGNORECASE)
        )
        object.__setattr__(
            self,
            "_create_table",
            re.compile(rf"CREATE TABLE(?:\s+IF NOT EXISTS)?\s+{q}[^{q}]+{q}\s*\(", re.IGNORECASE),
        )

    def __setattr__(self, key, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self) -> str:
        return f"PatternSet(quote={self._quote!r})"

    @property
    def quote(self) -> str:
        """The identifier quote character."""
        return self._quote

    def identifiers(self, line: str) -> list[str]:
        """Return every quoted identifier in ``line``, in order."""
        return self._generic.findall(line)

    def first_identifier(self, line: str) -> str:
        """Return the first quoted identifier in ``line``.

        Raises:
            MalformedClauseError: If the line holds no quoted identifier.
        """
        match = self._generic.search(line)
        if match is None:
            raise MalformedClauseError(line, "No quoted identifier found")
        return match.group(1)

    def field_definition(self, line: str) -> FieldMatch:
        """Split a column definition line into its captured groups.

        Raises:
            MalformedClauseError: If the line is not a column definition.
        """
        match = self._field_def.match(line)
        if match is None:
            raise MalformedClauseError(line, "Unable to extract field name and type")
        name, data_type, attributes, not_null, marker, default = match.groups()
        return FieldMatch(
            name=name,
            data_type=data_type,
            attributes=(attributes or "").strip(),
            not_null=not_null or "",
            marker=(marker or "").strip(),
            default=(default or "").strip(),
        )

    def foreign_key_definition(self, line: str) -> tuple[str, str, str, str]:
        """Extract (constraint name, key field, referenced table, referenced field).

        Raises:
            MalformedClauseError: If the four identifiers cannot be captured.
        """
        match = self._fk_def.search(line)
        if match is None:
            raise MalformedClauseError(line, "Unable to extract constraint")
        name, key_field, reference_table, reference_field = match.groups()
        return name, key_field, reference_table, reference_field

    def constraint_actions(self, line: str) -> list[str]:
        """Return normalised ``ON DELETE`` / ``ON UPDATE`` clauses of a constraint line."""
        actions = []
        for event, action in self._fk_actions.findall(line):
            actions.append(f"ON {event.upper()} {' '.join(action.upper().split())}")
        return actions

    def strip_auto_increment(self, statement: str) -> str:
        """Remove the ``AUTO_INCREMENT=<n>`` table option from a statement."""
        return self._auto_increment_option.sub("", statement)

    def create_statements(self, content: str) -> list[str]:
        """Return every ``CREATE TABLE ...;`` block found in ``content``.

        A ``;`` only ends a statement outside string literals, quoted
        identifiers and comments, so ``DEFAULT ';'`` or ``COMMENT 'a;b'``
        stay inside their statement.

        Raises:
            MalformedClauseError: If a quote or block comment is never closed.
        """
        return [
            statement
            for statement in self.split_statements(content)
            if self._create_table.match(statement)
        ]

    def split_statements(self, content: str) -> list[str]:
        """Split SQL text on unquoted ``;``, dropping comments between statements.

        A trailing statement without ``;`` is returned as is.

        Raises:
            MalformedClauseError: If a quote or block comment is never closed.
        """
        statements = []
        quotes = {"'", '"', self._quote}
        start = None
        i = 0
        length = len(content)

        while i < length:
            char = content[i]

            if char in quotes:
                end = self._closing_quote(content, i)
                if end < 0:
                    raise MalformedClauseError(content[i : i + 80], "Unterminated quoted text")
                if start is None:
                    start = i
                i = end + 1
                continue

            if char == "#" or content.startswith("-- ", i) or content.startswith("--\n", i):
                newline = content.find("\n", i)
                i = length if newline < 0 else newline + 1
                continue

            if content.startswith("/*", i):
                end = content.find("*/", i + 2)
                if end < 0:
                    raise MalformedClauseError(content[i : i + 80], "Unterminated comment")
                i = end + 2
                continue

            if char == ";":
                if start is not None:
                    statements.append(content[start : i + 1])
                start = None
            elif start is None and not char.isspace():
                start = i
            i += 1

        if start is not None and content[start:].strip():
            statements.append(content[start:].rstrip())
        return statements

    def _closing_quote(self, content: str, open_at: int) -> int:
        """Index of the quote closing the one at ``open_at``, or -1."""
        quote = content[open_at]
        i = open_at + 1
        while i < len(content):
            char = content[i]
            if char == "\\" and quote != self._quote:
                i += 2
                continue
            if char == quote:
                # Doubled quote is an escaped quote
                if content.startswith(quote, i + 1):
                    i += 2
                    continue
                return i
            i += 1
        return -1


DEFAULT_PATTERNS = PatternSet()
