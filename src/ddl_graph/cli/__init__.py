"""CLI module for schema dump inspection and creation ordering.

Reads a SQL dump containing CREATE TABLE statements, builds the schema
graph, and reports the order in which the tables can be created.

Usage:
    ddl-graph order schema.sql
    ddl-graph order schema.sql --statements
    ddl-graph order schema.sql --no-integrity-check
    ddl-graph check schema.sql
    ddl-graph compare live.sql target.sql --statements
    ddl-graph --config ddl-graph.toml --verbose check

Commands:
    order    - Print tables (or CREATE statements) in creatable order
    check    - Parse and link the dump, summarise every table
    compare  - Report tables and entities that differ between two dumps
"""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ddl_graph.config.loader import load_graph_config
from ddl_graph.config.models import GraphConfig
from ddl_graph.errors import DDLGraphError
from ddl_graph.schema.assembler import split_create_statements
from ddl_graph.schema.collection import TableCollection
from ddl_graph.schema.patterns import PatternSet

console = Console()


# ============================================================================
# Helpers
# ============================================================================


def _load_config(config_path: str | None) -> GraphConfig:
    """Load the explicit config file, ./ddl-graph.toml if present, or defaults."""
    if config_path is not None:
        return load_graph_config(Path(config_path))

    default_path = Path.cwd() / "ddl-graph.toml"
    if default_path.exists():
        return load_graph_config(default_path)
    return GraphConfig()


def _build_collection(
    schema_file: str | Path,
    config: GraphConfig,
    integrity_check: bool,
) -> TableCollection:
    """Parse every CREATE TABLE statement in a dump into a linked collection.

    Raises:
        FileNotFoundError: If the schema file does not exist.
        ValueError: If no CREATE TABLE statements are found.
        DDLGraphError: If a statement cannot be parsed or linked.
    """
    schema_path = Path(schema_file)
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    patterns = PatternSet(config.quote)
    statements = split_create_statements(schema_path.read_text(), patterns)
    if not statements:
        raise ValueError(f"No CREATE TABLE statements found in {schema_path.name}")

    collection = TableCollection(
        name=config.name,
        charset=config.charset,
        drop_existing=config.drop_existing,
        patterns=patterns,
    )
    for statement in statements:
        collection.add_table_from_query(statement, config.error_on_duplicate)

    collection.link_all_tables(with_integrity_check=integrity_check)
    return collection


def _prepare(
    args: argparse.Namespace,
    integrity_check: bool | None = None,
    schema_file: str | None = None,
) -> TableCollection | None:
    """Load config and build the collection, printing any error.

    ``schema_file`` overrides ``args.schema_file``.

    Returns:
        The linked collection, or ``None`` if loading failed.
    """
    try:
        config = _load_config(args.config)
        schema_file = schema_file or getattr(args, "schema_file", None) or config.schema_file
        if integrity_check is None:
            integrity_check = config.integrity_check
        return _build_collection(schema_file, config, integrity_check)
    except (DDLGraphError, FileNotFoundError, ValueError) as e:
        console.print(f"\n[red]Error: {e}[/red]")
        return None


# ============================================================================
# Command implementations
# ============================================================================


def cmd_order(args: argparse.Namespace) -> int:
    """Print the tables of a dump in creatable order.

    Args:
        args: Parsed arguments with schema_file, config, statements and
            no_integrity_check.

    Returns:
        0 on success, 1 on parse/link failure or unresolvable order.
    """
    integrity_check = False if args.no_integrity_check else None
    collection = _prepare(args, integrity_check)
    if collection is None:
        return 1

    diagnosis = collection.diagnose_creation_order()
    if not diagnosis.resolvable:
        console.print()
        console.print("[bold red]x[/bold red] Unable to resolve creation order")
        console.print(diagnosis.format_report(), markup=False, highlight=False)
        return 1

    if args.statements:
        if collection.name:
            console.print(collection.definition_string(), markup=False, highlight=False)
        for name in diagnosis.resolved:
            table = collection.get_table(name)
            console.print(table.definition_string(), markup=False, highlight=False)
            console.print()
        return 0

    for position, name in enumerate(diagnosis.resolved, start=1):
        console.print(f"{position:>4}. [bold cyan]{name}[/bold cyan]")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Parse and link a dump, then summarise every table.

    Args:
        args: Parsed arguments with schema_file and config.

    Returns:
        0 if the schema parses, links and resolves; 1 otherwise.
    """
    collection = _prepare(args)
    if collection is None:
        return 1

    summary = Table(title="Schema Tables", show_header=True, header_style="bold")
    summary.add_column("Table", style="cyan")
    summary.add_column("Fields", justify="right")
    summary.add_column("Indexes", justify="right")
    summary.add_column("FKs", justify="right")
    summary.add_column("Depends on", style="dim")

    unresolved = 0
    for table in collection:
        unresolved += len(table.unresolved_foreign_keys)
        summary.add_row(
            table.name,
            str(len(table.fields)),
            str(len(table.indexes)),
            str(len(table.foreign_keys)),
            ", ".join(sorted(table.depends_on)),
        )

    console.print()
    console.print(summary)

    if unresolved:
        console.print(f"  Unresolved foreign keys: [yellow]{unresolved}[/yellow]")

    diagnosis = collection.diagnose_creation_order()
    if not diagnosis.resolvable:
        console.print("[bold red]x[/bold red] Creation order: [red]UNRESOLVABLE[/red]")
        console.print(diagnosis.format_report(), markup=False, highlight=False)
        return 1

    console.print(
        f"[bold green]v[/bold green] {len(collection)} tables, creation order resolved"
    )
    return 0


def cmd_compare(args: argparse.Namespace) -> int:
    """Compare a base dump against a target dump.

    With ``--statements``, prints the CREATE statements that add the
    target's missing tables to the base, in creation order.

    Args:
        args: Parsed arguments with base_file, target_file, config and
            statements.

    Returns:
        0 if the schemas are identical (or the statements were printed),
        1 on differences or failure.
    """
    base = _prepare(args, schema_file=args.base_file)
    if base is None:
        return 1
    target = _prepare(args, schema_file=args.target_file)
    if target is None:
        return 1

    if args.statements:
        try:
            added = {table.name for table in base.add_missing_tables(target)}
            order = base.resolve_creation_order()
        except DDLGraphError as e:
            console.print(f"\n[red]Error: {e}[/red]")
            return 1
        for table in order:
            if table.name in added:
                console.print(table.definition_string(), markup=False, highlight=False)
                console.print()
        return 0

    result = base.compare(target)
    if result.identical:
        console.print("[bold green]v[/bold green] Schemas identical")
        return 0

    console.print("[bold red]x[/bold red] Schemas differ")
    console.print(result.format_report(), markup=False, highlight=False)
    return 1


# ============================================================================
# Main entry point
# ============================================================================


def main() -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="ddl-graph",
        description="CREATE TABLE dependency graph and creation-order resolver",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to ddl-graph.toml (default: ./ddl-graph.toml if present)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # order command
    p_order = subparsers.add_parser(
        "order",
        help="Print tables in creatable order",
    )
    p_order.add_argument(
        "schema_file",
        nargs="?",
        default=None,
        help="SQL file containing CREATE TABLE statements (default: from config)",
    )
    p_order.add_argument(
        "--statements",
        action="store_true",
        help="Print the CREATE statements instead of table names",
    )
    p_order.add_argument(
        "--no-integrity-check",
        action="store_true",
        help="Leave foreign keys to missing tables unresolved instead of failing",
    )
    p_order.set_defaults(func=cmd_order)

    # check command
    p_check = subparsers.add_parser(
        "check",
        help="Parse, link and summarise a schema dump",
    )
    p_check.add_argument(
        "schema_file",
        nargs="?",
        default=None,
        help="SQL file containing CREATE TABLE statements (default: from config)",
    )
    p_check.set_defaults(func=cmd_check)

    # compare command
    p_compare = subparsers.add_parser(
        "compare",
        help="Compare a base schema dump against a target dump",
    )
    p_compare.add_argument("base_file", help="SQL dump of the schema to upgrade")
    p_compare.add_argument("target_file", help="SQL dump of the desired schema")
    p_compare.add_argument(
        "--statements",
        action="store_true",
        help="Print CREATE statements for the tables missing from the base",
    )
    p_compare.set_defaults(func=cmd_compare)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
