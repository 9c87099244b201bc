"""Creation-order resolution by fixed-point sweeps.

Each sweep walks every not-yet-created table in insertion order and marks
it created once everything in its ``depends_on`` set is created (tables
marked earlier in the same sweep count). Sweeps repeat until all tables
are created, or until a sweep marks nothing: the remaining tables are then
stuck on a cycle or on a link that can never be satisfied.

Sweeps are bounded by the number of tables, so the worst case is O(n^2)
dependency checks.

Usage:
    from ddl_graph.schema.resolver import resolve_creation_order

    try:
        for table in resolve_creation_order(collection):
            executor.run(table.definition_string())
    except UnresolvableOrderError as e:
        print(e.diagnosis.format_report())
"""

import logging
from typing import TYPE_CHECKING

from ddl_graph.errors import UnresolvableOrderError
from ddl_graph.schema.models import OrderDiagnosis, Table, UnresolvedTable

if TYPE_CHECKING:
    from ddl_graph.schema.collection import TableCollection

logger = logging.getLogger(__name__)


def _sweep(collection: "TableCollection") -> tuple[list[Table], list[Table]]:
    """Run sweeps to a fixed point. Returns (created in order, stuck)."""
    created: set[str] = set()
    order: list[Table] = []
    remaining = list(collection.tables.values())
    sweeps = 0

    while remaining:
        sweeps += 1
        stuck: list[Table] = []
        for table in remaining:
            if table.depends_on <= created:
                created.add(table.name)
                order.append(table)
            else:
                stuck.append(table)

        if len(stuck) == len(remaining):
            logger.debug(f"Sweep {sweeps} made no progress, {len(stuck)} tables stuck")
            return order, stuck
        remaining = stuck

    logger.debug(f"Resolved {len(order)} tables in {sweeps} sweeps")
    return order, []


def _diagnose(order: list[Table], stuck: list[Table]) -> OrderDiagnosis:
    created = {table.name for table in order}
    unresolved = []
    for table in stuck:
        waiting_on = sorted(table.depends_on - created)
        if waiting_on:
            message = f"Error resolving {table.name}: missing {', '.join(waiting_on)}"
        else:
            # Only reachable when handed a stuck list the sweep did not produce
            message = f"Error resolving {table.name}: UNKNOWN REASON"
        unresolved.append(
            UnresolvedTable(table=table.name, waiting_on=waiting_on, message=message)
        )

    return OrderDiagnosis(resolved=[table.name for table in order], unresolved=unresolved)


def diagnose_creation_order(collection: "TableCollection") -> OrderDiagnosis:
    """Resolve the creation order and report the outcome without raising.

    Returns:
        ``OrderDiagnosis`` whose ``resolved`` lists table names in creation
        order and whose ``unresolved`` lists each stuck table with the
        tables it is still waiting on.

    Example:
        >>> diagnosis = diagnose_creation_order(collection)
        >>> diagnosis.waiting_on
        {'a': {'b'}, 'b': {'a'}}
    """
    order, stuck = _sweep(collection)
    return _diagnose(order, stuck)


def resolve_creation_order(collection: "TableCollection") -> list[Table]:
    """Return the collection's tables ordered so every dependency comes first.

    Relative order among mutually independent tables follows insertion
    order but is not otherwise guaranteed.

    Raises:
        UnresolvableOrderError: If some tables can never be created; the
            error carries the ``OrderDiagnosis``.
    """
    order, stuck = _sweep(collection)
    if stuck:
        raise UnresolvableOrderError(_diagnose(order, stuck))
    return order
