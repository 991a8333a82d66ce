"""Status values, severity ranking and the exit-code projection.

Severity and exit codes are two independent tables. Aggregation only ever
consults the severity ranks; the exit-code table is a projection that calling
CLI / service layers use to turn the aggregated status into a process code.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any


class Status(str, Enum):
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"
    UNKNOWN = "unknown"


# OK < UNKNOWN < WARNING < CRITICAL
SEVERITY: dict[Status, int] = {
    Status.OK: 0,
    Status.UNKNOWN: 1,
    Status.WARNING: 2,
    Status.CRITICAL: 3,
}

DEFAULT_EXIT_CODES: dict[Status, int] = {
    Status.OK: 0,
    Status.WARNING: 1,
    Status.CRITICAL: 2,
    Status.UNKNOWN: 3,
}


def _status_of(item: Any) -> Status:
    if item is None:
        return Status.UNKNOWN
    if isinstance(item, Status):
        return item
    return item.status


def worst_status(
    results: Iterable[Any],
    ranks: Mapping[Status, int] | None = None,
) -> Status:
    """Highest-severity status among ``results``.

    Accepts Results, bare Statuses or ``None`` (a target not yet checked,
    counted as UNKNOWN). An empty input is OK. The reduction is a plain max
    over the rank table, so the answer does not depend on input order.
    """
    ranks = ranks or SEVERITY
    return max(
        (_status_of(r) for r in results),
        key=lambda s: ranks[s],
        default=Status.OK,
    )


def fleet_status(
    resources: Iterable[Any],
    ranks: Mapping[Status, int] | None = None,
) -> Status:
    """Worst status across a whole set of resources."""
    return worst_status((r.get_status(ranks) for r in resources), ranks)


def exit_code_for(status: Status, table: Mapping[Status, int] | None = None) -> int:
    return (table or DEFAULT_EXIT_CODES)[Status(status)]
