"""Global checkers — judge a resource by looking at the rest of the fleet."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from healthdeck.checkers.base import BaseChecker
from healthdeck.errors import CheckerError
from healthdeck.health.result import Result

if TYPE_CHECKING:
    from healthdeck.health.target import Target


class HealthyCountChecker(BaseChecker):
    """At least ``minimum`` of the other resources must be healthy.

    Reads the snapshot stored by ``Resource.check_global``; the owning
    resource is excluded from the count.
    """

    display_name = "Healthy resource count"

    def __init__(self, minimum: int = 1, warning_below: int | None = None, **options: Any) -> None:
        super().__init__(**options)
        self.minimum = int(minimum)
        self.warning_below = int(warning_below) if warning_below is not None else None

    def probe(self, target: Target) -> Result:
        owner = target.resource
        if owner is None or not owner.resources:
            raise CheckerError("no resource snapshot; run it through check_global()")

        others = [r for r in owner.resources if r is not owner]
        healthy = sum(1 for r in others if r.is_healthy())

        if healthy < self.minimum:
            return Result.critical(
                f"Only {healthy} of {len(others)} resources healthy (minimum {self.minimum})"
            )
        if self.warning_below is not None and healthy < self.warning_below:
            return Result.warning(
                f"{healthy} of {len(others)} resources healthy (warning below {self.warning_below})"
            )
        return Result.ok()
