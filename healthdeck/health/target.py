from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from healthdeck.health.result import Result
from healthdeck.status import Status

if TYPE_CHECKING:
    from healthdeck.checkers.base import Checker
    from healthdeck.health.resource import Resource

logger = logging.getLogger(__name__)

DEFAULT_TARGET_NAME = "default"


@dataclass(eq=False)
class Target:
    """One check instance bound to a checker, holding its latest Result."""

    name: str
    checker: Checker
    position: int = 0
    result: Result | None = None
    # Lookup only; the Resource owns its targets, not the other way round
    resource: Resource | None = field(default=None, repr=False)

    def check(self) -> Target:
        """Run the checker and replace ``result``.

        Checker failures of any kind become an UNKNOWN result here and are
        never raised to the caller.
        """
        try:
            result = self.checker.probe(self)
            if not isinstance(result, Result):
                raise TypeError(
                    f"{self.checker.display_name} returned {type(result).__name__}, not Result"
                )
        except Exception as e:
            logger.warning(
                "Check %s/%s failed: %s: %s",
                self.resource.slug if self.resource else "?", self.name, type(e).__name__, e,
            )
            result = Result(Status.UNKNOWN, f"{type(e).__name__}: {e}")

        self.result = result
        return self

    @property
    def status(self) -> Status:
        return self.result.status if self.result else Status.UNKNOWN

    @property
    def healthy(self) -> bool:
        return self.result is not None and self.result.healthy

    def as_mapping(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "position": self.position,
            "checker": self.checker.display_name,
            "status": self.status.value,
            "healthy": self.healthy,
            "result": self.result,
        }
