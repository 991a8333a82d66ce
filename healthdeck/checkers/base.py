"""Checker capability — the pluggable probe behind every target."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from healthdeck.health.result import Result
    from healthdeck.health.target import Target


@runtime_checkable
class Checker(Protocol):
    """Anything with a stable display name and a ``probe`` returning a Result.

    ``probe`` receives the Target being checked; global checkers reach the
    sibling resource snapshot through ``target.resource.resources``.
    """

    display_name: str

    def probe(self, target: Target) -> Result: ...


class BaseChecker:
    """Convenience base: keeps the options the checker was configured with."""

    display_name = "Checker"

    def __init__(self, **options: Any) -> None:
        self.options = options

    def probe(self, target: Target) -> Result:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.display_name}>"
