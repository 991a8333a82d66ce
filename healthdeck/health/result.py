from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from healthdeck.status import Status


@dataclass(frozen=True)
class Result:
    """Outcome of a single check execution.

    Immutable: every probe produces a fresh Result, the previous one is
    simply dropped by its Target.
    """

    status: Status
    error_message: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        # Accept plain strings ("ok", "critical") from checker plugins
        if not isinstance(self.status, Status):
            object.__setattr__(self, "status", Status(self.status))

    @property
    def healthy(self) -> bool:
        return self.status is Status.OK

    @classmethod
    def ok(cls) -> Result:
        return cls(Status.OK)

    @classmethod
    def warning(cls, message: str) -> Result:
        return cls(Status.WARNING, message)

    @classmethod
    def critical(cls, message: str) -> Result:
        return cls(Status.CRITICAL, message)

    @classmethod
    def unknown(cls, message: str) -> Result:
        return cls(Status.UNKNOWN, message)
