"""Exception types raised (or converted) by the health core."""

from __future__ import annotations

from typing import Any


class HealthDeckError(Exception):
    """Base class for every error the package raises on purpose."""


class ConfigurationError(HealthDeckError):
    """A resource specification is incomplete or names an unknown checker."""


class CheckerError(HealthDeckError):
    """Raised by checkers to signal a probe that could not complete.

    ``Target.check()`` turns this (or any other exception) into an UNKNOWN
    result; it never reaches the caller.
    """


class NotificationDeliveryError(HealthDeckError):
    """Delivery to a single notification channel failed."""

    def __init__(self, channel: str, resource: Any, detail: str = "") -> None:
        self.channel = channel
        self.resource = resource
        name = getattr(resource, "name", resource)
        message = f"Notification to '{channel}' failed for resource '{name}'"
        super().__init__(f"{message}: {detail}" if detail else message)
