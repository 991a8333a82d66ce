"""Shared test fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from healthdeck.checkers.registry import CheckerRegistry
from healthdeck.config import HealthConfig, NotificationConfig
from healthdeck.health.result import Result
from healthdeck.notifications.dispatcher import NotificationDispatcher


class StubChecker:
    """Returns a fixed Result (or raises) — stands in for a real probe."""

    display_name = "Stub checker"

    def __init__(self, result: Result | None = None, error: Exception | None = None, **options: Any) -> None:
        self.result = result or Result.ok()
        self.error = error
        self.options = options
        self.calls = 0

    def probe(self, target):
        self.calls += 1
        if self.error:
            raise self.error
        if not isinstance(self.result, Result):
            return self.result
        # A fresh Result per call, as a real probe would produce
        return Result(self.result.status, self.result.error_message)


class RecordingSink:
    """Channel sink that records deliveries and fails on selected channels."""

    def __init__(self, failing: tuple[str, ...] = ()) -> None:
        self.failing = failing
        self.delivered: list[tuple[str, str]] = []

    def __call__(self, resource, channel: str) -> None:
        if channel in self.failing:
            raise ConnectionError(f"{channel} is down")
        self.delivered.append((resource.slug, channel))


@pytest.fixture
def registry() -> CheckerRegistry:
    return CheckerRegistry({"stub": StubChecker})


@pytest.fixture
def config() -> HealthConfig:
    """Notifications on for every action, one `log` channel, no error template."""
    return HealthConfig(
        error_message="",
        notifications=NotificationConfig(
            enabled=True,
            notify_on={"resource": True, "check": True, "global": True},
            channels=["log"],
        ),
    )


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def dispatcher(sink: RecordingSink, config: HealthConfig) -> NotificationDispatcher:
    return NotificationDispatcher(config.notifications.channels, sink)
