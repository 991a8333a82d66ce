"""Tests for status ranking, aggregation and the exit-code table."""

from __future__ import annotations

import itertools

import pytest
from pydantic import ValidationError

from healthdeck.config import HealthConfig
from healthdeck.health.result import Result
from healthdeck.status import (
    DEFAULT_EXIT_CODES,
    SEVERITY,
    Status,
    exit_code_for,
    fleet_status,
    worst_status,
)


class TestSeverity:
    def test_order(self) -> None:
        ordered = sorted(Status, key=SEVERITY.__getitem__)
        assert ordered == [Status.OK, Status.UNKNOWN, Status.WARNING, Status.CRITICAL]

    def test_exit_codes_are_independent_of_severity(self) -> None:
        # UNKNOWN ranks below WARNING but has the highest exit code
        assert DEFAULT_EXIT_CODES[Status.UNKNOWN] > DEFAULT_EXIT_CODES[Status.CRITICAL]
        assert SEVERITY[Status.UNKNOWN] < SEVERITY[Status.WARNING]


class TestWorstStatus:
    def test_empty_is_ok(self) -> None:
        assert worst_status([]) == Status.OK

    def test_none_counts_as_unknown(self) -> None:
        assert worst_status([Result.ok(), None]) == Status.UNKNOWN

    def test_critical_wins(self) -> None:
        results = [Result.ok(), Result.warning("w"), Result.critical("c"), Result.unknown("u")]
        assert worst_status(results) == Status.CRITICAL

    def test_order_independent(self) -> None:
        results = [Result.ok(), Result.unknown("u"), Result.warning("w"), Result.ok()]
        outcomes = {worst_status(p) for p in itertools.permutations(results)}
        assert outcomes == {Status.WARNING}

    def test_custom_ranks(self) -> None:
        ranks = {Status.OK: 0, Status.WARNING: 1, Status.CRITICAL: 2, Status.UNKNOWN: 3}
        assert worst_status([Status.CRITICAL, Status.UNKNOWN], ranks) == Status.UNKNOWN


class TestFleet:
    def test_fleet_uses_resource_status(self) -> None:
        class Fake:
            def __init__(self, status: Status) -> None:
                self.status = status

            def get_status(self, ranks=None) -> Status:
                return self.status

        fleet = [Fake(Status.OK), Fake(Status.WARNING), Fake(Status.UNKNOWN)]
        assert fleet_status(fleet) == Status.WARNING

    def test_exit_code_for(self) -> None:
        assert exit_code_for(Status.OK) == 0
        assert exit_code_for(Status.CRITICAL) == 2
        assert exit_code_for("unknown") == 3
        assert exit_code_for(Status.WARNING, {**DEFAULT_EXIT_CODES, Status.WARNING: 9}) == 9


class TestHealthConfigTables:
    def test_duplicate_exit_codes_rejected(self) -> None:
        with pytest.raises(ValidationError):
            HealthConfig(exit_codes={"ok": 0, "warning": 1, "critical": 1, "unknown": 3})

    def test_missing_status_rejected(self) -> None:
        with pytest.raises(ValidationError):
            HealthConfig(severity={"ok": 0, "warning": 1, "critical": 2})

    def test_string_keys_coerced(self) -> None:
        cfg = HealthConfig(exit_codes={"ok": 10, "warning": 11, "critical": 12, "unknown": 13})
        assert cfg.exit_codes[Status.CRITICAL] == 12

    def test_merged_overrides(self) -> None:
        cfg = HealthConfig().merged({"notifications": {"channels": ["slack"]}, "error_message": "x"})
        assert cfg.notifications.channels == ["slack"]
        assert cfg.notifications.enabled is True
        assert cfg.error_message == "x"
