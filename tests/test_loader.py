"""Tests for the YAML resource loader."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import yaml

from healthdeck.checkers.registry import CheckerRegistry
from healthdeck.config import HealthConfig
from healthdeck.errors import ConfigurationError
from healthdeck.health.result import Result
from healthdeck.resources.loader import ResourceLoader
from healthdeck.status import Status

from conftest import RecordingSink, StubChecker


class FailingChecker(StubChecker):
    display_name = "Failing"

    def __init__(self, **options) -> None:
        super().__init__(Result.critical(options.pop("message", "down")), **options)


@pytest.fixture
def loader_registry() -> CheckerRegistry:
    return CheckerRegistry({"stub": StubChecker, "failing": FailingChecker})


@pytest.fixture
def sample_yaml(tmp_path: Path) -> Path:
    """Create a minimal resources.yaml for testing."""
    data = {
        "config": {
            "error_message": "",
            "notifications": {"enabled": True, "notify_on": {"check": True}, "channels": ["log"]},
        },
        "resources": [
            {
                "name": "Web App",
                "abbreviation": "web",
                "checker": "stub",
            },
            {
                "name": "Database",
                "abbreviation": "db",
                "checker": "failing",
                "targets": [
                    {"primary": {"message": "disk full"}},
                    {"replica": {"type": "stub"}},
                ],
            },
            {
                "name": "Broken",
                "abbreviation": "br",
                "checker": "does-not-exist",
            },
            {
                "name": "Fleet",
                "abbreviation": "fl",
                "checker": "stub",
                "is_global": True,
            },
        ],
    }
    path = tmp_path / "resources.yaml"
    path.write_text(yaml.dump(data), encoding="utf-8")
    return path


@pytest.fixture
def loader(sample_yaml: Path, loader_registry: CheckerRegistry) -> ResourceLoader:
    return ResourceLoader(sample_yaml, config=HealthConfig(), registry=loader_registry)


class TestResourceLoader:
    def test_load_skips_broken(self, loader: ResourceLoader) -> None:
        resources = loader.load()
        assert [r.slug for r in resources] == ["web-app", "database", "fleet"]

    def test_config_section_applied(self, loader: ResourceLoader) -> None:
        loader.load()
        assert loader.config.notifications.notify_on == {"check": True}
        assert loader.get("database").error_message == ""

    def test_targets_parsed(self, loader: ResourceLoader) -> None:
        db = loader.get("database")
        assert [t.name for t in db.targets] == ["primary", "replica"]
        assert db.targets[0].checker.display_name == "Failing"
        assert db.targets[1].checker.display_name == "Stub checker"

    def test_get_missing(self, loader: ResourceLoader) -> None:
        assert loader.get("nope") is None

    def test_missing_file(self, tmp_path: Path) -> None:
        loader = ResourceLoader(tmp_path / "nope.yaml", config=HealthConfig())
        assert loader.load() == []

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("resources: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            ResourceLoader(path, config=HealthConfig()).load()

    def test_check_all(self, sample_yaml: Path, loader_registry: CheckerRegistry) -> None:
        from healthdeck.notifications.dispatcher import NotificationDispatcher

        sink = RecordingSink()
        loader = ResourceLoader(
            sample_yaml, config=HealthConfig(), registry=loader_registry,
            dispatcher=NotificationDispatcher(["log"], sink),
        )
        resources = loader.check_all("check")

        statuses = {r.slug: r.get_status() for r in resources}
        assert statuses == {"web-app": Status.OK, "database": Status.CRITICAL, "fleet": Status.OK}
        fleet = loader.get("fleet")
        assert fleet.resources == tuple(resources)
        assert sink.delivered == [("database", "log")]

    def test_reload(self, loader: ResourceLoader, sample_yaml: Path) -> None:
        first = loader.load()
        assert loader.load() is first
        sample_yaml.write_text(yaml.dump({"resources": []}), encoding="utf-8")
        assert loader.reload() == []

    def test_to_dict(self, loader: ResourceLoader) -> None:
        data = loader.to_dict()
        assert data[0]["name"] == "Web App"
        assert data[0]["status"] == "unknown"

    def test_non_mapping_entry_skipped(self, tmp_path: Path, loader_registry: CheckerRegistry) -> None:
        path = tmp_path / "resources.yaml"
        path.write_text(yaml.dump({"resources": [
            "db",
            {"name": "Cache", "abbreviation": "c", "checker": "stub", "style": ["a"]},
            {"name": "OK", "abbreviation": "ok", "checker": "stub"},
        ]}), encoding="utf-8")
        loader = ResourceLoader(path, config=HealthConfig(), registry=loader_registry)
        assert [r.slug for r in loader.load()] == ["ok"]

    def test_invalid_config_section(self, tmp_path: Path) -> None:
        path = tmp_path / "resources.yaml"
        path.write_text(yaml.dump({
            "config": {"exit_codes": {"ok": 0, "warning": 0, "critical": 2, "unknown": 3}},
            "resources": [],
        }), encoding="utf-8")
        with pytest.raises(ConfigurationError, match="invalid config"):
            ResourceLoader(path, config=HealthConfig()).load()

    @pytest.mark.parametrize("content", ["- a\n- b\n", "config: [1]\n", "resources: {a: 1}\n"])
    def test_malformed_layout(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "resources.yaml"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ConfigurationError):
            ResourceLoader(path, config=HealthConfig()).load()

    def test_shared_dispatcher_closed_on_reload(self, loader: ResourceLoader) -> None:
        resources = loader.load()
        dispatcher = resources[0].dispatcher
        assert all(r.dispatcher is dispatcher for r in resources)
        with patch.object(dispatcher.sink, "close") as close:
            loader.reload()
        close.assert_called_once()
        assert loader.resources[0].dispatcher is not dispatcher
        loader.close()

    def test_injected_dispatcher_not_closed(self, sample_yaml: Path, loader_registry: CheckerRegistry) -> None:
        from healthdeck.notifications.dispatcher import NotificationDispatcher

        sink = MagicMock()
        loader = ResourceLoader(
            sample_yaml, config=HealthConfig(), registry=loader_registry,
            dispatcher=NotificationDispatcher(["log"], sink),
        )
        loader.load()
        loader.reload()
        loader.close()
        sink.close.assert_not_called()
