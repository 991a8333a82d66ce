"""Resource loader — reads resources.yaml and builds Resources.

File layout::

    config:            # optional HealthConfig overrides
      notifications:
        channels: [log, slack]
    resources:
      - name: Database
        abbreviation: db
        checker: {type: tcp, hostname: db.internal, port: 5432}
        targets:
          - primary: {hostname: db1.internal}
          - replica: {hostname: db2.internal}

An entry that fails with ConfigurationError is logged and skipped; the rest
of the file still loads.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from healthdeck.checkers.registry import CheckerRegistry
from healthdeck.config import HealthConfig, settings
from healthdeck.errors import ConfigurationError
from healthdeck.health.resource import Resource
from healthdeck.notifications.channels import WebhookSink
from healthdeck.notifications.dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


class ResourceLoader:
    """Loads and caches resources from a YAML file.

    Unless a dispatcher is injected, the loader builds one shared dispatcher
    for all of its resources and closes it on ``reload()`` / ``close()``.
    """

    def __init__(
        self,
        path: Path | str | None = None,
        config: HealthConfig | None = None,
        registry: CheckerRegistry | None = None,
        dispatcher: NotificationDispatcher | None = None,
    ) -> None:
        self._path = Path(path or settings.resources_path)
        self._base_config = config or HealthConfig.from_settings()
        self.config = self._base_config
        self._registry = registry
        self._injected_dispatcher = dispatcher
        self._owned_dispatcher: NotificationDispatcher | None = None
        self._resources: list[Resource] = []
        self._loaded = False

    @property
    def dispatcher(self) -> NotificationDispatcher:
        if self._injected_dispatcher is not None:
            return self._injected_dispatcher
        if self._owned_dispatcher is None:
            self._owned_dispatcher = NotificationDispatcher(
                self.config.notifications.channels, WebhookSink(),
            )
        return self._owned_dispatcher

    def load(self, force: bool = False) -> list[Resource]:
        """Parse the resources file and return the Resource list."""
        if self._loaded and not force:
            return self._resources

        self._resources = []
        self._loaded = True
        if not self._path.exists():
            logger.warning("Resources file not found: %s", self._path)
            return self._resources

        try:
            raw = yaml.safe_load(self._path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse {self._path}: {e}") from e
        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"{self._path}: top level must be a mapping")

        self.config = self._merge_config(raw.get("config"))
        entries = raw.get("resources") or []
        if not isinstance(entries, list):
            raise ConfigurationError(f"{self._path}: 'resources' must be a list")
        self._resources = self.build(entries)
        logger.info("Loaded %d resources from %s", len(self._resources), self._path)
        return self._resources

    def _merge_config(self, overrides: Any) -> HealthConfig:
        if overrides is not None and not isinstance(overrides, Mapping):
            raise ConfigurationError(f"{self._path}: 'config' must be a mapping")
        try:
            return self._base_config.merged(dict(overrides or {}))
        except ValidationError as e:
            raise ConfigurationError(f"{self._path}: invalid config: {e}") from e

    def build(self, entries: list[Any]) -> list[Resource]:
        resources = []
        for entry in entries:
            try:
                resources.append(Resource.factory(
                    entry, self.config, registry=self._registry, dispatcher=self.dispatcher,
                ))
            except ConfigurationError as e:
                name = entry.get("name") if isinstance(entry, Mapping) else entry
                logger.warning("Skipping resource %r: %s", name, e)
        return resources

    @property
    def resources(self) -> list[Resource]:
        return self.load()

    def get(self, slug: str) -> Resource | None:
        return next((r for r in self.resources if r.slug == slug), None)

    def reload(self) -> list[Resource]:
        """Force reload from disk."""
        self._close_owned()
        return self.load(force=True)

    def close(self) -> None:
        self._close_owned()

    def _close_owned(self) -> None:
        if self._owned_dispatcher is not None:
            self._owned_dispatcher.close()
            self._owned_dispatcher = None

    def check_all(self, action: str = "check") -> list[Resource]:
        """Check regular resources first, then global ones against the full set."""
        resources = self.resources
        for resource in resources:
            if not resource.is_global:
                resource.check(action)
        for resource in resources:
            if resource.is_global:
                resource.check_global(resources, action)
        return resources

    def to_dict(self) -> list[dict[str, Any]]:
        return [r.to_dict() for r in self.resources]
