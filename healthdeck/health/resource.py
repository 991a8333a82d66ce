"""Resource — a named monitored entity made of one or more targets.

A Resource has no status of its own; status and health are always derived
from the latest Result of each of its targets.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from healthdeck.checkers.base import Checker
from healthdeck.checkers.registry import CheckerRegistry, default_registry, split_checker_spec
from healthdeck.config import HealthConfig
from healthdeck.errors import ConfigurationError
from healthdeck.health.serialize import DEFAULT_DEPTH, to_mapping
from healthdeck.health.summary import summary, summary_of_issues
from healthdeck.health.target import DEFAULT_TARGET_NAME, Target
from healthdeck.notifications.dispatcher import NotificationDispatcher
from healthdeck.notifications.gate import can_notify
from healthdeck.status import Status, worst_status

logger = logging.getLogger(__name__)

# Spec keys consumed by the factory; anything else lands in ``extra``
_KNOWN_KEYS = {
    "name", "abbreviation", "checker", "targets", "notify", "error_message",
    "warning_message", "is_global", "graph_enabled", "column_size", "style",
}

# Computed or generated fields; a spec key may never shadow them in ``extra``
_RESERVED_KEYS = {
    "id", "slug", "notified", "current_action", "status", "healthy", "resources",
}


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def snake_key(key: str) -> str:
    """``columnSize`` / ``column-size`` / ``Column Size`` -> ``column_size``."""
    key = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", str(key))
    return re.sub(r"[^a-zA-Z0-9]+", "_", key).strip("_").lower()


def _flatten_targets(raw: Any) -> list[tuple[str, Any]]:
    """Target specs as ``(name, checker_spec)`` pairs in declaration order.

    Accepts a mapping ``{name: spec}`` or a list of such mappings.
    """
    if not raw:
        return []
    if isinstance(raw, Mapping):
        return [(str(name), spec) for name, spec in raw.items()]
    if isinstance(raw, (list, tuple)):
        pairs: list[tuple[str, Any]] = []
        for entry in raw:
            if not isinstance(entry, Mapping):
                raise ConfigurationError(f"Invalid target entry: {entry!r}")
            pairs.extend((str(name), spec) for name, spec in entry.items())
        return pairs
    raise ConfigurationError(f"Invalid targets: {raw!r}")


@dataclass(eq=False)
class Resource:
    name: str
    abbreviation: str
    checker: Checker
    config: HealthConfig = field(default_factory=HealthConfig, repr=False)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    slug: str = ""
    is_global: bool = False
    notify: bool = True
    error_message: str = ""
    warning_message: str = ""
    style: dict[str, Any] = field(default_factory=dict)
    graph_enabled: bool | None = None
    targets: list[Target] = field(default_factory=list)
    current_action: str | None = None
    resources: tuple[Resource, ...] = field(default=(), repr=False)
    dispatcher: NotificationDispatcher | None = field(default=None, repr=False)
    extra: dict[str, Any] = field(default_factory=dict, repr=False)
    _notified: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        if not self.slug:
            self.slug = slugify(self.name)
        if not self.targets:
            self.targets = [Target(DEFAULT_TARGET_NAME, self.checker)]
        for position, target in enumerate(self.targets):
            target.position = position
            target.resource = self

    # -- Construction ----------------------------------------------------------

    @classmethod
    def factory(
        cls,
        spec: Mapping[str, Any],
        config: HealthConfig | None = None,
        registry: CheckerRegistry | None = None,
        dispatcher: NotificationDispatcher | None = None,
    ) -> Resource:
        """Build a Resource from a declarative spec.

        Raises ``ConfigurationError`` when name, abbreviation or checker is
        missing, or when a checker type cannot be resolved.
        """
        config = config or HealthConfig()
        registry = registry or default_registry()
        if spec is None:
            spec = {}
        if not isinstance(spec, Mapping):
            raise ConfigurationError(f"Resource spec must be a mapping, got {spec!r}")
        data = {snake_key(k): v for k, v in spec.items()}

        for required in ("name", "abbreviation", "checker"):
            if not data.get(required):
                raise ConfigurationError(f"Resource {required} is missing: {data.get('name', spec)!r}")

        checker_type, checker_options = split_checker_spec(data["checker"])
        checker = registry.resolve(data["checker"])
        targets = cls._resolve_targets(
            data.get("targets"), registry, checker_type, checker_options,
        )

        own_style = data.get("style") or {}
        if not isinstance(own_style, Mapping):
            raise ConfigurationError(f"Resource style must be a mapping: {data['name']!r}")
        style = {snake_key(k): v for k, v in config.style.items()}
        style.update({snake_key(k): v for k, v in own_style.items()})
        if data.get("column_size") is not None:
            style["column_size"] = data["column_size"]

        notify = data.get("notify")
        error_message = data.get("error_message")
        extra = {k: v for k, v in data.items() if k not in _KNOWN_KEYS}
        shadowed = sorted(extra.keys() & _RESERVED_KEYS)
        if shadowed:
            logger.warning("Ignoring reserved keys on resource %r: %s", data["name"], ", ".join(shadowed))
            extra = {k: v for k, v in extra.items() if k not in _RESERVED_KEYS}

        resource = cls(
            name=str(data["name"]),
            abbreviation=str(data["abbreviation"]),
            checker=checker,
            config=config,
            is_global=bool(data.get("is_global", False)),
            notify=config.notifications.enabled if notify is None else bool(notify),
            error_message=config.error_message if error_message is None else str(error_message),
            warning_message=str(data.get("warning_message") or ""),
            style=style,
            graph_enabled=data.get("graph_enabled"),
            targets=targets,
            dispatcher=dispatcher,
            extra=extra,
        )
        logger.debug(
            "Built resource %s (%d targets, checker=%s)",
            resource.slug, len(resource.targets), checker.display_name,
        )
        return resource

    @staticmethod
    def _resolve_targets(
        raw: Any,
        registry: CheckerRegistry,
        default_type: str,
        default_options: dict[str, Any],
    ) -> list[Target]:
        targets = []
        for name, spec in _flatten_targets(raw):
            own_type, options = split_checker_spec(spec, default_type)
            if own_type == default_type:
                options = {**default_options, **options}
            checker = registry.resolve({"type": own_type, **options})
            targets.append(Target(name, checker))
        # An empty list means the implicit default target (see __post_init__)
        return targets

    # -- Checking ------------------------------------------------------------

    def check(self, action: str = "resource") -> Resource:
        """Check every target in declared order, then notify if warranted."""
        self.current_action = action
        for target in self.targets:
            target.check()
        self._maybe_notify()
        return self

    def check_global(self, resources: Iterable[Resource], action: str = "global") -> Resource:
        """Snapshot the whole fleet for global checkers, then check."""
        self.resources = tuple(resources)
        return self.check(action)

    def is_healthy(self) -> bool:
        return all(target.healthy for target in self.targets)

    def get_status(self, ranks: Mapping[Status, int] | None = None) -> Status:
        return worst_status((t.result for t in self.targets), ranks or self.config.severity)

    def is_graph_enabled(self, default: bool | None = None) -> bool:
        if self.graph_enabled is None:
            return self.config.graph_enabled if default is None else default
        return bool(self.graph_enabled)

    # -- Rendering -----------------------------------------------------------

    def get_summary_of_issues(self) -> str:
        return summary_of_issues(self)

    def get_summary(self, now: datetime | None = None) -> str:
        return summary(self, now)

    # -- Notifications -------------------------------------------------------

    @property
    def notified(self) -> bool:
        return self._notified

    def reset_notification(self) -> None:
        """Re-arm the latch; called by whoever detects the recovery."""
        self._notified = False

    def can_notify(self) -> bool:
        return can_notify(self, self.config)

    def _maybe_notify(self) -> None:
        if not self.can_notify():
            return
        dispatcher = self.dispatcher or self._default_dispatcher()
        dispatcher.send(self)
        self._notified = True

    def _default_dispatcher(self) -> NotificationDispatcher:
        from healthdeck.notifications.channels import get_default_sink

        self.dispatcher = NotificationDispatcher(self.config.notifications.channels, get_default_sink())
        return self.dispatcher

    # -- Serialization -------------------------------------------------------

    def as_mapping(self) -> dict[str, Any]:
        # Extra spec keys first: computed fields always win
        return {
            **self.extra,
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "abbreviation": self.abbreviation,
            "is_global": self.is_global,
            "notify": self.notify,
            "notified": self.notified,
            "error_message": self.error_message,
            "warning_message": self.warning_message,
            "style": self.style,
            "graph_enabled": self.graph_enabled,
            "current_action": self.current_action,
            "checker": self.checker.display_name,
            "status": self.get_status(),
            "healthy": self.is_healthy(),
            "targets": self.targets,
            "resources": self.resources,
        }

    def to_dict(self, depth: int = DEFAULT_DEPTH) -> dict[str, Any]:
        return to_mapping(self, depth)

    def __str__(self) -> str:
        return json.dumps(self.to_dict())
