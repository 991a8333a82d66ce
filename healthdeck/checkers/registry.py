"""Checker registry — maps a type identifier to a checker factory.

Resolution happens once, when a Resource is built. Unknown identifiers (or
options a factory rejects) surface as ConfigurationError right there instead
of failing later during a check.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from healthdeck.checkers.base import Checker
from healthdeck.errors import ConfigurationError

logger = logging.getLogger(__name__)

CheckerFactory = Callable[..., Checker]


def split_checker_spec(spec: Any, default_type: str | None = None) -> tuple[str, dict[str, Any]]:
    """Normalize a checker spec into ``(type_id, options)``.

    A spec is either a bare type id (``"http"``) or a mapping carrying a
    ``type`` (or ``checker``) key plus options. A mapping without a type
    falls back to ``default_type``.
    """
    if spec is None:
        spec = {}
    if isinstance(spec, str):
        return spec, {}
    if not isinstance(spec, Mapping):
        raise ConfigurationError(f"Invalid checker spec: {spec!r}")

    options = dict(spec)
    type_id = options.pop("type", None) or options.pop("checker", None) or default_type
    options.pop("checker", None)
    if not type_id or not isinstance(type_id, str):
        raise ConfigurationError("Checker type is missing")
    return type_id, options


class CheckerRegistry:
    """Name -> factory lookup table for checker plugins."""

    def __init__(self, factories: Mapping[str, CheckerFactory] | None = None) -> None:
        self._factories: dict[str, CheckerFactory] = dict(factories or {})

    def register(self, type_id: str, factory: CheckerFactory) -> None:
        if type_id in self._factories:
            logger.debug("Overriding checker factory for %s", type_id)
        self._factories[type_id] = factory

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._factories

    @property
    def types(self) -> list[str]:
        return sorted(self._factories)

    def resolve(self, spec: Any, default_type: str | None = None) -> Checker:
        """Instantiate the checker described by ``spec``."""
        type_id, options = split_checker_spec(spec, default_type)
        factory = self._factories.get(type_id)
        if factory is None:
            raise ConfigurationError(f"Unknown checker type: {type_id}")
        try:
            checker = factory(**options)
        except ConfigurationError:
            raise
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid options for checker '{type_id}': {e}") from e
        if not isinstance(checker, Checker):
            raise ConfigurationError(f"Factory for '{type_id}' did not return a checker")
        return checker


_default: CheckerRegistry | None = None


def default_registry() -> CheckerRegistry:
    """Return the process-level registry with the built-in checkers loaded."""
    global _default
    if _default is None:
        from healthdeck.checkers.fleet import HealthyCountChecker
        from healthdeck.checkers.network import DnsChecker, HttpChecker, TcpChecker, TlsChecker

        _default = CheckerRegistry({
            "http": HttpChecker,
            "tls": TlsChecker,
            "dns": DnsChecker,
            "tcp": TcpChecker,
            "healthy_count": HealthyCountChecker,
        })
    return _default
