"""Notification gating — one alert per unhealthy episode.

``Resource.notified`` latches once a notification went out. Clearing it when
the resource recovers is the job of whoever compares consecutive evaluations
(a scheduler, a persistent store); the core never resets it on its own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from healthdeck.config import HealthConfig
    from healthdeck.health.resource import Resource


def notifications_enabled(resource: Resource, config: HealthConfig) -> bool:
    """Global switch, per-resource switch and per-action toggle all on."""
    return (
        resource.notify
        and config.notifications.enabled
        and config.notifications.enabled_for(resource.current_action)
    )


def can_notify(resource: Resource, config: HealthConfig) -> bool:
    return (
        not resource.notified
        and notifications_enabled(resource, config)
        and not resource.is_healthy()
    )
