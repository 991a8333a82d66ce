from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from healthdeck.status import DEFAULT_EXIT_CODES, SEVERITY, Status


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "HEALTHDECK_",
        "extra": "ignore",
    }

    # Resources file (YAML: `config:` overrides + `resources:` list)
    resources_path: str = "resources.yaml"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"

    # Rendering defaults
    error_message: str = "At least one resource failed the health check."
    graph_enabled: bool = True
    column_size: int = 2

    # Notifications
    notifications_enabled: bool = True
    notification_channels: list[str] = ["log"]
    notify_on_check: bool = True
    notify_on_resource: bool = True
    notify_on_global: bool = True
    notify_on_cli: bool = True

    # Channel credentials (optional — Slack / Telegram / Discord)
    slack_webhook_url: str = ""
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    discord_webhook_url: str = ""
    webhook_timeout: float = 10.0


settings = Settings()


def _distinct(table: dict[Status, int], label: str) -> dict[Status, int]:
    missing = [s.value for s in Status if s not in table]
    if missing:
        raise ValueError(f"{label} is missing statuses: {', '.join(missing)}")
    if len(set(table.values())) != len(table):
        raise ValueError(f"{label} must map every status to a distinct value")
    return table


class NotificationConfig(BaseModel):
    enabled: bool = True
    notify_on: dict[str, bool] = Field(default_factory=dict)
    channels: list[str] = Field(default_factory=list)

    def enabled_for(self, action: str | None) -> bool:
        if not action:
            return False
        return bool(self.notify_on.get(action, False))


class HealthConfig(BaseModel):
    """Explicit configuration passed into resource construction and gating.

    Nothing in the core reads process-wide settings directly; callers build one
    of these (usually via ``from_settings``) and hand it over.
    """

    style: dict[str, Any] = Field(default_factory=lambda: {"column_size": 2})
    error_message: str = "At least one resource failed the health check."
    graph_enabled: bool = True
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    exit_codes: dict[Status, int] = Field(default_factory=lambda: dict(DEFAULT_EXIT_CODES))
    severity: dict[Status, int] = Field(default_factory=lambda: dict(SEVERITY))

    @field_validator("exit_codes")
    @classmethod
    def _check_exit_codes(cls, v: dict[Status, int]) -> dict[Status, int]:
        return _distinct(v, "exit_codes")

    @field_validator("severity")
    @classmethod
    def _check_severity(cls, v: dict[Status, int]) -> dict[Status, int]:
        return _distinct(v, "severity")

    @classmethod
    def from_settings(cls, s: Settings | None = None) -> HealthConfig:
        s = s or settings
        return cls(
            style={"column_size": s.column_size},
            error_message=s.error_message,
            graph_enabled=s.graph_enabled,
            notifications=NotificationConfig(
                enabled=s.notifications_enabled,
                notify_on={
                    "check": s.notify_on_check,
                    "resource": s.notify_on_resource,
                    "global": s.notify_on_global,
                    "cli": s.notify_on_cli,
                },
                channels=list(s.notification_channels),
            ),
        )

    def merged(self, overrides: dict[str, Any] | None) -> HealthConfig:
        """Return a copy with a (partial) mapping of overrides applied on top."""
        if not overrides:
            return self
        data = self.model_dump()
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value
        return HealthConfig.model_validate(data)
