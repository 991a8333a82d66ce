"""Notification channels — Slack, Telegram and Discord webhooks plus a log channel.

``WebhookSink`` is the default channel sink used by ``NotificationDispatcher``:
it is called with ``(resource, channel)`` and posts the resource summary to
that channel. It raises on any delivery problem; isolating one failing
channel from the others is the dispatcher's job.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from healthdeck.config import settings
from healthdeck.status import Status

logger = logging.getLogger(__name__)

TELEGRAM_API = "https://api.telegram.org/bot{token}"

# Emoji/icon mapping
_EMOJI = {
    Status.OK: "✅",
    Status.UNKNOWN: "❔",
    Status.WARNING: "⚠️",
    Status.CRITICAL: "🔴",
}


class ChannelNotConfigured(RuntimeError):
    pass


def format_alert(resource: Any) -> str:
    status = resource.get_status()
    return f"{_EMOJI[status]} *Health Alert* — {resource.name}\n{resource.get_summary()}"


class WebhookSink:
    """Posts resource alerts to the named channel."""

    def __init__(
        self,
        slack_webhook: str = "",
        telegram_token: str = "",
        telegram_chat_id: str = "",
        discord_webhook: str = "",
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.slack_webhook = slack_webhook or settings.slack_webhook_url
        self.telegram_token = telegram_token or settings.telegram_bot_token
        self.telegram_chat_id = telegram_chat_id or settings.telegram_chat_id
        self.discord_webhook = discord_webhook or settings.discord_webhook_url
        self._client = client or httpx.Client(timeout=timeout or settings.webhook_timeout)
        self._senders: dict[str, Callable[[str], None]] = {
            "log": self._send_log,
            "slack": self._send_slack,
            "telegram": self._send_telegram,
            "discord": self._send_discord,
        }

    def status(self) -> dict[str, Any]:
        return {
            "slack_configured": bool(self.slack_webhook),
            "telegram_configured": bool(self.telegram_token and self.telegram_chat_id),
            "discord_configured": bool(self.discord_webhook),
        }

    def __call__(self, resource: Any, channel: str) -> None:
        sender = self._senders.get(channel)
        if sender is None:
            raise ChannelNotConfigured(f"Unknown notification channel: {channel}")
        sender(format_alert(resource))

    def close(self) -> None:
        self._client.close()

    # -- Senders ---------------------------------------------------------------

    def _send_log(self, text: str) -> None:
        logger.warning("%s", text)

    def _post(self, url: str, payload: dict[str, Any], ok: tuple[int, ...] = (200,)) -> None:
        resp = self._client.post(url, json=payload)
        if resp.status_code not in ok:
            raise httpx.HTTPStatusError(
                f"{resp.status_code}: {resp.text[:200]}", request=resp.request, response=resp,
            )

    def _send_slack(self, text: str) -> None:
        if not self.slack_webhook:
            raise ChannelNotConfigured("slack webhook url is not set")
        self._post(self.slack_webhook, {"text": text, "mrkdwn": True})

    def _send_telegram(self, text: str) -> None:
        if not (self.telegram_token and self.telegram_chat_id):
            raise ChannelNotConfigured("telegram bot token / chat id are not set")
        url = f"{TELEGRAM_API.format(token=self.telegram_token)}/sendMessage"
        self._post(url, {"chat_id": self.telegram_chat_id, "text": text})

    def _send_discord(self, text: str) -> None:
        if not self.discord_webhook:
            raise ChannelNotConfigured("discord webhook url is not set")
        # Discord caps message content at 2000 chars
        self._post(self.discord_webhook, {"content": text[:1990]}, ok=(200, 204))


_default_sink: WebhookSink | None = None


def get_default_sink() -> WebhookSink:
    """Return the process-level sink used by resources built without a dispatcher."""
    global _default_sink
    if _default_sink is None:
        _default_sink = WebhookSink()
    return _default_sink
