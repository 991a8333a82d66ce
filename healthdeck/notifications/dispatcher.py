"""Fan a resource notification out to every configured channel.

Delivery is sequential and best-effort: each channel gets exactly one
attempt, and a failing channel is reported and skipped so the remaining
channels still receive the notification.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from healthdeck.errors import NotificationDeliveryError

logger = logging.getLogger(__name__)

ChannelSink = Callable[[Any, str], Any]
ErrorReporter = Callable[[NotificationDeliveryError], Any]


def log_reporter(error: NotificationDeliveryError) -> None:
    """Default error reporter — log with the original traceback."""
    logger.error("%s", error, exc_info=error.__cause__ or error)


class NotificationDispatcher:
    """Delivers (resource, channel) requests to a sink, one channel at a time."""

    def __init__(
        self,
        channels: Iterable[str],
        sink: ChannelSink,
        reporter: ErrorReporter | None = None,
    ) -> None:
        self.channels = list(channels)
        self.sink = sink
        self.reporter = reporter or log_reporter

    def send(self, resource: Any) -> list[str]:
        """Notify every channel about ``resource``; return the ones that succeeded."""
        delivered = []
        for channel in self.channels:
            try:
                self.sink(resource, channel)
            except Exception as exc:
                error = NotificationDeliveryError(channel, resource, f"{type(exc).__name__}: {exc}")
                error.__cause__ = exc
                self._report(error)
                continue
            delivered.append(channel)

        logger.info(
            "Notified %d/%d channels for %s",
            len(delivered), len(self.channels), getattr(resource, "slug", resource),
        )
        return delivered

    def _report(self, error: NotificationDeliveryError) -> None:
        try:
            self.reporter(error)
        except Exception:
            logger.exception("Error reporter failed while handling: %s", error)

    def close(self) -> None:
        """Release the sink's resources (e.g. an HTTP client) if it holds any."""
        close = getattr(self.sink, "close", None)
        if callable(close):
            close()
