"""Human-readable summaries for a checked resource.

Output looks like::

    CRITICAL: Database (Checked Oct 19 14:31:07)
    == primary ==
    disk full
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from healthdeck.status import Status

if TYPE_CHECKING:
    from healthdeck.health.resource import Resource

TIMESTAMP_FORMAT = "%b %d %H:%M:%S"


def summary_of_issues(resource: Resource) -> str:
    """Error messages of every target, in declared order.

    Target names are only shown when there is more than one target, and the
    status next to the name only when the targets disagree on how bad it is
    (more than one distinct non-OK status).
    """
    targets = resource.targets
    show_names = len(targets) > 1
    non_ok = {t.status for t in targets if t.status is not Status.OK}
    show_status = show_names and len(non_ok) > 1

    blocks = []
    for target in targets:
        message = target.result.error_message if target.result else None
        if not message:
            continue
        if show_names:
            header = f"== {target.name}"
            if show_status:
                header += f" ({target.status.value})"
            blocks.append(f"{header} ==\n{message}")
        else:
            blocks.append(message)

    if not blocks:
        return f"{resource.checker.display_name} was used to determine the health."
    return "\n\n".join(blocks)


def summary(resource: Resource, now: datetime | None = None) -> str:
    status = resource.get_status()

    if status is Status.WARNING:
        message = resource.warning_message or resource.name
    elif status is Status.CRITICAL:
        message = resource.error_message or resource.name
    else:
        message = resource.name

    details = ""
    if status in (Status.WARNING, Status.CRITICAL):
        details = summary_of_issues(resource)
    if details == message:
        details = ""

    checked = (now or datetime.now()).astimezone().strftime(TIMESTAMP_FORMAT)
    text = f"{status.value.upper()}: {message} (Checked {checked})"
    if details:
        text += f"\n{details}"
    return text
