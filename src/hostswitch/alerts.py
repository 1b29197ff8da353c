"""Best-effort desktop notification for failed applies.

The apply runs from a menu click with no terminal attached, so a failure would
otherwise only show on the next menu refresh.
"""

from __future__ import annotations

import logging

from plyer import notification

logger = logging.getLogger(__name__)

APP_NAME = "Hosts Switcher"


def alert_user_now(title: str, message: str) -> None:
    """Show a local alert to the user (best-effort, non-fatal).

    Args:
        title: Short title for the notification.
        message: Descriptive message for the user.
    """
    try:
        notification.notify(title=title, message=message, app_name=APP_NAME, timeout=5)
        return
    except Exception as exc:
        logger.debug("Desktop notification failed: %s", exc)

    logger.warning("ALERT - %s: %s", title, message)
