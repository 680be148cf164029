from __future__ import annotations

import logging

from autodetail.application.ports.notifier import BookingNotification, NotifierPort


class LoggingNotifier(NotifierPort):
    """Writes notifications to the log. Default when no webhook is configured."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def send(self, notification: BookingNotification) -> None:
        self._logger.info(
            "Notification: %s to %s",
            notification.kind.value,
            notification.recipient_email or "<unknown>",
            extra={"booking_id": notification.booking_id, "workflow_step": notification.kind.value},
        )
