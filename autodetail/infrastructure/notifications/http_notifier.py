from __future__ import annotations

import logging

import httpx

from autodetail.application.ports.notifier import BookingNotification, NotifierPort


class HttpNotifier(NotifierPort):
    """Posts notifications as JSON to a delivery webhook (email/SMS gateway)."""

    def __init__(self, endpoint: str, client: httpx.Client | None = None) -> None:
        self._endpoint = endpoint
        self._client = client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    def send(self, notification: BookingNotification) -> None:
        payload = {
            "type": notification.kind.value,
            "booking_id": notification.booking_id,
            "recipient": {
                "email": notification.recipient_email,
                "name": notification.recipient_name,
            },
            "scheduled_at": notification.scheduled_at.isoformat(),
            "total_price": notification.total_price,
            "address": notification.address,
        }
        resp = self._client.post(self._endpoint, json=payload)
        if resp.status_code >= 400:
            self._logger.error(
                "Notification webhook failed",
                extra={
                    "booking_id": notification.booking_id,
                    "workflow_step": notification.kind.value,
                    "error": f"status={resp.status_code} body={resp.text[:200]}",
                },
            )
            resp.raise_for_status()
