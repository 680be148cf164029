from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class NotificationKind(str, Enum):
    confirmation = "booking-confirmation"
    reminder = "booking-reminder"
    follow_up = "completion-follow-up"


@dataclass(frozen=True)
class BookingNotification:
    kind: NotificationKind
    booking_id: str
    recipient_email: str | None
    recipient_name: str | None
    scheduled_at: datetime
    total_price: int
    address: str


class NotifierPort(ABC):
    @abstractmethod
    def send(self, notification: BookingNotification) -> None:
        """Deliver a notification. Delivery guarantees belong to the adapter."""
        raise NotImplementedError
