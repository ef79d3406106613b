from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time
from enum import Enum


class BookingStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


@dataclass(frozen=True)
class BookingRequest:
    event_id: int
    class_id: int
    class_name: str
    date: date
    time: time
    parent_name: str
    child_name: str
    email: str
    phone: str = ""
    status: BookingStatus = BookingStatus.pending
    id: int | None = None
    created_at: datetime | None = None
    verified_at: datetime | None = None  # None until the email code is confirmed

    @property
    def is_verified(self) -> bool:
        return self.verified_at is not None

    @property
    def slot_key(self) -> tuple[int, int, date, time]:
        return (self.event_id, self.class_id, self.date, self.time)

    def with_status(self, status: BookingStatus) -> "BookingRequest":
        return replace(self, status=status)


@dataclass(frozen=True)
class BookedSlot:
    date: date
    class_id: int
    time: time
