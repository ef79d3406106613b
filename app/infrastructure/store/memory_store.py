from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable

from app.application.exceptions import SlotConflictError
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.meeting_event_store import MeetingEventStorePort
from app.application.ports.settings_store import SettingsStorePort
from app.application.ports.verification_store import VerificationCodeStorePort
from app.domain.entities.booking_request import BookingRequest, BookingStatus
from app.domain.entities.delivery_settings import DeliverySettings
from app.domain.entities.meeting_event import MeetingEvent
from app.domain.entities.verification_code import VerificationCode


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MemoryMeetingEventStore(MeetingEventStorePort):
    def __init__(self) -> None:
        self._events: dict[int, MeetingEvent] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def list_events(self) -> list[MeetingEvent]:
        with self._lock:
            return sorted(self._events.values(), key=lambda e: e.id or 0, reverse=True)

    def get_event(self, event_id: int) -> MeetingEvent | None:
        with self._lock:
            return self._events.get(event_id)

    def create_event(self, event: MeetingEvent) -> MeetingEvent:
        with self._lock:
            created = replace(event, id=self._next_id, created_at=event.created_at or _now())
            self._events[created.id] = created
            self._next_id += 1
            return created

    def update_event(self, event_id: int, event: MeetingEvent) -> MeetingEvent | None:
        with self._lock:
            existing = self._events.get(event_id)
            if existing is None:
                return None
            updated = replace(event, id=event_id, created_at=existing.created_at)
            self._events[event_id] = updated
            return updated

    def delete_event(self, event_id: int) -> bool:
        with self._lock:
            return self._events.pop(event_id, None) is not None


class MemoryBookingStore(BookingStorePort):
    def __init__(self) -> None:
        self._bookings: dict[int, BookingRequest] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def list_bookings(self, event_id: int | None = None) -> list[BookingRequest]:
        with self._lock:
            rows = [b for b in self._bookings.values() if event_id is None or b.event_id == event_id]
        return sorted(rows, key=lambda b: b.id or 0, reverse=True)

    def get_booking(self, booking_id: int) -> BookingRequest | None:
        with self._lock:
            return self._bookings.get(booking_id)

    def insert_if_slot_free(
        self,
        booking: BookingRequest,
        holds_slot: Callable[[BookingRequest], bool],
    ) -> BookingRequest:
        key = booking.slot_key
        with self._lock:
            for existing in self._bookings.values():
                if existing.slot_key == key and holds_slot(existing):
                    raise SlotConflictError("This slot has just been booked, please pick another one")
            created = replace(booking, id=self._next_id, created_at=booking.created_at or _now())
            self._bookings[created.id] = created
            self._next_id += 1
            return created

    def set_status(self, booking_id: int, status: BookingStatus) -> BookingRequest | None:
        with self._lock:
            existing = self._bookings.get(booking_id)
            if existing is None:
                return None
            updated = existing.with_status(status)
            self._bookings[booking_id] = updated
            return updated

    def set_status_if_slot_free(
        self,
        booking_id: int,
        status: BookingStatus,
        holds_slot: Callable[[BookingRequest], bool],
    ) -> BookingRequest | None:
        with self._lock:
            existing = self._bookings.get(booking_id)
            if existing is None:
                return None
            updated = existing.with_status(status)
            if holds_slot(updated):
                for other in self._bookings.values():
                    if other.id != booking_id and other.slot_key == updated.slot_key and holds_slot(other):
                        raise SlotConflictError("Another request already holds this slot")
            self._bookings[booking_id] = updated
            return updated

    def mark_verified(self, booking_id: int, verified_at: datetime) -> BookingRequest | None:
        with self._lock:
            existing = self._bookings.get(booking_id)
            if existing is None:
                return None
            updated = replace(existing, verified_at=existing.verified_at or verified_at)
            self._bookings[booking_id] = updated
            return updated

    def delete_booking(self, booking_id: int) -> bool:
        with self._lock:
            return self._bookings.pop(booking_id, None) is not None


class MemoryVerificationCodeStore(VerificationCodeStorePort):
    def __init__(self) -> None:
        self._codes: dict[int, VerificationCode] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def add_code(self, code: VerificationCode) -> VerificationCode:
        with self._lock:
            stored = replace(code, id=self._next_id)
            self._codes[stored.id] = stored
            self._next_id += 1
            return stored

    def list_codes(self, subject: str) -> list[VerificationCode]:
        with self._lock:
            rows = [c for c in self._codes.values() if c.subject == subject]
        return sorted(rows, key=lambda c: c.id or 0, reverse=True)

    def consume(self, code_id: int, used_at: datetime) -> bool:
        with self._lock:
            code = self._codes.get(code_id)
            if code is None or code.used_at is not None:
                return False
            self._codes[code_id] = replace(code, used_at=used_at)
            return True


class MemorySettingsStore(SettingsStorePort):
    def __init__(self) -> None:
        self._delivery: DeliverySettings | None = None

    def get_delivery_settings(self) -> DeliverySettings | None:
        return self._delivery

    def save_delivery_settings(self, delivery: DeliverySettings) -> DeliverySettings:
        self._delivery = delivery
        return delivery
