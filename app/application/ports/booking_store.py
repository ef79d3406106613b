from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable

from app.domain.entities.booking_request import BookingRequest, BookingStatus


class BookingStorePort(ABC):
    @abstractmethod
    def list_bookings(self, event_id: int | None = None) -> list[BookingRequest]:
        """Return bookings newest first, optionally restricted to one event."""
        raise NotImplementedError

    @abstractmethod
    def get_booking(self, booking_id: int) -> BookingRequest | None:
        raise NotImplementedError

    @abstractmethod
    def insert_if_slot_free(
        self,
        booking: BookingRequest,
        holds_slot: Callable[[BookingRequest], bool],
    ) -> BookingRequest:
        """
        Atomically check-and-insert keyed on (event, class, date, time).

        Any stored booking with the same slot key for which `holds_slot` returns
        True blocks the insert and SlotConflictError is raised. Otherwise the
        booking is stored with a fresh `id` and returned.
        """
        raise NotImplementedError

    @abstractmethod
    def set_status(self, booking_id: int, status: BookingStatus) -> BookingRequest | None:
        raise NotImplementedError

    @abstractmethod
    def set_status_if_slot_free(
        self,
        booking_id: int,
        status: BookingStatus,
        holds_slot: Callable[[BookingRequest], bool],
    ) -> BookingRequest | None:
        """
        Atomically change the status unless that would double-book the slot.

        When the booking with its new status holds a slot (per `holds_slot`),
        any other stored booking with the same slot key that also holds it
        makes this raise SlotConflictError and nothing is written. Returns
        None for an unknown id.
        """
        raise NotImplementedError

    @abstractmethod
    def mark_verified(self, booking_id: int, verified_at: datetime) -> BookingRequest | None:
        raise NotImplementedError

    @abstractmethod
    def delete_booking(self, booking_id: int) -> bool:
        raise NotImplementedError
