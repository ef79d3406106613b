from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable

from app.application.exceptions import (
    AlreadyVerifiedError,
    DuplicateRequestError,
    InactiveEventError,
    InvalidOrExpiredCodeError,
    InvalidSlotError,
    NotFoundError,
)
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.meeting_event_store import MeetingEventStorePort
from app.application.ports.notifier import NotifierPort
from app.application.use_cases.verification import VerificationService, utcnow
from app.application.utils.availability import booking_holds_slot, resolve_availability
from app.application.utils.message_templates import build_verification_message
from app.application.utils.slots import generate_slots
from app.application.utils.time_format import format_hhmm
from app.domain.entities.booking_request import BookedSlot, BookingRequest, BookingStatus
from app.domain.entities.meeting_event import ClassAssignment, MeetingEvent
from app.domain.entities.message_draft import DispatchResult, OutboundMessage
from app.domain.entities.slot import SlotAvailability
from app.domain.entities.verification_code import booking_subject


@dataclass(frozen=True)
class NewBookingRequest:
    event_id: int
    class_id: int
    date: date
    time: time
    parent_name: str
    child_name: str
    email: str
    phone: str = ""
    class_name: str | None = None


@dataclass(frozen=True)
class CreatedBooking:
    booking: BookingRequest
    code_expires_at: datetime
    code_sent: bool


class BookingRequestsUseCase:
    def __init__(
        self,
        events: MeetingEventStorePort,
        bookings: BookingStorePort,
        verification: VerificationService,
        notifier: NotifierPort,
        school_name: str,
        clock: Callable[[], datetime] = utcnow,
        code_ttl_minutes: int = 5,
        email_window_days: int = 10,
        unverified_hold_minutes: int | None = None,
    ) -> None:
        self._events = events
        self._bookings = bookings
        self._verification = verification
        self._notifier = notifier
        self._school_name = school_name
        self._clock = clock
        self._code_ttl_minutes = code_ttl_minutes
        self._email_window_days = email_window_days
        self._unverified_hold = (
            timedelta(minutes=unverified_hold_minutes) if unverified_hold_minutes else None
        )
        self._logger = logging.getLogger(__name__)

    # --- queries ---

    def list_bookings(self, event_id: int | None = None) -> list[BookingRequest]:
        return self._bookings.list_bookings(event_id)

    def get_booking(self, booking_id: int) -> BookingRequest:
        booking = self._bookings.get_booking(booking_id)
        if booking is None:
            raise NotFoundError("booking", booking_id)
        return booking

    def get_booked_slots(self, event_id: int) -> list[BookedSlot]:
        now = self._clock()
        return [
            BookedSlot(date=b.date, class_id=b.class_id, time=b.time)
            for b in self._bookings.list_bookings(event_id)
            if self._holds_slot(b, now)
        ]

    def get_availability(self, event_id: int, day: date, class_id: int) -> list[SlotAvailability]:
        """Classify the day's slots for one class. Recomputed from stored bookings on every call."""
        event = self._get_active_event(event_id)
        self._check_day_and_class(event, day, class_id)
        slots = generate_slots(
            event.daily_start, event.daily_end, event.duration_minutes, event.buffer_minutes
        )
        taken = [
            s.time for s in self.get_booked_slots(event_id) if s.date == day and s.class_id == class_id
        ]
        return resolve_availability(slots, taken)

    # --- commands ---

    def create_request(self, request: NewBookingRequest) -> CreatedBooking:
        event = self._get_active_event(request.event_id)
        assignment = self._check_day_and_class(event, request.date, request.class_id)

        slots = generate_slots(
            event.daily_start, event.daily_end, event.duration_minutes, event.buffer_minutes
        )
        if request.time not in slots:
            raise InvalidSlotError(f"{format_hhmm(request.time)} is not a meeting slot")

        email = request.email.strip()
        now = self._clock()
        self._check_duplicate(email, request.date, now)

        booking = self._bookings.insert_if_slot_free(
            BookingRequest(
                event_id=event.id,
                class_id=assignment.id,
                class_name=request.class_name or assignment.name,
                date=request.date,
                time=request.time,
                parent_name=request.parent_name.strip(),
                child_name=request.child_name.strip(),
                email=email,
                phone=request.phone.strip(),
                status=BookingStatus.pending,
                created_at=now,
            ),
            holds_slot=lambda existing: self._holds_slot(existing, now),
        )
        self._logger.info(
            "Booking request created",
            extra={"booking_id": booking.id, "event_id": booking.event_id},
        )

        expires_at, result = self._send_code(booking)
        return CreatedBooking(booking=booking, code_expires_at=expires_at, code_sent=result.sent)

    def verify(self, booking_id: int, code: str) -> BookingRequest:
        booking = self.get_booking(booking_id)
        if booking.is_verified:
            # Its code was consumed; a replay is just a spent code
            raise InvalidOrExpiredCodeError()
        self._check_still_held(booking)

        if not self._verification.check(booking_subject(booking_id), code):
            raise InvalidOrExpiredCodeError()

        verified = self._bookings.mark_verified(booking_id, self._clock())
        if verified is None:
            raise NotFoundError("booking", booking_id)
        self._logger.info("Booking request verified", extra={"booking_id": booking_id})
        return verified

    def resend_code(self, booking_id: int) -> CreatedBooking:
        booking = self.get_booking(booking_id)
        if booking.is_verified:
            raise AlreadyVerifiedError("This request has already been verified")
        self._check_still_held(booking)
        expires_at, result = self._send_code(booking)
        return CreatedBooking(booking=booking, code_expires_at=expires_at, code_sent=result.sent)

    def delete_booking(self, booking_id: int) -> None:
        if not self._bookings.delete_booking(booking_id):
            raise NotFoundError("booking", booking_id)
        self._logger.info("Booking request deleted", extra={"booking_id": booking_id})

    # --- helpers ---

    def _holds_slot(self, booking: BookingRequest, now: datetime) -> bool:
        return booking_holds_slot(booking, now, self._unverified_hold)

    def _check_still_held(self, booking: BookingRequest) -> None:
        if not self._holds_slot(booking, self._clock()):
            raise InvalidOrExpiredCodeError("This request has expired, please book a new slot")

    def _get_active_event(self, event_id: int) -> MeetingEvent:
        event = self._events.get_event(event_id)
        if event is None:
            raise NotFoundError("event", event_id)
        if not event.is_active:
            raise InactiveEventError("There is no active meeting event to book")
        return event

    def _check_day_and_class(self, event: MeetingEvent, day: date, class_id: int) -> ClassAssignment:
        if day not in event.dates:
            raise InvalidSlotError(f"{day.isoformat()} is not a meeting day of this event")
        assignment = event.find_class(class_id)
        if assignment is None or not assignment.is_included:
            raise InvalidSlotError(f"Class {class_id} does not take part in this event")
        return assignment

    def _check_duplicate(self, email: str, day: date, now: datetime) -> None:
        if self._email_window_days <= 0:
            return
        window = timedelta(days=self._email_window_days)
        lowered = email.lower()
        for existing in self._bookings.list_bookings():
            if existing.email.lower() != lowered or not self._holds_slot(existing, now):
                continue
            if abs(existing.date - day) <= window:
                raise DuplicateRequestError(
                    f"You already have an active meeting request within {self._email_window_days} days of this date"
                )

    def _send_code(self, booking: BookingRequest) -> tuple[datetime, DispatchResult]:
        issued = self._verification.issue(booking_subject(booking.id), self._code_ttl_minutes)
        subject, body = build_verification_message(
            issued.code, self._code_ttl_minutes, self._school_name
        )
        try:
            result = self._notifier.send(
                OutboundMessage(
                    to_email=booking.email,
                    to_name=booking.parent_name,
                    subject=subject,
                    body=body,
                )
            )
        except Exception as e:
            self._logger.exception("Verification email failed", extra={"booking_id": booking.id})
            result = DispatchResult(sent=False, error=str(e))

        if not result.sent:
            # The request stays valid; the parent can ask for a resend.
            self._logger.warning(
                "Verification email not sent",
                extra={"booking_id": booking.id, "reason": result.error},
            )
        return issued.expires_at, result
