"""
Tests for the parent booking flow: request, verification and slot holding.
"""

from __future__ import annotations

from datetime import time, timedelta

import pytest

from conftest import MEETING_DAY, last_code, make_event, make_request

from app.application.exceptions import (
    AlreadyVerifiedError,
    DuplicateRequestError,
    InactiveEventError,
    InvalidOrExpiredCodeError,
    InvalidSlotError,
    NotFoundError,
    SlotConflictError,
)
from app.application.use_cases.booking_requests import BookingRequestsUseCase
from app.domain.entities.booking_request import BookedSlot, BookingStatus
from app.domain.entities.slot import SlotStatus
from app.infrastructure.notifier.mock_notifier import MockNotifier


def _wrong(code: str) -> str:
    return "000000" if code != "000000" else "111111"


def test_create_request_is_pending_and_sends_code(event, bookings_uc, notifier, clock):
    created = bookings_uc.create_request(make_request(event.id))

    booking = created.booking
    assert booking.id is not None
    assert booking.status == BookingStatus.pending
    assert booking.is_verified is False
    assert booking.class_name == "A"
    assert created.code_sent is True
    assert created.code_expires_at == clock.now + timedelta(minutes=5)

    assert len(notifier.sent) == 1
    assert notifier.sent[0].to_email == "elif@example.com"
    assert len(last_code(notifier)) == 6


def test_wrong_code_then_right_code(event, bookings_uc, notifier):
    """Booking for class A at 14:00: a wrong code fails, the right one works exactly once."""
    created = bookings_uc.create_request(make_request(event.id, time=time(14, 0)))
    code = last_code(notifier)

    with pytest.raises(InvalidOrExpiredCodeError):
        bookings_uc.verify(created.booking.id, _wrong(code))
    assert bookings_uc.get_booking(created.booking.id).is_verified is False

    verified = bookings_uc.verify(created.booking.id, code)
    assert verified.is_verified is True
    assert verified.status == BookingStatus.pending

    # Replaying the spent code fails like any other used code
    with pytest.raises(InvalidOrExpiredCodeError):
        bookings_uc.verify(created.booking.id, code)


def test_code_expires_after_five_minutes(event, bookings_uc, notifier, clock):
    created = bookings_uc.create_request(make_request(event.id))
    code = last_code(notifier)
    clock.advance(minutes=5, seconds=1)

    with pytest.raises(InvalidOrExpiredCodeError):
        bookings_uc.verify(created.booking.id, code)


def test_resend_issues_new_code(event, bookings_uc, notifier, clock):
    created = bookings_uc.create_request(make_request(event.id))
    clock.advance(minutes=6)

    resent = bookings_uc.resend_code(created.booking.id)

    assert resent.code_sent is True
    assert len(notifier.sent) == 2
    verified = bookings_uc.verify(created.booking.id, last_code(notifier))
    assert verified.is_verified is True


def test_resend_refused_once_verified(verified_booking, bookings_uc):
    with pytest.raises(AlreadyVerifiedError):
        bookings_uc.resend_code(verified_booking.id)


def test_inactive_event_rejected(events_uc, bookings_uc):
    inactive = events_uc.create_event(make_event(is_active=False))

    with pytest.raises(InactiveEventError):
        bookings_uc.create_request(make_request(inactive.id))


def test_unknown_event_rejected(bookings_uc):
    with pytest.raises(NotFoundError) as exc:
        bookings_uc.create_request(make_request(404))

    assert exc.value.code == "event_not_found"


@pytest.mark.parametrize(
    "overrides",
    [
        {"date": MEETING_DAY + timedelta(days=7)},
        {"class_id": 3},
        {"class_id": 99},
        {"time": time(12, 0)},
        {"time": time(9, 10)},
        {"time": time(15, 45)},
    ],
)
def test_structurally_invalid_selection_rejected(event, bookings_uc, notifier, overrides):
    with pytest.raises(InvalidSlotError):
        bookings_uc.create_request(make_request(event.id, **overrides))
    assert notifier.sent == []


def test_same_slot_cannot_be_booked_twice(event, bookings_uc):
    bookings_uc.create_request(make_request(event.id))

    with pytest.raises(SlotConflictError):
        bookings_uc.create_request(make_request(event.id, email="other@example.com"))


def test_same_time_different_class_is_free(event, bookings_uc):
    bookings_uc.create_request(make_request(event.id, class_id=1))
    other = bookings_uc.create_request(make_request(event.id, class_id=2, email="other@example.com"))

    assert other.booking.class_name == "B"


def test_rejected_booking_frees_slot(event, bookings_uc, booking_store):
    first = bookings_uc.create_request(make_request(event.id))
    booking_store.set_status(first.booking.id, BookingStatus.rejected)

    second = bookings_uc.create_request(make_request(event.id, email="other@example.com"))

    assert second.booking.id != first.booking.id


def test_duplicate_email_within_window(events_uc, bookings_uc):
    wide = events_uc.create_event(
        make_event(dates=(MEETING_DAY, MEETING_DAY + timedelta(days=3), MEETING_DAY + timedelta(days=11)))
    )
    bookings_uc.create_request(make_request(wide.id))

    with pytest.raises(DuplicateRequestError):
        bookings_uc.create_request(
            make_request(wide.id, date=MEETING_DAY + timedelta(days=3), email="ELIF@example.com ")
        )

    later = bookings_uc.create_request(make_request(wide.id, date=MEETING_DAY + timedelta(days=11)))
    assert later.booking.date == MEETING_DAY + timedelta(days=11)


def test_booked_slots_exclude_rejected(event, bookings_uc, booking_store):
    kept = bookings_uc.create_request(make_request(event.id, time=time(9, 0)))
    dropped = bookings_uc.create_request(make_request(event.id, time=time(9, 30), email="x@example.com"))
    booking_store.set_status(dropped.booking.id, BookingStatus.rejected)

    slots = bookings_uc.get_booked_slots(event.id)

    assert slots == [BookedSlot(date=MEETING_DAY, class_id=1, time=kept.booking.time)]


def test_availability_moves_after_booking(event, bookings_uc):
    """09:00 is revealed first; once booked, 09:30 takes its place."""
    before = {s.time: s.status for s in bookings_uc.get_availability(event.id, MEETING_DAY, 1)}
    assert before[time(9, 0)] == SlotStatus.available
    assert before[time(9, 30)] == SlotStatus.hidden

    bookings_uc.create_request(make_request(event.id, time=time(9, 0)))

    after = {s.time: s.status for s in bookings_uc.get_availability(event.id, MEETING_DAY, 1)}
    assert after[time(9, 0)] == SlotStatus.taken
    assert after[time(9, 30)] == SlotStatus.available

    other_class = {s.time: s.status for s in bookings_uc.get_availability(event.id, MEETING_DAY, 2)}
    assert other_class[time(9, 0)] == SlotStatus.available


def test_failed_code_email_keeps_request(event_store, booking_store, verification, clock, event):
    failing = MockNotifier(fail_with="smtp down")
    uc = BookingRequestsUseCase(
        events=event_store,
        bookings=booking_store,
        verification=verification,
        notifier=failing,
        school_name="Patika Kindergarten",
        clock=clock,
    )

    created = uc.create_request(make_request(event.id))

    assert created.code_sent is False
    assert booking_store.get_booking(created.booking.id) is not None


def test_unverified_hold_releases_slot(event_store, booking_store, verification, notifier, clock, event):
    uc = BookingRequestsUseCase(
        events=event_store,
        bookings=booking_store,
        verification=verification,
        notifier=notifier,
        school_name="Patika Kindergarten",
        clock=clock,
        unverified_hold_minutes=30,
    )
    abandoned = uc.create_request(make_request(event.id))
    code = last_code(notifier)

    clock.advance(minutes=31)

    assert uc.get_booked_slots(event.id) == []
    with pytest.raises(InvalidOrExpiredCodeError):
        uc.verify(abandoned.booking.id, code)

    replacement = uc.create_request(make_request(event.id, email="next@example.com"))
    assert replacement.booking.id != abandoned.booking.id


def test_verified_booking_keeps_slot_past_hold(event_store, booking_store, verification, notifier, clock, event):
    uc = BookingRequestsUseCase(
        events=event_store,
        bookings=booking_store,
        verification=verification,
        notifier=notifier,
        school_name="Patika Kindergarten",
        clock=clock,
        unverified_hold_minutes=30,
    )
    created = uc.create_request(make_request(event.id))
    uc.verify(created.booking.id, last_code(notifier))

    clock.advance(days=1)

    assert len(uc.get_booked_slots(event.id)) == 1


def test_delete_booking(verified_booking, bookings_uc):
    bookings_uc.delete_booking(verified_booking.id)

    with pytest.raises(NotFoundError):
        bookings_uc.get_booking(verified_booking.id)
    with pytest.raises(NotFoundError):
        bookings_uc.delete_booking(verified_booking.id)
