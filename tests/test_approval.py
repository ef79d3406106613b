"""
Tests for the administrator approval workflow.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import time

import pytest

from conftest import last_code, make_event, make_request

from app.application.exceptions import InvalidTransitionError, NotFoundError, SlotConflictError
from app.application.use_cases.approval import ApprovalWorkflowUseCase, can_transition
from app.application.utils.message_templates import CALENDAR_LINK_HEADER
from app.domain.entities.booking_request import BookingStatus
from app.domain.entities.message_draft import MessageDraft
from app.infrastructure.llm.mock_llm import MockLLM
from app.infrastructure.notifier.mock_notifier import MockNotifier

ALL = list(BookingStatus)


@pytest.mark.parametrize("current", ALL)
@pytest.mark.parametrize("target", ALL)
def test_transition_table(current, target):
    allowed = {
        (BookingStatus.pending, BookingStatus.approved),
        (BookingStatus.pending, BookingStatus.rejected),
        (BookingStatus.approved, BookingStatus.pending),
        (BookingStatus.rejected, BookingStatus.pending),
    }
    assert can_transition(current, target) is ((current, target) in allowed)


def test_calendar_draft_from_booking(approval_uc, verified_booking):
    """End time follows the event duration and the attendee is the parent."""
    draft = approval_uc.build_calendar_draft(verified_booking.id)

    assert draft.date == verified_booking.date
    assert draft.start_time == time(14, 0)
    assert draft.end_time == time(14, 20)
    assert draft.attendee_email == verified_booking.email
    assert draft.attendee_name == "Elif Kaya"
    assert draft.location == "Patika Kindergarten, Main Hall"
    assert "Teachers: Ayse Demir, Can Yilmaz" in draft.description
    assert draft.title == "Patika Kindergarten Parent Meeting - Deniz Kaya/A - 20 October 2024"


def test_calendar_draft_defaults_to_thirty_minutes(approval_uc, verified_booking, event_store):
    event_store.delete_event(verified_booking.event_id)

    draft = approval_uc.build_calendar_draft(verified_booking.id)

    assert draft.end_time == time(14, 30)


def test_message_draft_appends_calendar_link(approval_uc, verified_booking):
    calendar = approval_uc.build_calendar_draft(verified_booking.id)

    draft = approval_uc.build_message_draft(verified_booking.id, BookingStatus.approved, calendar=calendar)

    assert draft.subject == "Patika Kindergarten Parent Meeting - 20 October 2024 - 14:00 - Deniz Kaya"
    assert CALENDAR_LINK_HEADER in draft.body
    assert "calendar.google.com/calendar/render" in draft.body
    assert draft.generated_by == "template"


def test_rejection_draft_has_no_link(approval_uc, verified_booking):
    draft = approval_uc.build_message_draft(verified_booking.id, BookingStatus.rejected)

    assert draft.subject == "Patika Kindergarten Parent Meeting Request - 20 October 2024 - Deniz Kaya"
    assert CALENDAR_LINK_HEADER not in draft.body


def test_ai_draft_uses_llm(approval_uc, verified_booking):
    draft = approval_uc.build_message_draft(verified_booking.id, BookingStatus.approved, use_ai=True)

    assert draft.generated_by == "ai"


def test_no_draft_for_pending(approval_uc, verified_booking):
    with pytest.raises(InvalidTransitionError):
        approval_uc.build_message_draft(verified_booking.id, BookingStatus.pending)


def test_approve_persists_and_sends_invitation(approval_uc, verified_booking, booking_store, notifier):
    sent_before = len(notifier.sent)

    result = approval_uc.change_status(verified_booking.id, BookingStatus.approved)

    assert result.booking.status == BookingStatus.approved
    assert booking_store.get_booking(verified_booking.id).status == BookingStatus.approved
    assert result.dispatch.sent is True
    assert result.warning is None

    outbound = notifier.sent[sent_before]
    assert outbound.to_email == verified_booking.email
    assert outbound.calendar_ics is not None
    assert "BEGIN:VEVENT" in outbound.calendar_ics
    assert CALENDAR_LINK_HEADER in outbound.body


def test_approve_uses_edited_drafts(approval_uc, verified_booking, notifier):
    calendar = replace(approval_uc.build_calendar_draft(verified_booking.id), location="Room 4")
    message = MessageDraft(subject="See you", body="Edited body")

    approval_uc.change_status(verified_booking.id, BookingStatus.approved, message=message, calendar=calendar)

    outbound = notifier.sent[-1]
    assert outbound.subject == "See you"
    assert outbound.body == "Edited body"
    assert "LOCATION:Room 4" in outbound.calendar_ics


def test_reject_sends_without_invitation(approval_uc, verified_booking, notifier):
    result = approval_uc.change_status(verified_booking.id, BookingStatus.rejected)

    assert result.booking.status == BookingStatus.rejected
    assert notifier.sent[-1].calendar_ics is None


def test_reset_to_pending_sends_nothing(approval_uc, verified_booking, notifier):
    approval_uc.change_status(verified_booking.id, BookingStatus.approved)
    sent_before = len(notifier.sent)

    result = approval_uc.change_status(verified_booking.id, BookingStatus.pending)

    assert result.booking.status == BookingStatus.pending
    assert result.dispatch is None
    assert len(notifier.sent) == sent_before


def test_approved_cannot_go_to_rejected(approval_uc, verified_booking):
    approval_uc.change_status(verified_booking.id, BookingStatus.approved)

    with pytest.raises(InvalidTransitionError):
        approval_uc.change_status(verified_booking.id, BookingStatus.rejected)


def test_unverified_booking_cannot_be_approved(approval_uc, event, bookings_uc):
    created = bookings_uc.create_request(make_request(event.id, time=time(9, 0)))

    with pytest.raises(InvalidTransitionError):
        approval_uc.change_status(created.booking.id, BookingStatus.approved)


def test_unknown_booking(approval_uc):
    with pytest.raises(NotFoundError):
        approval_uc.change_status(123, BookingStatus.approved)


def test_failed_dispatch_keeps_status(event_store, booking_store, clock, verified_booking):
    """A delivery failure is reported as a warning and never rolls back the status."""
    uc = ApprovalWorkflowUseCase(
        events=event_store,
        bookings=booking_store,
        notifier=MockNotifier(fail_with="quota exceeded"),
        llm=MockLLM(),
        school_name="Patika Kindergarten",
        location="Main Hall",
        organizer_email="info@patika.example",
        timezone_name="Europe/Istanbul",
        clock=clock,
    )

    result = uc.change_status(verified_booking.id, BookingStatus.approved)

    assert result.dispatch.sent is False
    assert "quota exceeded" in result.warning
    assert booking_store.get_booking(verified_booking.id).status == BookingStatus.approved


def test_notifier_exception_becomes_warning(event_store, booking_store, clock, verified_booking):
    class ExplodingNotifier(MockNotifier):
        def send(self, message):
            raise RuntimeError("connection reset")

    uc = ApprovalWorkflowUseCase(
        events=event_store,
        bookings=booking_store,
        notifier=ExplodingNotifier(),
        llm=MockLLM(),
        school_name="Patika Kindergarten",
        location="Main Hall",
        organizer_email="info@patika.example",
        timezone_name="Europe/Istanbul",
        clock=clock,
    )

    result = uc.change_status(verified_booking.id, BookingStatus.rejected)

    assert result.booking.status == BookingStatus.rejected
    assert "connection reset" in result.warning


def test_staffless_class_draft(approval_uc, events_uc, bookings_uc, notifier):
    event = events_uc.create_event(make_event(title="Second round"))
    created = bookings_uc.create_request(make_request(event.id, class_id=2, email="b@example.com"))
    bookings_uc.verify(created.booking.id, last_code(notifier))

    draft = approval_uc.build_calendar_draft(created.booking.id)

    assert "Teachers:" not in draft.description
    assert "Class: B" in draft.description


def test_reset_refused_when_slot_was_rebooked(approval_uc, verified_booking, bookings_uc, notifier):
    """A rejected request cannot go back to pending once another parent holds its slot."""
    approval_uc.change_status(verified_booking.id, BookingStatus.rejected)
    rebooked = bookings_uc.create_request(make_request(verified_booking.event_id, email="next@example.com"))
    bookings_uc.verify(rebooked.booking.id, last_code(notifier))

    with pytest.raises(SlotConflictError):
        approval_uc.change_status(verified_booking.id, BookingStatus.pending)

    assert bookings_uc.get_booking(verified_booking.id).status == BookingStatus.rejected
    holders = [s for s in bookings_uc.get_booked_slots(verified_booking.event_id) if s.time == time(14, 0)]
    assert len(holders) == 1


def test_reset_allowed_when_slot_still_free(approval_uc, verified_booking, bookings_uc):
    approval_uc.change_status(verified_booking.id, BookingStatus.rejected)

    result = approval_uc.change_status(verified_booking.id, BookingStatus.pending)

    assert result.booking.status == BookingStatus.pending
    assert len(bookings_uc.get_booked_slots(verified_booking.event_id)) == 1
