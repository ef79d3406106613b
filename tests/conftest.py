from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

import pytest

from app.application.use_cases.approval import ApprovalWorkflowUseCase
from app.application.use_cases.booking_requests import BookingRequestsUseCase, NewBookingRequest
from app.application.use_cases.meeting_events import MeetingEventsUseCase
from app.application.use_cases.verification import VerificationService
from app.domain.entities.meeting_event import ClassAssignment, MeetingEvent, StaffMember
from app.infrastructure.llm.mock_llm import MockLLM
from app.infrastructure.notifier.mock_notifier import MockNotifier
from app.infrastructure.store.memory_store import (
    MemoryBookingStore,
    MemoryMeetingEventStore,
    MemorySettingsStore,
    MemoryVerificationCodeStore,
)

MEETING_DAY = date(2024, 10, 20)


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_event(**overrides) -> MeetingEvent:
    values = dict(
        title="Autumn Parent Meetings",
        dates=(MEETING_DAY, MEETING_DAY + timedelta(days=1)),
        daily_start=time(9, 0),
        daily_end=time(16, 0),
        duration_minutes=20,
        buffer_minutes=10,
        is_active=True,
        classes=(
            ClassAssignment(
                id=1,
                name="A",
                staff=(
                    StaffMember(id=10, name="Ayse Demir", role="Homeroom"),
                    StaffMember(id=11, name="Can Yilmaz", role="English"),
                ),
            ),
            ClassAssignment(id=2, name="B"),
            ClassAssignment(id=3, name="Nursery", is_included=False),
        ),
    )
    values.update(overrides)
    return MeetingEvent(**values)


def make_request(event_id: int, **overrides) -> NewBookingRequest:
    values = dict(
        event_id=event_id,
        class_id=1,
        date=MEETING_DAY,
        time=time(14, 0),
        parent_name="Elif Kaya",
        child_name="Deniz Kaya",
        email="elif@example.com",
        phone="+90 555 000 0000",
    )
    values.update(overrides)
    return NewBookingRequest(**values)


def last_code(notifier: MockNotifier) -> str:
    """Pull the numeric code out of the most recent verification email."""
    body = notifier.sent[-1].body
    return body.split("Your verification code is ", 1)[1].split(".", 1)[0]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 10, 1, 8, 0, tzinfo=timezone.utc))


@pytest.fixture
def event_store() -> MemoryMeetingEventStore:
    return MemoryMeetingEventStore()


@pytest.fixture
def booking_store() -> MemoryBookingStore:
    return MemoryBookingStore()


@pytest.fixture
def code_store() -> MemoryVerificationCodeStore:
    return MemoryVerificationCodeStore()


@pytest.fixture
def settings_store() -> MemorySettingsStore:
    return MemorySettingsStore()


@pytest.fixture
def notifier() -> MockNotifier:
    return MockNotifier()


@pytest.fixture
def verification(code_store, clock) -> VerificationService:
    return VerificationService(store=code_store, clock=clock)


@pytest.fixture
def events_uc(event_store, booking_store) -> MeetingEventsUseCase:
    return MeetingEventsUseCase(events=event_store, bookings=booking_store)


@pytest.fixture
def event(events_uc) -> MeetingEvent:
    return events_uc.create_event(make_event())


@pytest.fixture
def bookings_uc(event_store, booking_store, verification, notifier, clock) -> BookingRequestsUseCase:
    return BookingRequestsUseCase(
        events=event_store,
        bookings=booking_store,
        verification=verification,
        notifier=notifier,
        school_name="Patika Kindergarten",
        clock=clock,
    )


@pytest.fixture
def approval_uc(event_store, booking_store, notifier, clock) -> ApprovalWorkflowUseCase:
    return ApprovalWorkflowUseCase(
        events=event_store,
        bookings=booking_store,
        notifier=notifier,
        llm=MockLLM(),
        school_name="Patika Kindergarten",
        location="Patika Kindergarten, Main Hall",
        organizer_email="info@patika.example",
        timezone_name="Europe/Istanbul",
        clock=clock,
    )


@pytest.fixture
def verified_booking(event, bookings_uc, notifier):
    created = bookings_uc.create_request(make_request(event.id))
    return bookings_uc.verify(created.booking.id, last_code(notifier))
