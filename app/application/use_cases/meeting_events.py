from __future__ import annotations

import logging
from dataclasses import replace

from app.application.exceptions import InvalidMeetingEventError, NotFoundError
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.meeting_event_store import MeetingEventStorePort
from app.domain.entities.booking_request import BookingStatus
from app.domain.entities.meeting_event import MeetingEvent, MeetingEventStats


def validate_meeting_event(event: MeetingEvent) -> MeetingEvent:
    if not event.title.strip():
        raise InvalidMeetingEventError("Title is required")
    if event.daily_start >= event.daily_end:
        raise InvalidMeetingEventError("Daily start time must be before end time")
    if event.duration_minutes <= 0:
        raise InvalidMeetingEventError("Slot duration must be positive")
    if event.buffer_minutes < 0:
        raise InvalidMeetingEventError("Buffer cannot be negative")

    class_ids = [c.id for c in event.classes]
    if len(class_ids) != len(set(class_ids)):
        raise InvalidMeetingEventError("Class ids must be unique within an event")

    # Dates are an ordered set
    return replace(event, title=event.title.strip(), dates=tuple(sorted(set(event.dates))))


class MeetingEventsUseCase:
    def __init__(self, events: MeetingEventStorePort, bookings: BookingStorePort) -> None:
        self._events = events
        self._bookings = bookings
        self._logger = logging.getLogger(__name__)

    def list_events(self, active_only: bool = False) -> list[MeetingEvent]:
        events = self._events.list_events()
        if active_only:
            return [e for e in events if e.is_active]
        return events

    def get_event(self, event_id: int) -> MeetingEvent:
        event = self._events.get_event(event_id)
        if event is None:
            raise NotFoundError("event", event_id)
        return event

    def create_event(self, event: MeetingEvent) -> MeetingEvent:
        created = self._events.create_event(validate_meeting_event(event))
        self._logger.info("Meeting event created", extra={"event_id": created.id})
        return created

    def update_event(self, event_id: int, event: MeetingEvent) -> MeetingEvent:
        updated = self._events.update_event(event_id, validate_meeting_event(event))
        if updated is None:
            raise NotFoundError("event", event_id)
        self._logger.info("Meeting event updated", extra={"event_id": event_id})
        return updated

    def delete_event(self, event_id: int) -> None:
        if not self._events.delete_event(event_id):
            raise NotFoundError("event", event_id)
        self._logger.info("Meeting event deleted", extra={"event_id": event_id})

    def stats(self, event_id: int) -> MeetingEventStats:
        self.get_event(event_id)
        unverified = pending = approved = rejected = 0
        by_class: dict[int, int] = {}
        for booking in self._bookings.list_bookings(event_id):
            if not booking.is_verified and booking.status == BookingStatus.pending:
                unverified += 1
                continue
            if booking.status == BookingStatus.pending:
                pending += 1
            elif booking.status == BookingStatus.approved:
                approved += 1
            else:
                rejected += 1
            if booking.status != BookingStatus.rejected:
                by_class[booking.class_id] = by_class.get(booking.class_id, 0) + 1
        return MeetingEventStats(
            unverified=unverified,
            pending=pending,
            approved=approved,
            rejected=rejected,
            by_class=by_class,
        )
