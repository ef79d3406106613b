from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable

from app.application.exceptions import InvalidTransitionError, NotFoundError
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.llm import LLMPort
from app.application.ports.meeting_event_store import MeetingEventStorePort
from app.application.ports.notifier import NotifierPort
from app.application.use_cases.verification import utcnow
from app.application.utils.availability import booking_holds_slot
from app.application.utils.calendar_render import build_google_calendar_link, build_ics
from app.application.utils.message_templates import append_calendar_link, build_status_message
from app.application.utils.time_format import add_minutes, format_long_date
from app.domain.entities.booking_request import BookingRequest, BookingStatus
from app.domain.entities.calendar_event_draft import CalendarEventDraft
from app.domain.entities.meeting_event import ClassAssignment, MeetingEvent
from app.domain.entities.message_draft import DispatchResult, MessageDraft, OutboundMessage

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.pending: frozenset({BookingStatus.approved, BookingStatus.rejected}),
    BookingStatus.approved: frozenset({BookingStatus.pending}),
    BookingStatus.rejected: frozenset({BookingStatus.pending}),
}


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


@dataclass(frozen=True)
class StatusChangeResult:
    booking: BookingRequest
    dispatch: DispatchResult | None = None
    warning: str | None = None


class ApprovalWorkflowUseCase:
    """
    Administrator side of the booking lifecycle.

    Drafting (calendar event, then correspondence) has no side effects.
    `change_status` persists first and only then attempts delivery; a failed
    delivery is reported as a warning and never reverts the status.
    """

    def __init__(
        self,
        events: MeetingEventStorePort,
        bookings: BookingStorePort,
        notifier: NotifierPort,
        llm: LLMPort,
        school_name: str,
        location: str,
        organizer_email: str,
        timezone_name: str,
        default_meeting_minutes: int = 30,
        clock: Callable[[], datetime] = utcnow,
        unverified_hold_minutes: int | None = None,
    ) -> None:
        self._events = events
        self._bookings = bookings
        self._notifier = notifier
        self._llm = llm
        self._school_name = school_name
        self._location = location
        self._organizer_email = organizer_email
        self._timezone_name = timezone_name
        self._default_minutes = default_meeting_minutes
        self._clock = clock
        self._unverified_hold = (
            timedelta(minutes=unverified_hold_minutes) if unverified_hold_minutes else None
        )
        self._logger = logging.getLogger(__name__)

    # --- step 1 ---

    def build_calendar_draft(self, booking_id: int) -> CalendarEventDraft:
        booking = self._get_booking(booking_id)
        event, assignment = self._lookup(booking)
        minutes = event.duration_minutes if event else self._default_minutes
        class_name = booking.class_name or (assignment.name if assignment else "-")
        formatted_date = format_long_date(booking.date)

        description = [
            f"Parent: {booking.parent_name}",
            f"Child: {booking.child_name}",
            f"Class: {class_name}",
        ]
        if assignment and assignment.staff:
            description.append(f"Teachers: {', '.join(assignment.staff_names)}")
        if booking.phone:
            description.append(f"Phone: {booking.phone}")

        return CalendarEventDraft(
            title=f"{self._school_name} Parent Meeting - {booking.child_name}/{class_name} - {formatted_date}",
            date=booking.date,
            start_time=booking.time,
            end_time=add_minutes(booking.time, minutes),
            location=self._location,
            description="\n".join(description),
            attendee_email=booking.email,
            attendee_name=booking.parent_name,
        )

    def render_ics(self, booking_id: int, draft: CalendarEventDraft) -> str:
        return build_ics(
            draft,
            uid=f"meeting-{booking_id}@{self._organizer_email.split('@')[-1]}",
            organizer_email=self._organizer_email,
            tz_name=self._timezone_name,
            now=self._clock(),
        )

    # --- step 2 ---

    def build_message_draft(
        self,
        booking_id: int,
        status: BookingStatus,
        calendar: CalendarEventDraft | None = None,
        use_ai: bool = False,
    ) -> MessageDraft:
        """
        Correspondence for the target status.

        With `use_ai` the LLM writes the first draft; LLM errors propagate so
        the administrator can fall back to the template.
        """
        if status == BookingStatus.pending:
            raise InvalidTransitionError("Resetting to pending sends no correspondence")
        booking = self._get_booking(booking_id)
        context = self._message_context(booking)

        if use_ai:
            draft = self._llm.draft_status_message(booking, status, context)
        else:
            draft = build_status_message(booking, status, context)

        if status == BookingStatus.approved and calendar is not None:
            link = build_google_calendar_link(calendar)
            draft = replace(draft, body=append_calendar_link(draft.body, link))
        return draft

    # --- confirmation ---

    def change_status(
        self,
        booking_id: int,
        status: BookingStatus,
        message: MessageDraft | None = None,
        calendar: CalendarEventDraft | None = None,
    ) -> StatusChangeResult:
        booking = self._get_booking(booking_id)
        if not can_transition(booking.status, status):
            raise InvalidTransitionError(
                f"Cannot move a {booking.status.value} request to {status.value}"
            )
        if status != BookingStatus.pending and not booking.is_verified:
            raise InvalidTransitionError("The request has not been verified by email yet")

        now = self._clock()
        # Leaving rejected re-takes the slot, which someone else may hold by now
        updated = self._bookings.set_status_if_slot_free(
            booking_id,
            status,
            holds_slot=lambda b: booking_holds_slot(b, now, self._unverified_hold),
        )
        if updated is None:
            raise NotFoundError("booking", booking_id)
        self._logger.info(
            "Booking status changed",
            extra={"booking_id": booking_id, "status": status.value},
        )

        if status == BookingStatus.pending:
            return StatusChangeResult(booking=updated)

        ics = None
        if status == BookingStatus.approved:
            calendar = calendar or self.build_calendar_draft(booking_id)
            ics = self.render_ics(booking_id, calendar)
        if message is None:
            message = self.build_message_draft(booking_id, status, calendar=calendar)

        dispatch = self._dispatch(
            updated,
            OutboundMessage(
                to_email=(calendar.attendee_email if calendar else "") or updated.email,
                to_name=updated.parent_name,
                subject=message.subject,
                body=message.body,
                calendar_ics=ics,
            ),
        )
        warning = None
        if not dispatch.sent:
            warning = (
                f"Status saved as {status.value}, but the email could not be sent: "
                f"{dispatch.error or 'unknown error'}"
            )
        return StatusChangeResult(booking=updated, dispatch=dispatch, warning=warning)

    # --- helpers ---

    def _dispatch(self, booking: BookingRequest, outbound: OutboundMessage) -> DispatchResult:
        try:
            result = self._notifier.send(outbound)
        except Exception as e:
            self._logger.exception("Notifier raised", extra={"booking_id": booking.id})
            return DispatchResult(sent=False, error=str(e))
        if not result.sent:
            self._logger.warning(
                "Status email not sent",
                extra={"booking_id": booking.id, "reason": result.error},
            )
        return result

    def _get_booking(self, booking_id: int) -> BookingRequest:
        booking = self._bookings.get_booking(booking_id)
        if booking is None:
            raise NotFoundError("booking", booking_id)
        return booking

    def _lookup(self, booking: BookingRequest) -> tuple[MeetingEvent | None, ClassAssignment | None]:
        event = self._events.get_event(booking.event_id)
        if event is None:
            return None, None
        return event, event.find_class(booking.class_id)

    def _message_context(self, booking: BookingRequest) -> dict[str, str]:
        _, assignment = self._lookup(booking)
        return {
            "school_name": self._school_name,
            "class_name": booking.class_name or (assignment.name if assignment else ""),
            "teacher_names": ", ".join(assignment.staff_names) if assignment else "",
            "formatted_date": format_long_date(booking.date),
        }
