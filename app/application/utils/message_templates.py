from __future__ import annotations

from app.domain.entities.booking_request import BookingRequest, BookingStatus
from app.domain.entities.message_draft import MessageDraft
from app.application.utils.time_format import format_hhmm

CALENDAR_LINK_HEADER = "Add this meeting to your calendar:"


def build_verification_message(code: str, ttl_minutes: int, school_name: str) -> tuple[str, str]:
    subject = f"{school_name} meeting request verification code"
    body = (
        f"Your verification code is {code}.\n\n"
        f"It expires in {ttl_minutes} minutes. If you did not request a meeting, ignore this email."
    )
    return subject, body


def build_status_message(
    booking: BookingRequest,
    status: BookingStatus,
    context: dict[str, str],
) -> MessageDraft:
    school = context.get("school_name", "")
    formatted_date = context.get("formatted_date", booking.date.isoformat())
    class_name = context.get("class_name") or booking.class_name or "-"
    teachers = context.get("teacher_names", "")
    at = format_hhmm(booking.time)

    details = [
        f"Date: {formatted_date}",
        f"Time: {at}",
        f"Child: {booking.child_name}",
        f"Class: {class_name}",
    ]
    if teachers:
        details.append(f"Teachers: {teachers}")

    if status == BookingStatus.approved:
        subject = f"{school} Parent Meeting - {formatted_date} - {at} - {booking.child_name}"
        opening = f"Your parent meeting on {formatted_date} at {at} has been approved."
        closing = "A calendar invitation is included.\n\nSee you soon,"
    elif status == BookingStatus.rejected:
        subject = f"{school} Parent Meeting Request - {formatted_date} - {booking.child_name}"
        opening = (
            f"Unfortunately we cannot hold the meeting requested for {formatted_date} at {at}."
        )
        closing = (
            "We are sorry for the inconvenience. Please book another time through the "
            "meeting page or contact us directly.\n\nKind regards,"
        )
    else:
        raise ValueError(f"No correspondence for status {status.value!r}")

    body = "\n".join(
        [f"Dear {booking.parent_name},", "", opening, "", *details, "", closing, school]
    )
    return MessageDraft(subject=subject, body=body)


def append_calendar_link(body: str, link: str) -> str:
    if CALENDAR_LINK_HEADER in body:
        return body
    return f"{body}\n\n{CALENDAR_LINK_HEADER}\n{link}"
