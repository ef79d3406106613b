from app.application.utils.time_format import format_hhmm
from app.domain.entities.booking_request import BookingRequest, BookingStatus

STATUS_INSTRUCTIONS = {
    BookingStatus.approved: (
        "The meeting is APPROVED. Confirm the date and time, say we look forward to seeing them, "
        "mention that this time matters for the child's development and that a calendar invitation is included."
    ),
    BookingStatus.rejected: (
        "The meeting is REJECTED. Explain that the time slot is no longer available due to demand, "
        "apologise sincerely, and ask them to book a different time through the meeting page or contact us."
    ),
}


def build_status_message_prompt(booking: BookingRequest, status: BookingStatus, context: dict[str, str]) -> str:
    school = context.get("school_name", "")
    return (
        f"You are the administrator of {school}, a kindergarten.\n"
        "Write a polite, professional and warm email to a parent.\n"
        "Return ONLY valid JSON. No markdown. No extra text.\n"
        "Output schema:\n"
        "  {\"subject\": \"...\", \"body\": \"...\"}\n"
        "Rules:\n"
        "  - Use exactly the date and time given below; never propose another time.\n"
        "  - Address the parent by name.\n"
        f"  - Sign the email as {school}.\n"
        f"  - {STATUS_INSTRUCTIONS[status]}\n"
        "\n"
        "Meeting:\n"
        f"  parent_name: {booking.parent_name}\n"
        f"  child_name: {booking.child_name}\n"
        f"  class_name: {context.get('class_name') or booking.class_name}\n"
        f"  teachers: {context.get('teacher_names', '')}\n"
        f"  date: {context.get('formatted_date', booking.date.isoformat())}\n"
        f"  time: {format_hhmm(booking.time)}\n"
        f"  status: {status.value}\n"
    )
