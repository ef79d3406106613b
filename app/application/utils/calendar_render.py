from __future__ import annotations

from datetime import date, datetime, time, timezone
from urllib.parse import quote

from app.domain.entities.calendar_event_draft import CalendarEventDraft

GOOGLE_CALENDAR_RENDER_URL = "https://calendar.google.com/calendar/render"


def _local_stamp(day: date, at: time) -> str:
    return f"{day.year:04d}{day.month:02d}{day.day:02d}T{at.hour:02d}{at.minute:02d}00"


def _escape_ics(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def build_google_calendar_link(draft: CalendarEventDraft) -> str:
    start = _local_stamp(draft.date, draft.start_time)
    end = _local_stamp(draft.date, draft.end_time)
    link = (
        f"{GOOGLE_CALENDAR_RENDER_URL}?action=TEMPLATE"
        f"&text={quote(draft.title, safe='')}"
        f"&dates={start}/{end}"
        f"&details={quote(draft.description, safe='')}"
        f"&location={quote(draft.location, safe='')}"
    )
    if draft.attendee_email:
        link += f"&add={quote(draft.attendee_email, safe='')}"
    return link


def build_ics(
    draft: CalendarEventDraft,
    uid: str,
    organizer_email: str,
    tz_name: str,
    now: datetime | None = None,
) -> str:
    """Render a single-event iCalendar file in the institutional timezone."""
    stamp = (now or datetime.now(timezone.utc)).astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//School Meetings//EN",
        "CALSCALE:GREGORIAN",
        "METHOD:REQUEST",
        "BEGIN:VEVENT",
        f"UID:{uid}",
        f"DTSTAMP:{stamp}",
        f"DTSTART;TZID={tz_name}:{_local_stamp(draft.date, draft.start_time)}",
        f"DTEND;TZID={tz_name}:{_local_stamp(draft.date, draft.end_time)}",
        f"SUMMARY:{_escape_ics(draft.title)}",
        f"DESCRIPTION:{_escape_ics(draft.description)}",
        f"LOCATION:{_escape_ics(draft.location)}",
        f"ORGANIZER:mailto:{organizer_email}",
    ]
    if draft.attendee_email:
        name = _escape_ics(draft.attendee_name) if draft.attendee_name else draft.attendee_email
        lines.append(f"ATTENDEE;CN={name};RSVP=TRUE:mailto:{draft.attendee_email}")
    lines += ["STATUS:CONFIRMED", "END:VEVENT", "END:VCALENDAR"]
    return "\r\n".join(lines) + "\r\n"
