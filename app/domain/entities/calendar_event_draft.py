from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time


@dataclass(frozen=True)
class CalendarEventDraft:
    title: str
    date: date
    start_time: time
    end_time: time
    location: str
    description: str
    attendee_email: str
    attendee_name: str = ""
