#!/usr/bin/env python3
"""
Create a demo meeting event in the configured store.

Usage:
  STORE_PROVIDER=json python3 scripts/seed_event.py 2024-10-20 2024-10-21

Prints the new event id and the first day's visible slots per class.
"""

from __future__ import annotations

import sys
from datetime import date, time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.application.utils.availability import visible_slots
from app.domain.entities.meeting_event import ClassAssignment, MeetingEvent, StaffMember
from app.wiring.dependencies import get_booking_requests_use_case, get_meeting_events_use_case


def main(argv: list[str]) -> int:
    if not argv:
        print(__doc__)
        return 1
    days = tuple(date.fromisoformat(a) for a in argv)

    event = get_meeting_events_use_case().create_event(
        MeetingEvent(
            title="Parent Meetings",
            dates=days,
            daily_start=time(9, 0),
            daily_end=time(16, 0),
            duration_minutes=20,
            buffer_minutes=10,
            classes=(
                ClassAssignment(id=1, name="Sunflowers", staff=(StaffMember(id=1, name="Homeroom Teacher"),)),
                ClassAssignment(id=2, name="Tulips"),
            ),
        )
    )
    print(f"event_id: {event.id}")

    bookings = get_booking_requests_use_case()
    for assignment in event.included_classes():
        slots = visible_slots(bookings.get_availability(event.id, event.dates[0], assignment.id))
        shown = ", ".join(f"{s.time:%H:%M} {s.status.value}" for s in slots)
        print(f"{assignment.name}: {shown}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
