from __future__ import annotations

from datetime import time

from app.application.utils.time_format import from_minutes, to_minutes

# Midday break: no slot may start in [BREAK_START, BREAK_END).
BREAK_START = time(12, 0)
BREAK_END = time(13, 30)


def generate_slots(
    daily_start: time,
    daily_end: time,
    duration_minutes: int,
    buffer_minutes: int = 0,
) -> list[time]:
    """
    Theoretical slot start times for one day of a meeting event.

    A slot is emitted while `start + duration <= daily_end`; the cursor then
    advances by `duration + buffer`. A cursor landing inside the midday break
    is moved to the end of the break without emitting anything. Stored
    bookings play no part here.
    """
    step = duration_minutes + buffer_minutes
    if step <= 0:
        return []

    break_start = to_minutes(BREAK_START)
    break_end = to_minutes(BREAK_END)
    end = to_minutes(daily_end)

    slots: list[time] = []
    current = to_minutes(daily_start)
    while current + duration_minutes <= end:
        if break_start <= current < break_end:
            current = break_end
            continue
        slots.append(from_minutes(current))
        current += step
    return slots
