from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, time, timedelta

from app.domain.entities.booking_request import BookingRequest, BookingStatus
from app.domain.entities.slot import SlotAvailability, SlotStatus

# Morning session is everything before this time, afternoon the rest.
SESSION_SPLIT = time(12, 30)


def split_sessions(slots: Iterable[time]) -> tuple[list[time], list[time]]:
    ordered = sorted(slots)
    morning = [t for t in ordered if t < SESSION_SPLIT]
    afternoon = [t for t in ordered if t >= SESSION_SPLIT]
    return morning, afternoon


def _resolve_session(session: list[time], taken: set[time]) -> list[SlotAvailability]:
    result: list[SlotAvailability] = []
    found_available = False
    for slot in session:
        if slot in taken:
            result.append(SlotAvailability(slot, SlotStatus.taken))
        elif not found_available:
            result.append(SlotAvailability(slot, SlotStatus.available))
            found_available = True
        else:
            result.append(SlotAvailability(slot, SlotStatus.hidden))
    return result


def resolve_availability(slots: Iterable[time], taken_times: Iterable[time]) -> list[SlotAvailability]:
    """
    Classify every theoretical slot of one (date, class) pair.

    Per session only the first untaken slot is `available`; later untaken
    slots are `hidden` until the earlier ones are booked. Pure function of
    its inputs, so callers recompute it on every read.
    """
    taken = set(taken_times)
    morning, afternoon = split_sessions(slots)
    return _resolve_session(morning, taken) + _resolve_session(afternoon, taken)


def visible_slots(availability: Iterable[SlotAvailability]) -> list[SlotAvailability]:
    return [slot for slot in availability if slot.status != SlotStatus.hidden]


def booking_holds_slot(booking: BookingRequest, now: datetime, unverified_hold: timedelta | None) -> bool:
    """
    Whether a stored request occupies its (event, class, date, time) slot.

    Rejected requests never do. Unverified ones do until `unverified_hold`
    has elapsed since creation; with no hold configured they always do.
    """
    if booking.status == BookingStatus.rejected:
        return False
    if booking.is_verified or unverified_hold is None or booking.created_at is None:
        return True
    return booking.created_at + unverified_hold > now
