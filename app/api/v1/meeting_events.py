from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from app.api.v1.auth import optional_admin, require_admin
from app.api.v1.errors import to_http
from app.api.v1.schemas import (
    AvailabilitySchema,
    EventStatsSchema,
    MeetingEventInSchema,
    MeetingEventSchema,
    SlotSchema,
)
from app.application.exceptions import SchedulingError
from app.application.use_cases.booking_requests import BookingRequestsUseCase
from app.application.use_cases.meeting_events import MeetingEventsUseCase
from app.application.utils.availability import visible_slots
from app.wiring.dependencies import get_booking_requests_use_case, get_meeting_events_use_case

router = APIRouter()


@router.get("/meeting-events", response_model=list[MeetingEventSchema])
def list_events(
    admin: str | None = Depends(optional_admin),
    uc: MeetingEventsUseCase = Depends(get_meeting_events_use_case),
):
    # Parents only ever see events that are open for booking
    events = uc.list_events(active_only=admin is None)
    return [MeetingEventSchema.from_entity(e) for e in events]


@router.get("/meeting-events/{event_id}", response_model=MeetingEventSchema)
def get_event(
    event_id: int,
    admin: str | None = Depends(optional_admin),
    uc: MeetingEventsUseCase = Depends(get_meeting_events_use_case),
):
    try:
        event = uc.get_event(event_id)
    except SchedulingError as e:
        raise to_http(e)
    if admin is None and not event.is_active:
        raise HTTPException(
            status_code=404,
            detail={"code": "event_not_found", "message": f"Event {event_id} not found"},
        )
    return MeetingEventSchema.from_entity(event)


@router.get("/meeting-events/{event_id}/availability", response_model=AvailabilitySchema)
def get_availability(
    event_id: int,
    day: date = Query(..., alias="date"),
    class_id: int = Query(..., alias="classId"),
    uc: BookingRequestsUseCase = Depends(get_booking_requests_use_case),
):
    try:
        slots = uc.get_availability(event_id, day, class_id)
    except SchedulingError as e:
        raise to_http(e)
    return AvailabilitySchema(
        event_id=event_id,
        date=day,
        class_id=class_id,
        slots=[SlotSchema.from_entity(s) for s in visible_slots(slots)],
    )


@router.get("/meeting-events/{event_id}/stats", response_model=EventStatsSchema)
def get_stats(
    event_id: int,
    _: str = Depends(require_admin),
    uc: MeetingEventsUseCase = Depends(get_meeting_events_use_case),
):
    try:
        stats = uc.stats(event_id)
    except SchedulingError as e:
        raise to_http(e)
    return EventStatsSchema.from_entity(stats)


@router.post("/meeting-events", response_model=MeetingEventSchema, status_code=201)
def create_event(
    req: MeetingEventInSchema,
    _: str = Depends(require_admin),
    uc: MeetingEventsUseCase = Depends(get_meeting_events_use_case),
):
    try:
        created = uc.create_event(req.to_entity())
    except SchedulingError as e:
        raise to_http(e)
    return MeetingEventSchema.from_entity(created)


@router.put("/meeting-events/{event_id}", response_model=MeetingEventSchema)
def update_event(
    event_id: int,
    req: MeetingEventInSchema,
    _: str = Depends(require_admin),
    uc: MeetingEventsUseCase = Depends(get_meeting_events_use_case),
):
    try:
        updated = uc.update_event(event_id, req.to_entity())
    except SchedulingError as e:
        raise to_http(e)
    return MeetingEventSchema.from_entity(updated)


@router.delete("/meeting-events/{event_id}", status_code=204)
def delete_event(
    event_id: int,
    _: str = Depends(require_admin),
    uc: MeetingEventsUseCase = Depends(get_meeting_events_use_case),
):
    try:
        uc.delete_event(event_id)
    except SchedulingError as e:
        raise to_http(e)
    return Response(status_code=204)
