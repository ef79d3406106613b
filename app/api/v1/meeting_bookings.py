from fastapi import APIRouter, Depends, HTTPException, Query, Response

from app.api.v1.auth import optional_admin, require_admin
from app.api.v1.errors import to_http
from app.api.v1.schemas import (
    BookedSlotSchema,
    BookingCreateSchema,
    BookingCreatedSchema,
    BookingSchema,
    CalendarDraftSchema,
    MessageDraftRequestSchema,
    MessageDraftSchema,
    StatusUpdateResponseSchema,
    StatusUpdateSchema,
    VerifyCodeSchema,
)
from app.application.exceptions import LLMContractError, LLMUpstreamError, SchedulingError
from app.application.use_cases.approval import ApprovalWorkflowUseCase
from app.application.use_cases.booking_requests import BookingRequestsUseCase, CreatedBooking, NewBookingRequest
from app.wiring.dependencies import get_approval_use_case, get_booking_requests_use_case

router = APIRouter()


def _created(result: CreatedBooking) -> BookingCreatedSchema:
    if result.code_sent:
        message = "A verification code has been sent to your email address"
    else:
        message = "Your request was saved but the code could not be emailed, please ask for a new code"
    return BookingCreatedSchema(
        booking_id=result.booking.id,
        code_expires_at=result.code_expires_at,
        code_sent=result.code_sent,
        message=message,
    )


@router.get("/meeting-bookings")
def list_bookings(
    event_id: int | None = Query(None, alias="eventId"),
    admin: str | None = Depends(optional_admin),
    uc: BookingRequestsUseCase = Depends(get_booking_requests_use_case),
):
    """
    With `eventId`: booked (date, class, time) tuples, public.
    Without: every request across events, administrators only.
    """
    if event_id is not None:
        return [BookedSlotSchema.from_entity(s) for s in uc.get_booked_slots(event_id)]
    if admin is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Administrator session required"},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return [BookingSchema.from_entity(b) for b in uc.list_bookings()]


@router.post("/meeting-bookings", response_model=BookingCreatedSchema, status_code=201)
def create_booking(
    req: BookingCreateSchema,
    uc: BookingRequestsUseCase = Depends(get_booking_requests_use_case),
):
    try:
        result = uc.create_request(
            NewBookingRequest(
                event_id=req.event_id,
                class_id=req.class_id,
                class_name=req.class_name,
                date=req.date,
                time=req.time,
                parent_name=req.parent_name,
                child_name=req.child_name,
                email=req.email,
                phone=req.phone,
            )
        )
    except SchedulingError as e:
        raise to_http(e)
    return _created(result)


@router.post("/meeting-bookings/{booking_id}/verify", response_model=BookingSchema)
def verify_booking(
    booking_id: int,
    req: VerifyCodeSchema,
    uc: BookingRequestsUseCase = Depends(get_booking_requests_use_case),
):
    try:
        booking = uc.verify(booking_id, req.code)
    except SchedulingError as e:
        raise to_http(e)
    return BookingSchema.from_entity(booking)


@router.post("/meeting-bookings/{booking_id}/resend-code", response_model=BookingCreatedSchema)
def resend_code(
    booking_id: int,
    uc: BookingRequestsUseCase = Depends(get_booking_requests_use_case),
):
    try:
        result = uc.resend_code(booking_id)
    except SchedulingError as e:
        raise to_http(e)
    return _created(result)


@router.get("/meeting-bookings/{booking_id}", response_model=BookingSchema)
def get_booking(
    booking_id: int,
    _: str = Depends(require_admin),
    uc: BookingRequestsUseCase = Depends(get_booking_requests_use_case),
):
    try:
        booking = uc.get_booking(booking_id)
    except SchedulingError as e:
        raise to_http(e)
    return BookingSchema.from_entity(booking)


@router.put("/meeting-bookings/{booking_id}", response_model=StatusUpdateResponseSchema)
def update_status(
    booking_id: int,
    req: StatusUpdateSchema,
    _: str = Depends(require_admin),
    uc: ApprovalWorkflowUseCase = Depends(get_approval_use_case),
):
    try:
        result = uc.change_status(
            booking_id,
            req.status,
            message=req.message.to_entity() if req.message else None,
            calendar=req.calendar.to_entity() if req.calendar else None,
        )
    except SchedulingError as e:
        raise to_http(e)
    return StatusUpdateResponseSchema(
        booking=BookingSchema.from_entity(result.booking),
        notification_sent=result.dispatch.sent if result.dispatch else None,
        warning=result.warning,
    )


@router.delete("/meeting-bookings/{booking_id}", status_code=204)
def delete_booking(
    booking_id: int,
    _: str = Depends(require_admin),
    uc: BookingRequestsUseCase = Depends(get_booking_requests_use_case),
):
    try:
        uc.delete_booking(booking_id)
    except SchedulingError as e:
        raise to_http(e)
    return Response(status_code=204)


@router.post("/meeting-bookings/{booking_id}/calendar-draft", response_model=CalendarDraftSchema)
def calendar_draft(
    booking_id: int,
    _: str = Depends(require_admin),
    uc: ApprovalWorkflowUseCase = Depends(get_approval_use_case),
):
    try:
        draft = uc.build_calendar_draft(booking_id)
    except SchedulingError as e:
        raise to_http(e)
    return CalendarDraftSchema.from_entity(draft)


@router.post("/meeting-bookings/{booking_id}/calendar-draft/ics")
def calendar_ics(
    booking_id: int,
    req: CalendarDraftSchema | None = None,
    _: str = Depends(require_admin),
    uc: ApprovalWorkflowUseCase = Depends(get_approval_use_case),
):
    try:
        draft = req.to_entity() if req else uc.build_calendar_draft(booking_id)
        ics = uc.render_ics(booking_id, draft)
    except SchedulingError as e:
        raise to_http(e)
    return Response(
        content=ics,
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="meeting-{booking_id}.ics"'},
    )


@router.post("/meeting-bookings/{booking_id}/message-draft", response_model=MessageDraftSchema)
def message_draft(
    booking_id: int,
    req: MessageDraftRequestSchema,
    _: str = Depends(require_admin),
    uc: ApprovalWorkflowUseCase = Depends(get_approval_use_case),
):
    try:
        draft = uc.build_message_draft(
            booking_id,
            req.status,
            calendar=req.calendar.to_entity() if req.calendar else None,
            use_ai=req.use_ai,
        )
    except (SchedulingError, LLMUpstreamError, LLMContractError) as e:
        raise to_http(e)
    return MessageDraftSchema.from_entity(draft)
