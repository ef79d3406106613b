from __future__ import annotations

from datetime import date, datetime, time
from typing import Annotated

from pydantic import BaseModel, EmailStr, Field, PlainSerializer

from app.domain.entities.booking_request import BookedSlot, BookingRequest, BookingStatus
from app.domain.entities.calendar_event_draft import CalendarEventDraft
from app.domain.entities.delivery_settings import DeliverySettings
from app.domain.entities.meeting_event import ClassAssignment, MeetingEvent, MeetingEventStats, StaffMember
from app.domain.entities.message_draft import MessageDraft
from app.domain.entities.slot import SlotAvailability, SlotStatus

# Times of day travel as "HH:MM"
HHMM = Annotated[time, PlainSerializer(lambda t: t.strftime("%H:%M"), return_type=str)]


class StaffMemberSchema(BaseModel):
    id: int
    name: str
    role: str = ""
    branch: str = ""
    icon: str = ""


class ClassAssignmentSchema(BaseModel):
    id: int
    name: str
    is_included: bool = True
    staff: list[StaffMemberSchema] = Field(default_factory=list)


class MeetingEventInSchema(BaseModel):
    title: str
    dates: list[date] = Field(min_length=1)
    daily_start: HHMM
    daily_end: HHMM
    duration_minutes: int = 20
    buffer_minutes: int = 0
    is_active: bool = True
    classes: list[ClassAssignmentSchema] = Field(default_factory=list)

    def to_entity(self) -> MeetingEvent:
        return MeetingEvent(
            title=self.title,
            dates=tuple(self.dates),
            daily_start=self.daily_start,
            daily_end=self.daily_end,
            duration_minutes=self.duration_minutes,
            buffer_minutes=self.buffer_minutes,
            is_active=self.is_active,
            classes=tuple(
                ClassAssignment(
                    id=c.id,
                    name=c.name,
                    is_included=c.is_included,
                    staff=tuple(StaffMember(**s.model_dump()) for s in c.staff),
                )
                for c in self.classes
            ),
        )


class MeetingEventSchema(MeetingEventInSchema):
    id: int
    created_at: datetime | None = None

    @classmethod
    def from_entity(cls, event: MeetingEvent) -> "MeetingEventSchema":
        return cls(
            id=event.id,
            title=event.title,
            dates=list(event.dates),
            daily_start=event.daily_start,
            daily_end=event.daily_end,
            duration_minutes=event.duration_minutes,
            buffer_minutes=event.buffer_minutes,
            is_active=event.is_active,
            created_at=event.created_at,
            classes=[
                ClassAssignmentSchema(
                    id=c.id,
                    name=c.name,
                    is_included=c.is_included,
                    staff=[
                        StaffMemberSchema(id=s.id, name=s.name, role=s.role, branch=s.branch, icon=s.icon)
                        for s in c.staff
                    ],
                )
                for c in event.classes
            ],
        )


class EventStatsSchema(BaseModel):
    unverified: int
    pending: int
    approved: int
    rejected: int
    by_class: dict[int, int]

    @classmethod
    def from_entity(cls, stats: MeetingEventStats) -> "EventStatsSchema":
        return cls(
            unverified=stats.unverified,
            pending=stats.pending,
            approved=stats.approved,
            rejected=stats.rejected,
            by_class=dict(stats.by_class),
        )


class SlotSchema(BaseModel):
    time: HHMM
    status: SlotStatus

    @classmethod
    def from_entity(cls, slot: SlotAvailability) -> "SlotSchema":
        return cls(time=slot.time, status=slot.status)


class AvailabilitySchema(BaseModel):
    event_id: int
    date: date
    class_id: int
    slots: list[SlotSchema]


class BookedSlotSchema(BaseModel):
    date: date
    class_id: int
    time: HHMM

    @classmethod
    def from_entity(cls, slot: BookedSlot) -> "BookedSlotSchema":
        return cls(date=slot.date, class_id=slot.class_id, time=slot.time)


class BookingCreateSchema(BaseModel):
    event_id: int
    class_id: int
    class_name: str | None = None
    date: date
    time: HHMM
    parent_name: str = Field(min_length=2)
    child_name: str = Field(min_length=2)
    phone: str = ""
    email: EmailStr


class BookingCreatedSchema(BaseModel):
    booking_id: int
    code_expires_at: datetime
    code_sent: bool
    message: str


class VerifyCodeSchema(BaseModel):
    code: str = Field(pattern=r"^[0-9]{4,10}$")


class BookingSchema(BaseModel):
    id: int
    event_id: int
    class_id: int
    class_name: str
    date: date
    time: HHMM
    parent_name: str
    child_name: str
    email: str
    phone: str
    status: BookingStatus
    verified: bool
    created_at: datetime | None = None
    verified_at: datetime | None = None

    @classmethod
    def from_entity(cls, booking: BookingRequest) -> "BookingSchema":
        return cls(
            id=booking.id,
            event_id=booking.event_id,
            class_id=booking.class_id,
            class_name=booking.class_name,
            date=booking.date,
            time=booking.time,
            parent_name=booking.parent_name,
            child_name=booking.child_name,
            email=booking.email,
            phone=booking.phone,
            status=booking.status,
            verified=booking.is_verified,
            created_at=booking.created_at,
            verified_at=booking.verified_at,
        )


class CalendarDraftSchema(BaseModel):
    title: str
    date: date
    start_time: HHMM
    end_time: HHMM
    location: str = ""
    description: str = ""
    attendee_email: str = ""
    attendee_name: str = ""

    def to_entity(self) -> CalendarEventDraft:
        return CalendarEventDraft(**self.model_dump())

    @classmethod
    def from_entity(cls, draft: CalendarEventDraft) -> "CalendarDraftSchema":
        return cls(
            title=draft.title,
            date=draft.date,
            start_time=draft.start_time,
            end_time=draft.end_time,
            location=draft.location,
            description=draft.description,
            attendee_email=draft.attendee_email,
            attendee_name=draft.attendee_name,
        )


class MessageDraftSchema(BaseModel):
    subject: str = Field(min_length=1)
    body: str = Field(min_length=1)
    generated_by: str = "template"

    def to_entity(self) -> MessageDraft:
        return MessageDraft(subject=self.subject, body=self.body, generated_by=self.generated_by)

    @classmethod
    def from_entity(cls, draft: MessageDraft) -> "MessageDraftSchema":
        return cls(subject=draft.subject, body=draft.body, generated_by=draft.generated_by)


class MessageDraftRequestSchema(BaseModel):
    status: BookingStatus
    calendar: CalendarDraftSchema | None = None
    use_ai: bool = False


class StatusUpdateSchema(BaseModel):
    status: BookingStatus
    message: MessageDraftSchema | None = None
    calendar: CalendarDraftSchema | None = None


class StatusUpdateResponseSchema(BaseModel):
    booking: BookingSchema
    notification_sent: bool | None = None
    warning: str | None = None


class AdminCodeRequestSchema(BaseModel):
    email: EmailStr


class AdminCodeVerifySchema(BaseModel):
    email: EmailStr
    code: str = Field(pattern=r"^[0-9]{4,10}$")


class SessionTokenSchema(BaseModel):
    token: str
    token_type: str = "bearer"


class SessionSchema(BaseModel):
    valid: bool
    email: str | None = None


class DeliverySettingsSchema(BaseModel):
    emailjs_service_id: str | None = None
    emailjs_template_id: str | None = None
    emailjs_public_key: str | None = None
    reply_to: str | None = None

    def to_entity(self) -> DeliverySettings:
        return DeliverySettings(**self.model_dump())

    @classmethod
    def from_entity(cls, delivery: DeliverySettings | None) -> "DeliverySettingsSchema":
        if delivery is None:
            return cls()
        return cls(
            emailjs_service_id=delivery.emailjs_service_id,
            emailjs_template_id=delivery.emailjs_template_id,
            emailjs_public_key=delivery.emailjs_public_key,
            reply_to=delivery.reply_to,
        )
