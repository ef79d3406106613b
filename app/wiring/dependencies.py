from functools import lru_cache
import logging

from app.core.config import settings
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.meeting_event_store import MeetingEventStorePort
from app.application.ports.notifier import NotifierPort
from app.application.ports.session_tokens import SessionTokenPort
from app.application.ports.settings_store import SettingsStorePort
from app.application.ports.verification_store import VerificationCodeStorePort
from app.application.use_cases.admin_login import AdminLoginUseCase
from app.application.use_cases.approval import ApprovalWorkflowUseCase
from app.application.use_cases.booking_requests import BookingRequestsUseCase
from app.application.use_cases.meeting_events import MeetingEventsUseCase
from app.application.use_cases.verification import VerificationService
from app.domain.entities.delivery_settings import DeliverySettings
from app.infrastructure.auth.session_tokens import JoseSessionTokens
from app.infrastructure.llm.mock_llm import MockLLM
from app.infrastructure.llm.openai_llm import OpenAILLM
from app.infrastructure.notifier.dev_fallback_notifier import DevFallbackNotifier
from app.infrastructure.notifier.emailjs_notifier import EmailJSNotifier
from app.infrastructure.notifier.mock_notifier import MockNotifier
from app.infrastructure.store.json_store import (
    JsonBookingStore,
    JsonMeetingEventStore,
    JsonSettingsStore,
    JsonVerificationCodeStore,
)
from app.infrastructure.store.memory_store import (
    MemoryBookingStore,
    MemoryMeetingEventStore,
    MemorySettingsStore,
    MemoryVerificationCodeStore,
)


def _use_json_store() -> bool:
    return settings.STORE_PROVIDER.lower() == "json"


@lru_cache
def get_meeting_event_store() -> MeetingEventStorePort:
    if _use_json_store():
        return JsonMeetingEventStore(settings.DATA_DIR)
    return MemoryMeetingEventStore()


@lru_cache
def get_booking_store() -> BookingStorePort:
    if _use_json_store():
        return JsonBookingStore(settings.DATA_DIR)
    return MemoryBookingStore()


@lru_cache
def get_verification_store() -> VerificationCodeStorePort:
    if _use_json_store():
        return JsonVerificationCodeStore(settings.DATA_DIR)
    return MemoryVerificationCodeStore()


@lru_cache
def get_settings_store() -> SettingsStorePort:
    if _use_json_store():
        return JsonSettingsStore(settings.DATA_DIR)
    return MemorySettingsStore()


def resolve_delivery_settings() -> DeliverySettings:
    """Administrator-saved credentials win over the environment defaults."""
    saved = get_settings_store().get_delivery_settings()
    if saved is not None and saved.is_complete:
        return saved
    return DeliverySettings(
        emailjs_service_id=settings.EMAILJS_SERVICE_ID,
        emailjs_template_id=settings.EMAILJS_TEMPLATE_ID,
        emailjs_public_key=settings.EMAILJS_PUBLIC_KEY,
        reply_to=settings.SCHOOL_EMAIL,
    )


@lru_cache
def get_notifier() -> NotifierPort:
    logger = logging.getLogger(__name__)
    emailjs = EmailJSNotifier(credentials=resolve_delivery_settings, endpoint=settings.EMAILJS_ENDPOINT)
    if settings.ENV.lower() in {"dev", "local"}:
        logger.info("Using EmailJSNotifier with MockNotifier fallback (ENV=dev/local)")
        return DevFallbackNotifier(primary=emailjs, fallback=MockNotifier(), credentials=resolve_delivery_settings)
    logger.info("Using EmailJSNotifier")
    return emailjs


@lru_cache
def get_llm():
    if settings.OPENAI_API_KEY and settings.OPENAI_API_KEY.strip():
        return OpenAILLM()
    return MockLLM()


@lru_cache
def get_session_tokens() -> SessionTokenPort:
    return JoseSessionTokens(
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        lifetime_hours=settings.ADMIN_SESSION_HOURS,
    )


def get_verification_service() -> VerificationService:
    return VerificationService(store=get_verification_store(), code_length=settings.CODE_LENGTH)


def get_meeting_events_use_case() -> MeetingEventsUseCase:
    return MeetingEventsUseCase(events=get_meeting_event_store(), bookings=get_booking_store())


def get_booking_requests_use_case() -> BookingRequestsUseCase:
    return BookingRequestsUseCase(
        events=get_meeting_event_store(),
        bookings=get_booking_store(),
        verification=get_verification_service(),
        notifier=get_notifier(),
        school_name=settings.SCHOOL_NAME,
        code_ttl_minutes=settings.BOOKING_CODE_TTL_MINUTES,
        email_window_days=settings.BOOKING_EMAIL_WINDOW_DAYS,
        unverified_hold_minutes=settings.UNVERIFIED_BOOKING_HOLD_MINUTES,
    )


def get_approval_use_case() -> ApprovalWorkflowUseCase:
    return ApprovalWorkflowUseCase(
        events=get_meeting_event_store(),
        bookings=get_booking_store(),
        notifier=get_notifier(),
        llm=get_llm(),
        school_name=settings.SCHOOL_NAME,
        location=settings.SCHOOL_LOCATION,
        organizer_email=settings.SCHOOL_EMAIL,
        timezone_name=settings.SCHOOL_TIMEZONE,
        default_meeting_minutes=settings.DEFAULT_MEETING_MINUTES,
        unverified_hold_minutes=settings.UNVERIFIED_BOOKING_HOLD_MINUTES,
    )


def get_admin_login_use_case() -> AdminLoginUseCase:
    return AdminLoginUseCase(
        verification=get_verification_service(),
        notifier=get_notifier(),
        tokens=get_session_tokens(),
        admin_email=settings.ADMIN_EMAIL,
        school_name=settings.SCHOOL_NAME,
        code_ttl_minutes=settings.ADMIN_CODE_TTL_MINUTES,
    )
