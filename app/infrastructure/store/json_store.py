from __future__ import annotations

import json
import logging
import threading
from dataclasses import replace
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Callable

from app.application.exceptions import SlotConflictError
from app.application.ports.booking_store import BookingStorePort
from app.application.ports.meeting_event_store import MeetingEventStorePort
from app.application.ports.settings_store import SettingsStorePort
from app.application.ports.verification_store import VerificationCodeStorePort
from app.domain.entities.booking_request import BookingRequest, BookingStatus
from app.domain.entities.delivery_settings import DeliverySettings
from app.domain.entities.meeting_event import ClassAssignment, MeetingEvent, StaffMember
from app.domain.entities.verification_code import VerificationCode

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: date | time | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None


class _JsonCollection:
    """One JSON file holding `{"next_id": int, "rows": [...]}`, guarded by a lock."""

    def __init__(self, data_dir: str, name: str) -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._file_path = self._data_dir / f"{name}.json"
        self._lock = threading.Lock()

    def _load(self) -> dict[str, Any]:
        """Load collection data from JSON file, return default if missing."""
        if not self._file_path.exists():
            return {"next_id": 1, "rows": [], "version": 1}
        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error("Unreadable store file", extra={"error": str(e), "reason": str(self._file_path)})
            return {"next_id": 1, "rows": [], "version": 1}
        data.setdefault("next_id", 1)
        data.setdefault("rows", [])
        return data

    def _save(self, data: dict[str, Any]) -> None:
        """Save collection data to JSON file atomically."""
        temp_path = self._file_path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(self._file_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise

    def _take_id(self, data: dict[str, Any]) -> int:
        new_id = int(data["next_id"])
        data["next_id"] = new_id + 1
        return new_id


# --- meeting events ---


def _serialize_event(event: MeetingEvent) -> dict[str, Any]:
    return {
        "id": event.id,
        "title": event.title,
        "dates": [d.isoformat() for d in event.dates],
        "daily_start": event.daily_start.strftime("%H:%M"),
        "daily_end": event.daily_end.strftime("%H:%M"),
        "duration_minutes": event.duration_minutes,
        "buffer_minutes": event.buffer_minutes,
        "is_active": event.is_active,
        "created_at": _iso(event.created_at),
        "classes": [
            {
                "id": c.id,
                "name": c.name,
                "is_included": c.is_included,
                "staff": [
                    {"id": s.id, "name": s.name, "role": s.role, "branch": s.branch, "icon": s.icon}
                    for s in c.staff
                ],
            }
            for c in event.classes
        ],
    }


def _deserialize_event(data: dict[str, Any]) -> MeetingEvent:
    return MeetingEvent(
        id=data.get("id"),
        title=data.get("title", ""),
        dates=tuple(date.fromisoformat(d) for d in data.get("dates", [])),
        daily_start=time.fromisoformat(data["daily_start"]),
        daily_end=time.fromisoformat(data["daily_end"]),
        duration_minutes=int(data.get("duration_minutes", 0)),
        buffer_minutes=int(data.get("buffer_minutes", 0)),
        is_active=bool(data.get("is_active", False)),
        created_at=_parse_datetime(data.get("created_at")),
        classes=tuple(
            ClassAssignment(
                id=int(c["id"]),
                name=c.get("name", ""),
                is_included=bool(c.get("is_included", True)),
                staff=tuple(
                    StaffMember(
                        id=int(s["id"]),
                        name=s.get("name", ""),
                        role=s.get("role", ""),
                        branch=s.get("branch", ""),
                        icon=s.get("icon", ""),
                    )
                    for s in c.get("staff", [])
                ),
            )
            for c in data.get("classes", [])
        ),
    )


class JsonMeetingEventStore(_JsonCollection, MeetingEventStorePort):
    def __init__(self, data_dir: str = "./data") -> None:
        super().__init__(data_dir, "meeting_events")

    def list_events(self) -> list[MeetingEvent]:
        with self._lock:
            rows = self._load()["rows"]
        return sorted((_deserialize_event(r) for r in rows), key=lambda e: e.id or 0, reverse=True)

    def get_event(self, event_id: int) -> MeetingEvent | None:
        with self._lock:
            for row in self._load()["rows"]:
                if row.get("id") == event_id:
                    return _deserialize_event(row)
        return None

    def create_event(self, event: MeetingEvent) -> MeetingEvent:
        with self._lock:
            data = self._load()
            created = replace(event, id=self._take_id(data), created_at=event.created_at or _now())
            data["rows"].append(_serialize_event(created))
            self._save(data)
            return created

    def update_event(self, event_id: int, event: MeetingEvent) -> MeetingEvent | None:
        with self._lock:
            data = self._load()
            for index, row in enumerate(data["rows"]):
                if row.get("id") == event_id:
                    updated = replace(event, id=event_id, created_at=_parse_datetime(row.get("created_at")))
                    data["rows"][index] = _serialize_event(updated)
                    self._save(data)
                    return updated
        return None

    def delete_event(self, event_id: int) -> bool:
        with self._lock:
            data = self._load()
            remaining = [r for r in data["rows"] if r.get("id") != event_id]
            if len(remaining) == len(data["rows"]):
                return False
            data["rows"] = remaining
            self._save(data)
            return True


# --- bookings ---


def _serialize_booking(booking: BookingRequest) -> dict[str, Any]:
    return {
        "id": booking.id,
        "event_id": booking.event_id,
        "class_id": booking.class_id,
        "class_name": booking.class_name,
        "date": booking.date.isoformat(),
        "time": booking.time.strftime("%H:%M"),
        "parent_name": booking.parent_name,
        "child_name": booking.child_name,
        "email": booking.email,
        "phone": booking.phone,
        "status": booking.status.value,
        "created_at": _iso(booking.created_at),
        "verified_at": _iso(booking.verified_at),
    }


def _deserialize_booking(data: dict[str, Any]) -> BookingRequest:
    return BookingRequest(
        id=data.get("id"),
        event_id=int(data["event_id"]),
        class_id=int(data["class_id"]),
        class_name=data.get("class_name", ""),
        date=date.fromisoformat(data["date"]),
        time=time.fromisoformat(data["time"]),
        parent_name=data.get("parent_name", ""),
        child_name=data.get("child_name", ""),
        email=data.get("email", ""),
        phone=data.get("phone", ""),
        status=BookingStatus(data.get("status", "pending")),
        created_at=_parse_datetime(data.get("created_at")),
        verified_at=_parse_datetime(data.get("verified_at")),
    )


class JsonBookingStore(_JsonCollection, BookingStorePort):
    def __init__(self, data_dir: str = "./data") -> None:
        super().__init__(data_dir, "meeting_bookings")

    def list_bookings(self, event_id: int | None = None) -> list[BookingRequest]:
        with self._lock:
            rows = self._load()["rows"]
        bookings = [_deserialize_booking(r) for r in rows]
        if event_id is not None:
            bookings = [b for b in bookings if b.event_id == event_id]
        return sorted(bookings, key=lambda b: b.id or 0, reverse=True)

    def get_booking(self, booking_id: int) -> BookingRequest | None:
        with self._lock:
            for row in self._load()["rows"]:
                if row.get("id") == booking_id:
                    return _deserialize_booking(row)
        return None

    def insert_if_slot_free(
        self,
        booking: BookingRequest,
        holds_slot: Callable[[BookingRequest], bool],
    ) -> BookingRequest:
        key = booking.slot_key
        with self._lock:
            data = self._load()
            for row in data["rows"]:
                existing = _deserialize_booking(row)
                if existing.slot_key == key and holds_slot(existing):
                    raise SlotConflictError("This slot has just been booked, please pick another one")
            created = replace(booking, id=self._take_id(data), created_at=booking.created_at or _now())
            data["rows"].append(_serialize_booking(created))
            self._save(data)
            return created

    def _update(self, booking_id: int, change: Callable[[BookingRequest], BookingRequest]) -> BookingRequest | None:
        with self._lock:
            data = self._load()
            for index, row in enumerate(data["rows"]):
                if row.get("id") == booking_id:
                    updated = change(_deserialize_booking(row))
                    data["rows"][index] = _serialize_booking(updated)
                    self._save(data)
                    return updated
        return None

    def set_status(self, booking_id: int, status: BookingStatus) -> BookingRequest | None:
        return self._update(booking_id, lambda b: b.with_status(status))

    def set_status_if_slot_free(
        self,
        booking_id: int,
        status: BookingStatus,
        holds_slot: Callable[[BookingRequest], bool],
    ) -> BookingRequest | None:
        with self._lock:
            data = self._load()
            rows = [_deserialize_booking(r) for r in data["rows"]]
            for index, existing in enumerate(rows):
                if existing.id != booking_id:
                    continue
                updated = existing.with_status(status)
                if holds_slot(updated):
                    for other in rows:
                        if other.id != booking_id and other.slot_key == updated.slot_key and holds_slot(other):
                            raise SlotConflictError("Another request already holds this slot")
                data["rows"][index] = _serialize_booking(updated)
                self._save(data)
                return updated
        return None

    def mark_verified(self, booking_id: int, verified_at: datetime) -> BookingRequest | None:
        return self._update(booking_id, lambda b: replace(b, verified_at=b.verified_at or verified_at))

    def delete_booking(self, booking_id: int) -> bool:
        with self._lock:
            data = self._load()
            remaining = [r for r in data["rows"] if r.get("id") != booking_id]
            if len(remaining) == len(data["rows"]):
                return False
            data["rows"] = remaining
            self._save(data)
            return True


# --- verification codes ---


class JsonVerificationCodeStore(_JsonCollection, VerificationCodeStorePort):
    def __init__(self, data_dir: str = "./data") -> None:
        super().__init__(data_dir, "verification_codes")

    def add_code(self, code: VerificationCode) -> VerificationCode:
        with self._lock:
            data = self._load()
            stored = replace(code, id=self._take_id(data))
            data["rows"].append(
                {
                    "id": stored.id,
                    "subject": stored.subject,
                    "code": stored.code,
                    "expires_at": _iso(stored.expires_at),
                    "created_at": _iso(stored.created_at),
                    "used_at": None,
                }
            )
            self._save(data)
            return stored

    def list_codes(self, subject: str) -> list[VerificationCode]:
        with self._lock:
            rows = [r for r in self._load()["rows"] if r.get("subject") == subject]
        codes = [
            VerificationCode(
                id=r["id"],
                subject=r["subject"],
                code=r["code"],
                expires_at=_parse_datetime(r["expires_at"]),
                created_at=_parse_datetime(r["created_at"]),
                used_at=_parse_datetime(r.get("used_at")),
            )
            for r in rows
        ]
        return sorted(codes, key=lambda c: c.id or 0, reverse=True)

    def consume(self, code_id: int, used_at: datetime) -> bool:
        with self._lock:
            data = self._load()
            for row in data["rows"]:
                if row.get("id") == code_id:
                    if row.get("used_at"):
                        return False
                    row["used_at"] = _iso(used_at)
                    self._save(data)
                    return True
        return False


# --- settings ---


class JsonSettingsStore(SettingsStorePort):
    def __init__(self, data_dir: str = "./data") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._file_path = self._data_dir / "settings.json"
        self._lock = threading.Lock()

    def get_delivery_settings(self) -> DeliverySettings | None:
        with self._lock:
            if not self._file_path.exists():
                return None
            try:
                with open(self._file_path, "r", encoding="utf-8") as f:
                    data = json.load(f).get("delivery")
            except (json.JSONDecodeError, IOError) as e:
                logger.error("Unreadable settings file", extra={"error": str(e)})
                return None
        if not data:
            return None
        return DeliverySettings(
            emailjs_service_id=data.get("emailjs_service_id"),
            emailjs_template_id=data.get("emailjs_template_id"),
            emailjs_public_key=data.get("emailjs_public_key"),
            reply_to=data.get("reply_to"),
        )

    def save_delivery_settings(self, delivery: DeliverySettings) -> DeliverySettings:
        payload = {
            "delivery": {
                "emailjs_service_id": delivery.emailjs_service_id,
                "emailjs_template_id": delivery.emailjs_template_id,
                "emailjs_public_key": delivery.emailjs_public_key,
                "reply_to": delivery.reply_to,
            }
        }
        with self._lock:
            temp_path = self._file_path.with_suffix(".json.tmp")
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            temp_path.replace(self._file_path)
        return delivery
