from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


def booking_subject(booking_id: int) -> str:
    return f"booking:{booking_id}"


def admin_subject(email: str) -> str:
    return f"admin:{email.strip().lower()}"


@dataclass(frozen=True)
class VerificationCode:
    subject: str
    code: str
    expires_at: datetime
    created_at: datetime
    used_at: datetime | None = None
    id: int | None = None

    def is_usable(self, now: datetime) -> bool:
        return self.used_at is None and now < self.expires_at
