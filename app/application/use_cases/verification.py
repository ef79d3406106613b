from __future__ import annotations

import hmac
import logging
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Callable

from app.application.ports.verification_store import VerificationCodeStorePort
from app.domain.entities.verification_code import VerificationCode


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_code(length: int = 6) -> str:
    """Uniformly random numeric code; leading zeros are allowed."""
    return "".join(secrets.choice(string.digits) for _ in range(length))


class VerificationService:
    """
    Issues and checks short-lived numeric codes bound to a subject.

    Subjects are opaque strings (see `booking_subject` / `admin_subject`).
    Issuing a new code does not invalidate earlier ones; each stays valid
    until its own expiry or until consumed.
    """

    def __init__(
        self,
        store: VerificationCodeStorePort,
        clock: Callable[[], datetime] = utcnow,
        code_length: int = 6,
    ) -> None:
        self._store = store
        self._clock = clock
        self._code_length = code_length
        self._logger = logging.getLogger(__name__)

    def issue(self, subject: str, ttl_minutes: int) -> VerificationCode:
        now = self._clock()
        code = self._store.add_code(
            VerificationCode(
                subject=subject,
                code=generate_code(self._code_length),
                expires_at=now + timedelta(minutes=ttl_minutes),
                created_at=now,
            )
        )
        self._logger.info("Verification code issued", extra={"subject": subject})
        return code

    def check(self, subject: str, code: str) -> bool:
        """Consume a matching, unused, unexpired code. True exactly once per code."""
        supplied = (code or "").strip()
        # compare_digest only accepts ASCII str
        if not supplied or not supplied.isascii():
            return False

        now = self._clock()
        for candidate in self._store.list_codes(subject):
            if not candidate.is_usable(now):
                continue
            if not hmac.compare_digest(candidate.code, supplied):
                continue
            if candidate.id is not None and self._store.consume(candidate.id, now):
                return True

        self._logger.info("Verification code rejected", extra={"subject": subject})
        return False
