from __future__ import annotations

import logging

from app.application.exceptions import AdminNotAllowedError, InvalidOrExpiredCodeError
from app.application.ports.notifier import NotifierPort
from app.application.ports.session_tokens import SessionTokenPort
from app.application.use_cases.verification import VerificationService
from app.application.utils.message_templates import build_verification_message
from app.domain.entities.message_draft import OutboundMessage
from app.domain.entities.verification_code import admin_subject


class AdminLoginUseCase:
    def __init__(
        self,
        verification: VerificationService,
        notifier: NotifierPort,
        tokens: SessionTokenPort,
        admin_email: str,
        school_name: str,
        code_ttl_minutes: int = 10,
    ) -> None:
        self._verification = verification
        self._notifier = notifier
        self._tokens = tokens
        self._admin_email = admin_email.strip().lower()
        self._school_name = school_name
        self._code_ttl_minutes = code_ttl_minutes
        self._logger = logging.getLogger(__name__)

    def request_code(self, email: str) -> bool:
        """Send a login code to the administrator. Returns whether delivery succeeded."""
        normalized = self._check_admin(email)
        issued = self._verification.issue(admin_subject(normalized), self._code_ttl_minutes)
        subject, body = build_verification_message(issued.code, self._code_ttl_minutes, self._school_name)
        result = self._notifier.send(
            OutboundMessage(to_email=normalized, to_name="", subject=f"{subject} (admin)", body=body)
        )
        if not result.sent:
            self._logger.warning("Admin login code not sent", extra={"reason": result.error})
        return result.sent

    def verify_code(self, email: str, code: str) -> str:
        normalized = self._check_admin(email)
        if not self._verification.check(admin_subject(normalized), code):
            raise InvalidOrExpiredCodeError()
        return self._tokens.issue(normalized)

    def _check_admin(self, email: str) -> str:
        normalized = (email or "").strip().lower()
        if not normalized or normalized != self._admin_email:
            raise AdminNotAllowedError("This email address has no access to the administration panel")
        return normalized
