from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from app.application.ports.session_tokens import SessionTokenPort


class JoseSessionTokens(SessionTokenPort):
    def __init__(self, secret: str, algorithm: str = "HS256", lifetime_hours: int = 24) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._lifetime = timedelta(hours=lifetime_hours)
        self._logger = logging.getLogger(__name__)

    def issue(self, subject: str) -> str:
        now = datetime.now(timezone.utc)
        claims = {"sub": subject, "role": "admin", "iat": now, "exp": now + self._lifetime}
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> dict[str, Any] | None:
        try:
            return jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as e:
            self._logger.warning("Session token rejected", extra={"reason": str(e)})
            return None
