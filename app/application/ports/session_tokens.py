from abc import ABC, abstractmethod
from typing import Any


class SessionTokenPort(ABC):
    @abstractmethod
    def issue(self, subject: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def verify(self, token: str) -> dict[str, Any] | None:
        """Decoded claims, or None when the token is invalid or expired."""
        raise NotImplementedError
