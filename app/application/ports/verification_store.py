from abc import ABC, abstractmethod
from datetime import datetime

from app.domain.entities.verification_code import VerificationCode


class VerificationCodeStorePort(ABC):
    @abstractmethod
    def add_code(self, code: VerificationCode) -> VerificationCode:
        raise NotImplementedError

    @abstractmethod
    def list_codes(self, subject: str) -> list[VerificationCode]:
        """All codes for a subject, newest first, consumed or not."""
        raise NotImplementedError

    @abstractmethod
    def consume(self, code_id: int, used_at: datetime) -> bool:
        """
        Flip a code from unused to used.

        The update is conditioned on the code still being unused: of two
        concurrent callers exactly one gets True.
        """
        raise NotImplementedError
