from abc import ABC, abstractmethod

from app.domain.entities.message_draft import DispatchResult, OutboundMessage


class NotifierPort(ABC):
    @abstractmethod
    def send(self, message: OutboundMessage) -> DispatchResult:
        """
        Deliver a message.

        Must not raise for delivery problems: failures are reported through
        DispatchResult(sent=False, error=...).
        """
        raise NotImplementedError
