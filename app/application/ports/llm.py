from abc import ABC, abstractmethod

from app.domain.entities.booking_request import BookingRequest, BookingStatus
from app.domain.entities.message_draft import MessageDraft


class LLMPort(ABC):
    @abstractmethod
    def draft_status_message(
        self,
        booking: BookingRequest,
        status: BookingStatus,
        context: dict[str, str],
    ) -> MessageDraft:
        """
        Draft the correspondence for a booking's new status.

        Requirements:
        - Return a MessageDraft with a non-empty subject and body
        - `context` carries display values (school_name, class_name,
          teacher_names, formatted_date); the adapter must not invent a
          different date or time than the booking's

        Raises:
            LLMUpstreamError: provider unreachable or failing
            LLMContractError: response missing subject/body or not valid JSON
        """
        raise NotImplementedError
