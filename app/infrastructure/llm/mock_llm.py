from __future__ import annotations

from dataclasses import replace

from app.application.ports.llm import LLMPort
from app.application.utils.message_templates import build_status_message
from app.domain.entities.booking_request import BookingRequest, BookingStatus
from app.domain.entities.message_draft import MessageDraft


class MockLLM(LLMPort):
    def draft_status_message(
        self,
        booking: BookingRequest,
        status: BookingStatus,
        context: dict[str, str],
    ) -> MessageDraft:
        draft = build_status_message(booking, status, context)
        return replace(draft, generated_by="ai")
