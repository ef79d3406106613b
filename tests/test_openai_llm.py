"""
Tests for the OpenAI drafting adapter against a stubbed client.
"""

from __future__ import annotations

from datetime import date, time
from types import SimpleNamespace

import pytest

from app.application.exceptions import LLMContractError, LLMUpstreamError
from app.domain.entities.booking_request import BookingRequest, BookingStatus
from app.infrastructure.llm.openai_llm import OpenAILLM
from app.infrastructure.llm.prompts import build_status_message_prompt

BOOKING = BookingRequest(
    event_id=1,
    class_id=1,
    class_name="A",
    date=date(2024, 10, 20),
    time=time(14, 0),
    parent_name="Elif Kaya",
    child_name="Deniz Kaya",
    email="elif@example.com",
    id=7,
)

CONTEXT = {
    "school_name": "Patika Kindergarten",
    "class_name": "A",
    "teacher_names": "Ayse Demir",
    "formatted_date": "20 October 2024",
}


class _Completions:
    def __init__(self, content: str | None = None, error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _llm(completions: _Completions) -> OpenAILLM:
    llm = OpenAILLM.__new__(OpenAILLM)
    llm.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return llm


def test_prompt_carries_booking_facts():
    prompt = build_status_message_prompt(BOOKING, BookingStatus.approved, CONTEXT)

    assert "Elif Kaya" in prompt
    assert "20 October 2024" in prompt
    assert "time: 14:00" in prompt
    assert "APPROVED" in prompt


def test_draft_parsed_from_json():
    completions = _Completions(content='{"subject": " Approved ", "body": "Dear Elif Kaya, ..."}')

    draft = _llm(completions).draft_status_message(BOOKING, BookingStatus.approved, CONTEXT)

    assert draft.subject == "Approved"
    assert draft.body.startswith("Dear Elif Kaya")
    assert draft.generated_by == "ai"
    assert completions.calls[0]["response_format"] == {"type": "json_object"}


@pytest.mark.parametrize(
    "content",
    ["not json", '["subject", "body"]', '{"subject": "", "body": "x"}', '{"subject": "x"}', ""],
)
def test_bad_output_is_contract_error(content):
    with pytest.raises(LLMContractError):
        _llm(_Completions(content=content)).draft_status_message(BOOKING, BookingStatus.rejected, CONTEXT)


def test_provider_failure_is_upstream_error():
    completions = _Completions(error=TimeoutError("timed out"))

    with pytest.raises(LLMUpstreamError):
        _llm(completions).draft_status_message(BOOKING, BookingStatus.approved, CONTEXT)
