from __future__ import annotations

import json
from typing import Any

from openai import OpenAI

from app.application.exceptions import LLMContractError, LLMUpstreamError
from app.application.ports.llm import LLMPort
from app.core.config import settings
from app.domain.entities.booking_request import BookingRequest, BookingStatus
from app.domain.entities.message_draft import MessageDraft
from app.infrastructure.llm.prompts import build_status_message_prompt


class OpenAILLM(LLMPort):
    """
    OpenAI-backed adapter implementing LLMPort.

    Contract guarantees:
    - draft_status_message returns a MessageDraft with non-empty subject and body
    - Raises:
        LLMUpstreamError: networking/provider failures
        LLMContractError: invalid JSON or wrong schema/shape
    """

    def __init__(self) -> None:
        self.client = OpenAI(api_key=settings.OPENAI_API_KEY)

    def draft_status_message(
        self,
        booking: BookingRequest,
        status: BookingStatus,
        context: dict[str, str],
    ) -> MessageDraft:
        prompt = build_status_message_prompt(booking, status, context)
        text = self._call_text(
            model=settings.OPENAI_MODEL_DRAFT,
            prompt=prompt,
            temperature=settings.OPENAI_TEMPERATURE_DRAFT,
        )

        data = _parse_json(text, what="draft")
        if not isinstance(data, dict):
            raise LLMContractError("Draft: expected a JSON object with keys: subject, body.")

        subject = data.get("subject")
        body = data.get("body")
        if not isinstance(subject, str) or not subject.strip():
            raise LLMContractError("Draft: 'subject' must be a non-empty string.")
        if not isinstance(body, str) or not body.strip():
            raise LLMContractError("Draft: 'body' must be a non-empty string.")

        return MessageDraft(subject=subject.strip(), body=body.strip(), generated_by="ai")

    def _call_text(self, model: str, prompt: str, temperature: float) -> str:
        try:
            resp = self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": "Return only valid JSON. Do not include markdown or extra text."},
                    {"role": "user", "content": prompt},
                ],
                temperature=temperature,
                max_tokens=900,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            raise LLMUpstreamError(f"OpenAI API error: {e}") from e

        content = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        if not content:
            raise LLMContractError("LLM returned empty response text.")

        return content


def _parse_json(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except Exception:
        snippet = text[:200].replace("\n", " ")
        raise LLMContractError(f"{what.capitalize()}: invalid JSON. Snippet: {snippet!r}")
