from dataclasses import dataclass


@dataclass(frozen=True)
class MessageDraft:
    subject: str
    body: str
    generated_by: str = "template"  # "template" | "ai"


@dataclass(frozen=True)
class OutboundMessage:
    to_email: str
    to_name: str
    subject: str
    body: str
    calendar_ics: str | None = None


@dataclass(frozen=True)
class DispatchResult:
    sent: bool
    error: str | None = None
