from dataclasses import dataclass


@dataclass(frozen=True)
class DeliverySettings:
    emailjs_service_id: str | None = None
    emailjs_template_id: str | None = None
    emailjs_public_key: str | None = None
    reply_to: str | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.emailjs_service_id and self.emailjs_template_id and self.emailjs_public_key)
