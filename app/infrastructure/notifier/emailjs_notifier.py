from __future__ import annotations

import logging
from typing import Callable

import httpx

from app.application.ports.notifier import NotifierPort
from app.domain.entities.delivery_settings import DeliverySettings
from app.domain.entities.message_draft import DispatchResult, OutboundMessage


class EmailJSNotifier(NotifierPort):
    """
    Sends mail through the EmailJS REST API.

    Credentials are resolved on every send so that settings saved by the
    administrator take effect without a restart. The template is expected to
    use `to_email`, `to_name`, `subject` and `message` parameters.
    """

    def __init__(
        self,
        credentials: Callable[[], DeliverySettings],
        endpoint: str,
        client: httpx.Client | None = None,
    ) -> None:
        self._credentials = credentials
        self._endpoint = endpoint
        self._client = client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    def send(self, message: OutboundMessage) -> DispatchResult:
        delivery = self._credentials()
        if not delivery.is_complete:
            return DispatchResult(sent=False, error="Email delivery is not configured")

        template_params = {
            "to_email": message.to_email,
            "to_name": message.to_name,
            "subject": message.subject,
            "message": message.body,
        }
        if delivery.reply_to:
            template_params["reply_to"] = delivery.reply_to
        if message.calendar_ics:
            template_params["calendar_ics"] = message.calendar_ics

        payload = {
            "service_id": delivery.emailjs_service_id,
            "template_id": delivery.emailjs_template_id,
            "user_id": delivery.emailjs_public_key,
            "template_params": template_params,
        }
        try:
            resp = self._client.post(self._endpoint, json=payload)
        except httpx.HTTPError as e:
            self._logger.error("EmailJS request failed", extra={"error": str(e)})
            return DispatchResult(sent=False, error=f"Email service unreachable: {e}")

        if resp.status_code != 200:
            self._logger.error(
                "EmailJS send failed",
                extra={"status": resp.status_code, "error": resp.text[:200]},
            )
            return DispatchResult(sent=False, error=f"Email service returned {resp.status_code}: {resp.text[:200]}")

        self._logger.info("Email sent", extra={"subject": message.subject})
        return DispatchResult(sent=True)
