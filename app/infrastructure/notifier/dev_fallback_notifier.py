from __future__ import annotations

import logging
from typing import Callable

from app.application.ports.notifier import NotifierPort
from app.domain.entities.delivery_settings import DeliverySettings
from app.domain.entities.message_draft import DispatchResult, OutboundMessage


class DevFallbackNotifier(NotifierPort):
    """
    Local development notifier.

    Credentials are checked on every send: once the environment or the
    administrator provides a complete EmailJS configuration, mail goes out
    through `primary`; until then it is only recorded by `fallback`.
    """

    def __init__(
        self,
        primary: NotifierPort,
        fallback: NotifierPort,
        credentials: Callable[[], DeliverySettings],
    ) -> None:
        self._primary = primary
        self._fallback = fallback
        self._credentials = credentials
        self._logger = logging.getLogger(__name__)

    def send(self, message: OutboundMessage) -> DispatchResult:
        if self._credentials().is_complete:
            return self._primary.send(message)
        self._logger.info("Email delivery not configured, message kept locally", extra={"subject": message.subject})
        return self._fallback.send(message)
