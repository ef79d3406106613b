from __future__ import annotations

import logging

from app.application.ports.notifier import NotifierPort
from app.domain.entities.message_draft import DispatchResult, OutboundMessage


class MockNotifier(NotifierPort):
    def __init__(self, fail_with: str | None = None) -> None:
        self.sent: list[OutboundMessage] = []
        self._fail_with = fail_with
        self._logger = logging.getLogger(__name__)

    def send(self, message: OutboundMessage) -> DispatchResult:
        if self._fail_with:
            return DispatchResult(sent=False, error=self._fail_with)
        self.sent.append(message)
        self._logger.info("Mock email", extra={"subject": message.subject})
        return DispatchResult(sent=True)
