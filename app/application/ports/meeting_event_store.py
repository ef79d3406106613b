from abc import ABC, abstractmethod

from app.domain.entities.meeting_event import MeetingEvent


class MeetingEventStorePort(ABC):
    @abstractmethod
    def list_events(self) -> list[MeetingEvent]:
        raise NotImplementedError

    @abstractmethod
    def get_event(self, event_id: int) -> MeetingEvent | None:
        raise NotImplementedError

    @abstractmethod
    def create_event(self, event: MeetingEvent) -> MeetingEvent:
        """Persist a new event. Assigns `id` and `created_at`."""
        raise NotImplementedError

    @abstractmethod
    def update_event(self, event_id: int, event: MeetingEvent) -> MeetingEvent | None:
        raise NotImplementedError

    @abstractmethod
    def delete_event(self, event_id: int) -> bool:
        raise NotImplementedError
