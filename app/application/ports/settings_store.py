from abc import ABC, abstractmethod

from app.domain.entities.delivery_settings import DeliverySettings


class SettingsStorePort(ABC):
    @abstractmethod
    def get_delivery_settings(self) -> DeliverySettings | None:
        raise NotImplementedError

    @abstractmethod
    def save_delivery_settings(self, delivery: DeliverySettings) -> DeliverySettings:
        raise NotImplementedError
