from abc import ABC, abstractmethod

from src.common.delivery import DeliveryResult


class SmsServiceBase(ABC):
    @property
    @abstractmethod
    def is_configured(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def send_text(self, to: str, body: str) -> DeliveryResult:
        """Send a plain text message to an E.164 number."""
        raise NotImplementedError
