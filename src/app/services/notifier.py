from abc import ABC, abstractmethod

from src.domain.entities import DeliveryChannel


class INotifier(ABC):
    """One-time code delivery interface - application layer"""

    @abstractmethod
    async def send(self, channel: DeliveryChannel, address: str, code: str) -> bool:
        """Deliver a code. Returns True when the channel accepted it."""
        pass
