import logging

from src.app.services.notifier import INotifier
from src.domain.entities import DeliveryChannel
from src.domain.security import mask_email, mask_phone

logger = logging.getLogger(__name__)


class LoggingNotifier(INotifier):
    """
    Notifier stub - records the dispatch instead of sending email/SMS.

    The code itself is only written at DEBUG level so it never reaches
    production logs.
    """

    async def send(self, channel: DeliveryChannel, address: str, code: str) -> bool:
        masked = mask_email(address) if channel == DeliveryChannel.email else mask_phone(address)
        logger.info(f"OTP dispatched via {channel.value} to {masked}")
        logger.debug(f"OTP for {masked}: {code}")
        return True
