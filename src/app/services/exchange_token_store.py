from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities import ExchangeGrant


class IExchangeTokenStore(ABC):
    """Exchange token store interface - application layer

    Holds grants minted by OTP validation until the password reset
    consumes them. Implementations must make take() an atomic
    remove-and-return so a token can be redeemed at most once.
    """

    @abstractmethod
    async def put(self, grant: ExchangeGrant) -> None:
        """Store a grant until its expires_at"""
        pass

    @abstractmethod
    async def take(self, token: str) -> Optional[ExchangeGrant]:
        """Remove and return the grant; None if unknown or expired"""
        pass

    @abstractmethod
    async def sweep(self) -> int:
        """Drop expired grants. Returns the number removed."""
        pass
