from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from src.domain.entities import RateLimit, RateLimitKind


class IRateLimitRepository(ABC):
    """RateLimit repository interface - application layer"""

    @abstractmethod
    async def get(self, identifier: str, kind: RateLimitKind) -> Optional[RateLimit]:
        """Get counter for identifier/kind"""
        pass

    @abstractmethod
    async def increment(
        self,
        identifier: str,
        kind: RateLimitKind,
        now: datetime,
        max_attempts: int,
        lock_until: datetime,
    ) -> RateLimit:
        """
        Atomically add one attempt unless the counter is currently locked.

        Creates the counter when missing. When the new count reaches
        max_attempts, locked_until is set to lock_until in the same update.

        Returns:
            Counter state after the update
        """
        pass

    @abstractmethod
    async def clear_expired_lock(
        self, identifier: str, kind: RateLimitKind, now: datetime
    ) -> bool:
        """Zero the counter if its lock has expired. Returns True if cleared."""
        pass

    @abstractmethod
    async def reset(self, identifier: str, kind: RateLimitKind) -> None:
        """Zero attempts and clear any lock"""
        pass
