from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import OTPChallenge


class ActiveChallengeConflictError(Exception):
    """Raised when another unconsumed challenge already exists for the pair"""


class IOTPChallengeRepository(ABC):
    """OTPChallenge repository interface - application layer"""

    @abstractmethod
    async def create(self, challenge: OTPChallenge) -> OTPChallenge:
        """Create a new challenge.

        Raises:
            ActiveChallengeConflictError: pair already has an unconsumed challenge
        """
        pass

    @abstractmethod
    async def invalidate_active(self, guardian_id: UUID, student_id: UUID) -> int:
        """Mark every unconsumed challenge for the pair as consumed.

        Returns:
            Number of challenges invalidated
        """
        pass

    @abstractmethod
    async def find_active(
        self, guardian_id: UUID, student_id: UUID, code: str
    ) -> Optional[OTPChallenge]:
        """Find the unconsumed challenge matching pair and code (expired included)"""
        pass

    @abstractmethod
    async def consume(self, challenge_id: UUID) -> bool:
        """Atomically mark a challenge consumed.

        Returns:
            True only for the caller that flipped the flag
        """
        pass
