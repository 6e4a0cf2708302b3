from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import Guardian


class IGuardianRepository(ABC):
    """Guardian repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, guardian_id: UUID) -> Optional[Guardian]:
        """Get guardian by ID"""
        pass

    @abstractmethod
    async def get_by_national_id_hash(self, national_id_hash: str) -> Optional[Guardian]:
        """Get guardian by SHA-256 hash of the national identifier"""
        pass
