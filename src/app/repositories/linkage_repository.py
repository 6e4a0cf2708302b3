from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import Linkage


class ILinkageRepository(ABC):
    """Linkage repository interface - application layer"""

    @abstractmethod
    async def get_by_guardian_and_student(
        self, guardian_id: UUID, student_id: UUID
    ) -> Optional[Linkage]:
        """Get the linkage between a guardian and a student"""
        pass
