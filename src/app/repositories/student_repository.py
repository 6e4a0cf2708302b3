from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import Student


class IStudentRepository(ABC):
    """Student repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, student_id: UUID) -> Optional[Student]:
        """Get student by ID"""
        pass

    @abstractmethod
    async def get_by_enrollment_code(self, enrollment_code: str) -> Optional[Student]:
        """Get student by enrollment code"""
        pass

    @abstractmethod
    async def get_by_directory_email(self, email: str) -> Optional[Student]:
        """Get student by directory account email"""
        pass
