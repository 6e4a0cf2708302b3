from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.student_repository import IStudentRepository
from src.domain.entities import Student


class StudentRepository(IStudentRepository):
    """Student repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, student_id: UUID) -> Optional[Student]:
        """Get student by ID"""
        stmt = select(Student).where(Student.id == student_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_enrollment_code(self, enrollment_code: str) -> Optional[Student]:
        """Get student by enrollment code"""
        stmt = select(Student).where(Student.enrollment_code == enrollment_code)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_directory_email(self, email: str) -> Optional[Student]:
        """Get student by directory account email (case-insensitive)"""
        stmt = select(Student).where(func.lower(Student.directory_email) == email.lower())
        result = await self.session.exec(stmt)
        return result.one_or_none()
