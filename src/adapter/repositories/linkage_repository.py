from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.linkage_repository import ILinkageRepository
from src.domain.entities import Linkage


class LinkageRepository(ILinkageRepository):
    """Linkage repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_guardian_and_student(
        self, guardian_id: UUID, student_id: UUID
    ) -> Optional[Linkage]:
        """Get the linkage between a guardian and a student"""
        stmt = select(Linkage).where(
            Linkage.guardian_id == guardian_id, Linkage.student_id == student_id
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()
