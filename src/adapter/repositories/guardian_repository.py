from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.guardian_repository import IGuardianRepository
from src.domain.entities import Guardian


class GuardianRepository(IGuardianRepository):
    """Guardian repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, guardian_id: UUID) -> Optional[Guardian]:
        """Get guardian by ID"""
        stmt = select(Guardian).where(Guardian.id == guardian_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_national_id_hash(self, national_id_hash: str) -> Optional[Guardian]:
        """Get guardian by SHA-256 hash of the national identifier"""
        stmt = select(Guardian).where(Guardian.national_id_hash == national_id_hash)
        result = await self.session.exec(stmt)
        return result.one_or_none()
