from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.otp_challenge_repository import (
    ActiveChallengeConflictError,
    IOTPChallengeRepository,
)
from src.domain.entities import OTPChallenge


class OTPChallengeRepository(IOTPChallengeRepository):
    """OTPChallenge repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, challenge: OTPChallenge) -> OTPChallenge:
        """Create a new challenge"""
        self.session.add(challenge)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ActiveChallengeConflictError(str(challenge.student_id)) from exc
        await self.session.refresh(challenge)
        return challenge

    async def invalidate_active(self, guardian_id: UUID, student_id: UUID) -> int:
        """Mark every unconsumed challenge for the pair as consumed"""
        stmt = (
            update(OTPChallenge)
            .where(
                OTPChallenge.guardian_id == guardian_id,
                OTPChallenge.student_id == student_id,
                OTPChallenge.consumed == False,
            )
            .values(consumed=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def find_active(
        self, guardian_id: UUID, student_id: UUID, code: str
    ) -> Optional[OTPChallenge]:
        """Find the unconsumed challenge matching pair and code"""
        stmt = (
            select(OTPChallenge)
            .where(
                OTPChallenge.guardian_id == guardian_id,
                OTPChallenge.student_id == student_id,
                OTPChallenge.code == code,
                OTPChallenge.consumed == False,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def consume(self, challenge_id: UUID) -> bool:
        """Flip consumed from false to true; only one caller can win"""
        stmt = (
            update(OTPChallenge)
            .where(OTPChallenge.id == challenge_id, OTPChallenge.consumed == False)
            .values(consumed=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1
