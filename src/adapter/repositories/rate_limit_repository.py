from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import case, or_
from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.rate_limit_repository import IRateLimitRepository
from src.domain.entities import RateLimit, RateLimitKind

# Dialects with INSERT ... ON CONFLICT DO NOTHING support
UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class RateLimitRepository(IRateLimitRepository):
    """RateLimit repository implementation using SQLModel

    Counter updates are single UPDATE statements so concurrent failures
    are all counted and cannot both slip under the threshold.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, identifier: str, kind: RateLimitKind) -> Optional[RateLimit]:
        """Get counter for identifier/kind"""
        stmt = (
            select(RateLimit)
            .where(RateLimit.identifier == identifier, RateLimit.kind == kind)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def _ensure_exists(self, identifier: str, kind: RateLimitKind, now: datetime) -> None:
        """INSERT ... ON CONFLICT DO NOTHING on the (identifier, kind) unique index"""
        dialect = self.session.bind.dialect.name
        insert = UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise NotImplementedError(
                f"Rate limit counters are not supported on the {dialect} dialect"
            )
        stmt = (
            insert(RateLimit)
            .values(
                id=uuid4(),
                identifier=identifier,
                kind=kind,
                attempts=0,
                locked_until=None,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=["identifier", "kind"])
        )
        await self.session.execute(stmt)

    async def increment(
        self,
        identifier: str,
        kind: RateLimitKind,
        now: datetime,
        max_attempts: int,
        lock_until: datetime,
    ) -> RateLimit:
        """Add one attempt unless locked; lock when the threshold is reached"""
        await self._ensure_exists(identifier, kind, now)

        new_attempts = RateLimit.attempts + 1
        stmt = (
            update(RateLimit)
            .where(
                RateLimit.identifier == identifier,
                RateLimit.kind == kind,
                or_(RateLimit.locked_until.is_(None), RateLimit.locked_until <= now),
            )
            .values(
                attempts=new_attempts,
                locked_until=case((new_attempts >= max_attempts, lock_until), else_=None),
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()

        return await self.get(identifier, kind)

    async def clear_expired_lock(
        self, identifier: str, kind: RateLimitKind, now: datetime
    ) -> bool:
        """Zero the counter if its lock has expired"""
        stmt = (
            update(RateLimit)
            .where(
                RateLimit.identifier == identifier,
                RateLimit.kind == kind,
                RateLimit.locked_until.is_not(None),
                RateLimit.locked_until <= now,
            )
            .values(attempts=0, locked_until=None, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def reset(self, identifier: str, kind: RateLimitKind) -> None:
        """Zero attempts and clear any lock"""
        stmt = (
            update(RateLimit)
            .where(RateLimit.identifier == identifier, RateLimit.kind == kind)
            .values(attempts=0, locked_until=None)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()
