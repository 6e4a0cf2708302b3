from typing import Optional
from uuid import UUID

from sqlmodel import update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.password_reset_audit_repository import IPasswordResetAuditRepository
from src.domain.base import utcnow
from src.domain.entities import PasswordResetAudit, ResetStatus


class PasswordResetAuditRepository(IPasswordResetAuditRepository):
    """PasswordResetAudit repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, audit: PasswordResetAudit) -> PasswordResetAudit:
        """Create a new audit record"""
        self.session.add(audit)
        await self.session.flush()
        await self.session.refresh(audit)
        return audit

    async def complete(
        self, audit_id: UUID, status: ResetStatus, failure_reason: Optional[str] = None
    ) -> bool:
        """Move a pending record to its final status"""
        stmt = (
            update(PasswordResetAudit)
            .where(
                PasswordResetAudit.id == audit_id,
                PasswordResetAudit.status == ResetStatus.pending,
            )
            .values(status=status, failure_reason=failure_reason, completed_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1
