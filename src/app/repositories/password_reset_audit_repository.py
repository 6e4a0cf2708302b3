from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import PasswordResetAudit, ResetStatus


class IPasswordResetAuditRepository(ABC):
    """PasswordResetAudit repository interface - application layer"""

    @abstractmethod
    async def create(self, audit: PasswordResetAudit) -> PasswordResetAudit:
        """Create a new audit record"""
        pass

    @abstractmethod
    async def complete(
        self, audit_id: UUID, status: ResetStatus, failure_reason: Optional[str] = None
    ) -> bool:
        """
        Move a pending record to success or failure.

        Returns:
            False if the record was not pending (already completed)
        """
        pass
