"""
ExchangeGrant Value Object

Proof that an OTP was validated. Held only in the exchange token store,
never persisted to the relational database.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from src.domain.base import utcnow


class ExchangeGrant(BaseModel):
    """
    Single-use grant bound to a guardian/student pair.

    Business Rules:
    - Token carries at least 32 bytes of entropy (URL-safe text)
    - Expires 5 minutes after the OTP was validated
    - Consumed exclusively by the password reset orchestrator
    """

    token: str
    guardian_id: UUID
    student_id: UUID
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at <= (now or utcnow())
