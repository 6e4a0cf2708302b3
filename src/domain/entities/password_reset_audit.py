"""
PasswordResetAudit Entity

Audit trail of directory password resets.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import ResetStatus


class PasswordResetAudit(SQLModel, table=True):
    """
    PasswordResetAudit entity - one row per reset execution.

    Business Rules:
    - Created as pending before the directory call is made
    - Transitions pending -> success or pending -> failure exactly once
    - Captures originating IP address and user agent
    - The temporary password is never stored here
    """

    __tablename__ = "password_reset_audit"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    student_id: UUID = Field(foreign_key="students.id", index=True)
    guardian_id: UUID = Field(foreign_key="guardians.id", index=True)

    ip_address: str = Field(max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)

    status: ResetStatus = Field(default=ResetStatus.pending)
    failure_reason: Optional[str] = Field(default=None, max_length=1000)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    completed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_reset_audit_status", "status"),
        Index("idx_reset_audit_created_at", "created_at"),
    )
