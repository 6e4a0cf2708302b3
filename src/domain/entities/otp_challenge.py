"""
OTPChallenge Entity

One-time numeric code bound to a guardian/student pair.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import text
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import DeliveryChannel


class OTPChallenge(SQLModel, table=True):
    """
    OTPChallenge entity - short-lived one-time code.

    Business Rules:
    - 6-digit numeric code, expires 10 minutes after issue
    - At most one unconsumed challenge per (guardian_id, student_id);
      enforced by a partial unique index besides invalidate-then-insert
    - Consumed or expired rows are kept for audit but never accepted again
    """

    __tablename__ = "otp_challenges"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    guardian_id: UUID = Field(foreign_key="guardians.id", nullable=False, index=True)
    student_id: UUID = Field(foreign_key="students.id", nullable=False, index=True)

    code: str = Field(max_length=6)
    channel: DeliveryChannel = Field(nullable=False)
    consumed: bool = Field(default=False)

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index(
            "uq_otp_active_challenge",
            "guardian_id",
            "student_id",
            unique=True,
            sqlite_where=text("consumed = 0"),
            postgresql_where=text("consumed = false"),
        ),
        Index("idx_otp_expires_at", "expires_at"),
    )
