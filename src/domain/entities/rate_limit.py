"""
RateLimit Entity

Failed-attempt counter with lockout, keyed by (identifier, kind).
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import RateLimitKind


class RateLimit(SQLModel, table=True):
    """
    RateLimit entity - attempt counter for one identifier.

    Business Rules:
    - (identifier, kind) must be unique
    - attempts and locked_until are always reset together
    - locked_until is only set when attempts reached the threshold
    - No decay: attempts reset on explicit reset or after a lock expires
    """

    __tablename__ = "rate_limits"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    identifier: str = Field(max_length=128)
    kind: RateLimitKind = Field(nullable=False)

    attempts: int = Field(default=0)
    locked_until: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_rate_limit_identifier_kind", "identifier", "kind", unique=True),
    )
