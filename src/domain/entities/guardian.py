"""
Guardian Entity

Adult party who may request a password reset on a student's behalf.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utcnow


class Guardian(SQLModel, table=True):
    """
    Guardian entity - identity record imported from the school feed.

    Business Rules:
    - National identifier is stored only as a SHA-256 hash, never plaintext
    - national_id_hash is unique across all guardians
    - email / phone are optional; each enables one OTP delivery channel
    - Written only by the bulk importer; read-only to the recovery pipeline
    """

    __tablename__ = "guardians"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)
    national_id_hash: str = Field(unique=True, index=True, max_length=64)  # SHA-256 hex

    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=32)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
