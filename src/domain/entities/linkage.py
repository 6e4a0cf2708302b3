"""
Linkage Entity

Authorized relationship between a guardian and a student.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import RelationKind


class Linkage(SQLModel, table=True):
    """
    Linkage entity - links Guardian to Student with a relation kind.

    Business Rules:
    - (guardian_id, student_id) must be unique
    - Existence of a linkage is what authorizes a reset request
    """

    __tablename__ = "linkages"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    guardian_id: UUID = Field(foreign_key="guardians.id", nullable=False, index=True)
    student_id: UUID = Field(foreign_key="students.id", nullable=False, index=True)

    kind: RelationKind = Field(nullable=False)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_linkage_guardian_student", "guardian_id", "student_id", unique=True),
    )
