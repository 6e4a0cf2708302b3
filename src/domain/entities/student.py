"""
Student Entity

Owner of the directory account whose password gets reset.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import StudentStatus


class Student(SQLModel, table=True):
    """
    Student entity - enrolled student with a directory-service account.

    Business Rules:
    - enrollment_code is unique (school registration number)
    - directory_email is unique and identifies the directory account
    - Written only by the bulk importer; read-only to the recovery pipeline
    """

    __tablename__ = "students"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)
    enrollment_code: str = Field(unique=True, index=True, max_length=64)
    directory_email: str = Field(unique=True, index=True, max_length=255)

    status: StudentStatus = Field(default=StudentStatus.active)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_student_status", "status"),)
