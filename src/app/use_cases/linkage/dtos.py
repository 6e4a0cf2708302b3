"""
Linkage Use Case DTOs (Data Transfer Objects)

Command and Response classes for guardian/student linkage verification.
"""

from typing import Optional
from pydantic import BaseModel


class VerifyLinkageCommand(BaseModel):
    """
    Verify linkage command - validated intent from the API layer

    Exactly one of enrollment_code / email identifies the student.
    """

    national_id: str
    enrollment_code: Optional[str] = None
    email: Optional[str] = None
    ip_address: str


class GuardianInfo(BaseModel):
    """Guardian public fields (contact data masked)"""

    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    has_email: bool
    has_phone: bool


class StudentInfo(BaseModel):
    """Student public fields"""

    id: str
    name: str
    enrollment_code: str
    directory_email: str


class VerifyLinkageResponse(BaseModel):
    """Response for verify linkage use case"""

    linkage_valid: bool
    guardian: GuardianInfo
    student: StudentInfo
    relation_kind: str
