"""
Password Reset Use Case DTOs (Data Transfer Objects)

Command and Response classes for the directory password reset.
"""

from typing import Optional
from pydantic import BaseModel


# ============================================================================
# Command DTOs
# ============================================================================


class ExecuteResetCommand(BaseModel):
    """Command for execute password reset use case"""

    token: str
    ip_address: str
    user_agent: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class ResetStudentInfo(BaseModel):
    """Student fields shown alongside the temporary password"""

    name: str
    email: str


class ExecuteResetResponse(BaseModel):
    """Response for execute password reset use case.

    The temporary password is returned here once and never stored.
    """

    status: str
    message: str
    temporary_password: str
    student: ResetStudentInfo
