"""
OTP Use Case DTOs (Data Transfer Objects)

Response classes for one-time code issuance and validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class IssueOtpResponse(BaseModel):
    """Response for issue OTP use case"""

    status: str
    channel: str
    destination: str  # Masked email or phone
    expires_at: datetime
    delivered: bool
    debug_code: Optional[str] = None  # Only when OTP_DEBUG_ECHO is enabled


class ValidateOtpResponse(BaseModel):
    """Response for validate OTP use case"""

    valid: bool
    token: str
    expires_at: datetime
