"""
OTP Use Cases

One-time code lifecycle: issue and validate.
"""

from .issue_otp_use_case import IssueOtpUseCase
from .validate_otp_use_case import ValidateOtpUseCase
from .dtos import IssueOtpResponse, ValidateOtpResponse

__all__ = [
    # Use Cases
    "IssueOtpUseCase",
    "ValidateOtpUseCase",
    # DTOs - Responses
    "IssueOtpResponse",
    "ValidateOtpResponse",
]
