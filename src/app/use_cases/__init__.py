"""
Use Cases

Organized by pipeline stage:
- linkage/: Guardian/student linkage verification
- otp/: One-time code issue and validation
- reset/: Directory password reset
"""

from .linkage import VerifyLinkageUseCase, VerifyLinkageCommand, VerifyLinkageResponse
from .otp import IssueOtpUseCase, ValidateOtpUseCase
from .reset import ExecutePasswordResetUseCase, ExecuteResetCommand

__all__ = [
    # Linkage
    "VerifyLinkageUseCase",
    "VerifyLinkageCommand",
    "VerifyLinkageResponse",
    # OTP
    "IssueOtpUseCase",
    "ValidateOtpUseCase",
    # Reset
    "ExecutePasswordResetUseCase",
    "ExecuteResetCommand",
]
