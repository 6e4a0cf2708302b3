"""
Linkage Use Cases

Guardian/student relationship verification.
"""

from .verify_linkage_use_case import VerifyLinkageUseCase
from .dtos import (
    VerifyLinkageCommand,
    VerifyLinkageResponse,
    GuardianInfo,
    StudentInfo,
)

__all__ = [
    # Use Cases
    "VerifyLinkageUseCase",
    # DTOs - Commands
    "VerifyLinkageCommand",
    # DTOs - Responses
    "VerifyLinkageResponse",
    # DTOs - Nested Models
    "GuardianInfo",
    "StudentInfo",
]
