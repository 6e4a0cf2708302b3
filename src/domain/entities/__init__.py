"""
Password Recovery Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    StudentStatus,
    RelationKind,
    DeliveryChannel,
    RateLimitKind,
    ResetStatus,
)

# Export all entities
from .guardian import Guardian
from .student import Student
from .linkage import Linkage
from .otp_challenge import OTPChallenge
from .rate_limit import RateLimit
from .password_reset_audit import PasswordResetAudit
from .exchange_token import ExchangeGrant

__all__ = [
    # Enums
    "StudentStatus",
    "RelationKind",
    "DeliveryChannel",
    "RateLimitKind",
    "ResetStatus",
    # Entities
    "Guardian",
    "Student",
    "Linkage",
    "OTPChallenge",
    "RateLimit",
    "PasswordResetAudit",
    # Value objects
    "ExchangeGrant",
]
