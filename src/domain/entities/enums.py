"""
Password Recovery Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class StudentStatus(str, Enum):
    """Student enrollment status"""

    active = "active"
    inactive = "inactive"


class RelationKind(str, Enum):
    """Kind of responsibility a guardian holds for a student"""

    financial = "financial"
    pedagogical = "pedagogical"
    both = "both"


class DeliveryChannel(str, Enum):
    """Channel used to deliver a one-time code"""

    email = "email"
    sms = "sms"


class RateLimitKind(str, Enum):
    """Kind of identifier a rate limit counter is keyed by"""

    national_id_hash = "national_id_hash"
    network_address = "network_address"
    otp_challenge = "otp_challenge"


class ResetStatus(str, Enum):
    """Password reset audit status"""

    pending = "pending"
    success = "success"
    failure = "failure"
