"""
Password Reset Use Cases

Redeems an exchange token for a temporary directory password.
"""

from .execute_password_reset_use_case import ExecutePasswordResetUseCase
from .dtos import ExecuteResetCommand, ExecuteResetResponse, ResetStudentInfo

__all__ = [
    # Use Cases
    "ExecutePasswordResetUseCase",
    # DTOs - Commands
    "ExecuteResetCommand",
    # DTOs - Responses
    "ExecuteResetResponse",
    "ResetStudentInfo",
]
