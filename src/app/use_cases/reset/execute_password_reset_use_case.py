"""
Execute Password Reset Use Case

Consumes an exchange token, sets a temporary password on the student's
directory account and records the outcome in the reset audit trail.
"""

import asyncio
import logging
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.directory_service import (
    DirectoryResult,
    DirectoryStatus,
    IDirectoryService,
)
from src.app.services.exchange_token_store import IExchangeTokenStore
from src.app.services.rate_limiter import RateLimiter, RateLimitPolicy
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.otp.validate_otp_use_case import otp_pair_key
from src.domain.entities import (
    ExchangeGrant,
    Guardian,
    PasswordResetAudit,
    RateLimitKind,
    ResetStatus,
    Student,
)
from src.domain.security import generate_temporary_secret
from .dtos import ExecuteResetCommand, ExecuteResetResponse, ResetStudentInfo

logger = logging.getLogger(__name__)


class ExecutePasswordResetUseCase:
    """
    Use case for executing a directory password reset.

    Business Rules:
    - Exchange token is taken atomically; a second redemption fails
    - A pending audit record is committed before the directory call
    - Once the directory call starts, it and the audit outcome run to
      completion even if the request is cancelled
    - Directory failure marks the audit failure; no retry, and the token
      stays consumed
    - An exception from the directory call is recorded as a failure too
    - Success marks the audit success and clears rate limit counters for
      the identifier hash, the caller IP and the guardian/student pair
    - The temporary password is returned once and never persisted or logged
    """

    def __init__(
        self,
        uow: UnitOfWork,
        token_store: IExchangeTokenStore,
        directory: IDirectoryService,
        rate_limit_policy: Optional[RateLimitPolicy] = None,
    ):
        self.uow = uow
        self.token_store = token_store
        self.directory = directory
        self.rate_limit_policy = rate_limit_policy or RateLimitPolicy()

    async def execute(self, command: ExecuteResetCommand) -> Result[ExecuteResetResponse]:
        """
        Execute password reset use case.

        Args:
            command: ExecuteResetCommand with exchange token, IP and user agent

        Returns:
            Result with ExecuteResetResponse (temporary password), or Error

        Errors:
            - INVALID_OR_EXPIRED_TOKEN: Token unknown, expired or already used
            - STUDENT_NOT_FOUND / GUARDIAN_NOT_FOUND
            - DIRECTORY_RESET_FAILED: Directory rejected the update (reason in details)
        """
        grant = await self.token_store.take(command.token)
        if grant is None:
            return Return.err(
                Error("INVALID_OR_EXPIRED_TOKEN", "Invalid or expired reset token")
            )

        async with self.uow:
            student = await self.uow.students.get_by_id(grant.student_id)
            if student is None:
                return Return.err(Error("STUDENT_NOT_FOUND", "Student not found"))

            guardian = await self.uow.guardians.get_by_id(grant.guardian_id)
            if guardian is None:
                return Return.err(Error("GUARDIAN_NOT_FOUND", "Guardian not found"))

            audit = await self.uow.reset_audits.create(
                PasswordResetAudit(
                    student_id=student.id,
                    guardian_id=guardian.id,
                    ip_address=command.ip_address,
                    user_agent=command.user_agent,
                    status=ResetStatus.pending,
                )
            )
            await self.uow.commit()
            audit_id = audit.id

            task = asyncio.ensure_future(
                self._apply_reset(audit_id, grant, guardian, student, command.ip_address)
            )
            try:
                return await asyncio.shield(task)
            except asyncio.CancelledError:
                # Finish the directory call and audit update before the session closes
                logger.warning(f"Password reset {audit_id} cancelled by caller; completing")
                await task
                raise

    async def _apply_reset(
        self,
        audit_id: UUID,
        grant: ExchangeGrant,
        guardian: Guardian,
        student: Student,
        ip_address: str,
    ) -> Result[ExecuteResetResponse]:
        temporary_password = generate_temporary_secret()
        try:
            outcome = await self.directory.set_password(
                student.directory_email, temporary_password, force_change_at_next_login=True
            )
        except Exception:
            logger.exception(f"Password reset {audit_id}: directory call raised")
            outcome = DirectoryResult(
                status=DirectoryStatus.error, reason="unexpected directory service error"
            )

        if not outcome.succeeded:
            await self.uow.reset_audits.complete(audit_id, ResetStatus.failure, outcome.reason)
            await self.uow.commit()
            logger.error(
                f"Password reset {audit_id} failed for student {student.id}: "
                f"{outcome.status.value} ({outcome.reason})"
            )
            return Return.err(
                Error(
                    "DIRECTORY_RESET_FAILED",
                    "The directory service could not reset the password",
                    {"reason": outcome.reason},
                )
            )

        await self.uow.reset_audits.complete(audit_id, ResetStatus.success)

        limiter = RateLimiter(self.uow.rate_limits, self.rate_limit_policy)
        await limiter.reset(guardian.national_id_hash, RateLimitKind.national_id_hash)
        await limiter.reset(ip_address, RateLimitKind.network_address)
        await limiter.reset(
            otp_pair_key(grant.guardian_id, grant.student_id), RateLimitKind.otp_challenge
        )
        await self.uow.commit()

        logger.info(f"Password reset {audit_id} succeeded for student {student.id}")

        return Return.ok(
            ExecuteResetResponse(
                status="success",
                message="Password reset. The student must choose a new password at next sign-in.",
                temporary_password=temporary_password,
                student=ResetStudentInfo(name=student.name, email=student.directory_email),
            )
        )
