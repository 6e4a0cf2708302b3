"""
Verify Linkage Use Case

Checks that a guardian (identified by national identifier) is linked to a
student (identified by enrollment code or directory email).
"""

import logging
from typing import Optional

from libs.result import Error, Result, Return
from src.app.services.rate_limiter import RateLimiter, RateLimitPolicy, too_many_attempts
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Guardian, RateLimitKind, Student
from src.domain.security import (
    hash_identifier,
    mask_email,
    mask_phone,
    sanitize_string,
    validate_national_id,
)
from .dtos import GuardianInfo, StudentInfo, VerifyLinkageCommand, VerifyLinkageResponse

logger = logging.getLogger(__name__)


class VerifyLinkageUseCase:
    """
    Use case for verifying a guardian/student linkage.

    Business Rules:
    - Malformed national identifier fails without touching any counter
    - Identifier hash and caller IP are rate limited independently;
      a lock on either rejects the request
    - Every not-found outcome records a failed attempt on both keys
    - Success neither increments nor resets counters; only a completed
      password reset clears them
    - Contact data is returned masked
    """

    def __init__(self, uow: UnitOfWork, rate_limit_policy: Optional[RateLimitPolicy] = None):
        self.uow = uow
        self.rate_limit_policy = rate_limit_policy or RateLimitPolicy()

    async def _fail(
        self, limiter: RateLimiter, national_id_hash: str, ip_address: str, error: Error
    ) -> Result[VerifyLinkageResponse]:
        """Record the failed attempt on both keys and persist it before failing"""
        await limiter.record_attempt(national_id_hash, RateLimitKind.national_id_hash)
        await limiter.record_attempt(ip_address, RateLimitKind.network_address)
        await self.uow.commit()
        return Return.err(error)

    async def _find_student(self, command: VerifyLinkageCommand) -> Optional[Student]:
        if command.enrollment_code:
            return await self.uow.students.get_by_enrollment_code(
                sanitize_string(command.enrollment_code)
            )
        return await self.uow.students.get_by_directory_email(
            sanitize_string(command.email).lower()
        )

    async def execute(self, command: VerifyLinkageCommand) -> Result[VerifyLinkageResponse]:
        """
        Execute verify linkage use case.

        Args:
            command: VerifyLinkageCommand with identifier, student key and IP

        Returns:
            Result with VerifyLinkageResponse, or Error

        Errors:
            - INVALID_IDENTIFIER: National identifier fails format/checksum
            - INVALID_INPUT: Neither enrollment code nor email supplied
            - TOO_MANY_ATTEMPTS: Identifier or IP currently locked
            - GUARDIAN_NOT_FOUND / STUDENT_NOT_FOUND / LINKAGE_NOT_FOUND
        """
        if not validate_national_id(command.national_id):
            return Return.err(Error("INVALID_IDENTIFIER", "Invalid national identifier"))

        if not command.enrollment_code and not command.email:
            return Return.err(
                Error("INVALID_INPUT", "Provide the student's enrollment code or email")
            )

        national_id_hash = hash_identifier(command.national_id)

        async with self.uow:
            limiter = RateLimiter(self.uow.rate_limits, self.rate_limit_policy)

            identifier_status = await limiter.check(
                national_id_hash, RateLimitKind.national_id_hash
            )
            if identifier_status.locked:
                await self.uow.commit()
                return Return.err(
                    too_many_attempts(identifier_status.locked_until, "national_id")
                )

            address_status = await limiter.check(
                command.ip_address, RateLimitKind.network_address
            )
            if address_status.locked:
                await self.uow.commit()
                return Return.err(
                    too_many_attempts(address_status.locked_until, "network_address")
                )

            guardian = await self.uow.guardians.get_by_national_id_hash(national_id_hash)
            if guardian is None:
                return await self._fail(
                    limiter,
                    national_id_hash,
                    command.ip_address,
                    Error("GUARDIAN_NOT_FOUND", "Guardian not found"),
                )

            student = await self._find_student(command)
            if student is None:
                return await self._fail(
                    limiter,
                    national_id_hash,
                    command.ip_address,
                    Error("STUDENT_NOT_FOUND", "Student not found"),
                )

            linkage = await self.uow.linkages.get_by_guardian_and_student(
                guardian.id, student.id
            )
            if linkage is None:
                logger.info(f"Linkage check failed for student {student.id}")
                return await self._fail(
                    limiter,
                    national_id_hash,
                    command.ip_address,
                    Error(
                        "LINKAGE_NOT_FOUND",
                        "This guardian is not linked to this student",
                    ),
                )

            # Persist any expired-lock cleanup done by the checks above
            await self.uow.commit()

            return Return.ok(
                VerifyLinkageResponse(
                    linkage_valid=True,
                    guardian=self._guardian_info(guardian),
                    student=StudentInfo(
                        id=str(student.id),
                        name=student.name,
                        enrollment_code=student.enrollment_code,
                        directory_email=student.directory_email,
                    ),
                    relation_kind=linkage.kind.value,
                )
            )

    @staticmethod
    def _guardian_info(guardian: Guardian) -> GuardianInfo:
        return GuardianInfo(
            id=str(guardian.id),
            name=guardian.name,
            email=mask_email(guardian.email) if guardian.email else None,
            phone=mask_phone(guardian.phone) if guardian.phone else None,
            has_email=bool(guardian.email),
            has_phone=bool(guardian.phone),
        )
