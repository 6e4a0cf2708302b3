"""
Issue OTP Use Case

Generates a one-time code for a guardian/student pair and hands it to the
notifier for delivery.
"""

import logging
from datetime import timedelta
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.repositories.otp_challenge_repository import ActiveChallengeConflictError
from src.app.services.notifier import INotifier
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import DeliveryChannel, OTPChallenge
from src.domain.security import generate_otp, mask_email, mask_phone
from .dtos import IssueOtpResponse

logger = logging.getLogger(__name__)

DEFAULT_OTP_TTL = timedelta(minutes=10)


class IssueOtpUseCase:
    """
    Use case for issuing a one-time code.

    Business Rules:
    - Guardian and student must exist
    - Guardian needs an address for the chosen channel (email or phone)
    - Prior unconsumed challenges for the pair are invalidated in the same
      transaction that inserts the new one
    - Code expires 10 minutes after issue
    - The challenge is committed before the notifier is called
    """

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: INotifier,
        ttl: timedelta = DEFAULT_OTP_TTL,
        debug_echo: bool = False,
    ):
        self.uow = uow
        self.notifier = notifier
        self.ttl = ttl
        self.debug_echo = debug_echo

    async def execute(
        self, guardian_id: UUID, student_id: UUID, channel: DeliveryChannel
    ) -> Result[IssueOtpResponse]:
        """
        Execute issue OTP use case.

        Args:
            guardian_id: Guardian requesting the reset
            student_id: Student whose password will be reset
            channel: Delivery channel (email or sms)

        Returns:
            Result with IssueOtpResponse, or Error

        Errors:
            - GUARDIAN_NOT_FOUND / STUDENT_NOT_FOUND
            - MISSING_CONTACT: Guardian has no address for the channel
            - CHALLENGE_CONFLICT: A concurrent issue for the same pair won
        """
        async with self.uow:
            guardian = await self.uow.guardians.get_by_id(guardian_id)
            if guardian is None:
                return Return.err(Error("GUARDIAN_NOT_FOUND", "Guardian not found"))

            student = await self.uow.students.get_by_id(student_id)
            if student is None:
                return Return.err(Error("STUDENT_NOT_FOUND", "Student not found"))

            if channel == DeliveryChannel.email:
                address = guardian.email
                destination = mask_email(address) if address else ""
            else:
                address = guardian.phone
                destination = mask_phone(address) if address else ""

            if not address:
                return Return.err(
                    Error(
                        "MISSING_CONTACT",
                        f"Guardian has no {channel.value} contact registered",
                    )
                )

            code = generate_otp()
            challenge = OTPChallenge(
                guardian_id=guardian.id,
                student_id=student.id,
                code=code,
                channel=channel,
                consumed=False,
                expires_at=utcnow() + self.ttl,
            )

            try:
                invalidated = await self.uow.otp_challenges.invalidate_active(
                    guardian.id, student.id
                )
                await self.uow.otp_challenges.create(challenge)
                await self.uow.commit()
            except ActiveChallengeConflictError:
                await self.uow.rollback()
                logger.warning(f"Concurrent OTP issue for student {student_id} lost the race")
                return Return.err(
                    Error(
                        "CHALLENGE_CONFLICT",
                        "Another code is being issued for this student. Try again.",
                    )
                )

            if invalidated:
                logger.info(f"Invalidated {invalidated} previous OTP challenge(s)")

        delivered = await self.notifier.send(channel, address, code)
        if not delivered:
            logger.warning(f"OTP notifier did not accept {channel.value} delivery")

        return Return.ok(
            IssueOtpResponse(
                status="sent",
                channel=channel.value,
                destination=destination,
                expires_at=challenge.expires_at,
                delivered=delivered,
                debug_code=code if self.debug_echo else None,
            )
        )
