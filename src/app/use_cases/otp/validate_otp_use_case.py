"""
Validate OTP Use Case

Checks a one-time code and, on success, mints a short-lived exchange token
that authorizes exactly one password reset.
"""

import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.exchange_token_store import IExchangeTokenStore
from src.app.services.rate_limiter import RateLimiter, RateLimitPolicy, too_many_attempts
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import ExchangeGrant, RateLimitKind
from src.domain.security import generate_opaque_token
from .dtos import ValidateOtpResponse

logger = logging.getLogger(__name__)

DEFAULT_EXCHANGE_TOKEN_TTL = timedelta(minutes=5)


def otp_pair_key(guardian_id: UUID, student_id: UUID) -> str:
    return f"{guardian_id}:{student_id}"


class ValidateOtpUseCase:
    """
    Use case for validating a one-time code.

    Business Rules:
    - Wrong code and already-used code are reported with the same error
    - Correct code past its expiry is reported as EXPIRED_CODE
    - Consumption is a conditional update; of two concurrent validations
      only one can succeed
    - Wrong codes count against a per-pair rate limit counter, cleared on
      a successful validation
    - Exchange token lives 5 minutes and is stored only in the token store
    """

    def __init__(
        self,
        uow: UnitOfWork,
        token_store: IExchangeTokenStore,
        token_ttl: timedelta = DEFAULT_EXCHANGE_TOKEN_TTL,
        rate_limit_policy: Optional[RateLimitPolicy] = None,
    ):
        self.uow = uow
        self.token_store = token_store
        self.token_ttl = token_ttl
        self.rate_limit_policy = rate_limit_policy or RateLimitPolicy()

    async def execute(
        self, guardian_id: UUID, student_id: UUID, code: str
    ) -> Result[ValidateOtpResponse]:
        """
        Execute validate OTP use case.

        Args:
            guardian_id: Guardian the code was issued to
            student_id: Student the code was issued for
            code: 6-digit code typed by the guardian

        Returns:
            Result with ValidateOtpResponse (exchange token), or Error

        Errors:
            - TOO_MANY_ATTEMPTS: Too many wrong codes for this pair
            - INVALID_OR_USED_CODE: No unconsumed challenge matches
            - EXPIRED_CODE: Challenge matches but has expired
        """
        pair_key = otp_pair_key(guardian_id, student_id)

        async with self.uow:
            limiter = RateLimiter(self.uow.rate_limits, self.rate_limit_policy)

            status = await limiter.check(pair_key, RateLimitKind.otp_challenge)
            if status.locked:
                await self.uow.commit()
                return Return.err(too_many_attempts(status.locked_until, "otp_challenge"))

            challenge = await self.uow.otp_challenges.find_active(guardian_id, student_id, code)
            if challenge is None:
                await limiter.record_attempt(pair_key, RateLimitKind.otp_challenge)
                await self.uow.commit()
                return Return.err(
                    Error("INVALID_OR_USED_CODE", "Invalid or already used code")
                )

            if challenge.expires_at <= utcnow():
                await self.uow.commit()
                return Return.err(Error("EXPIRED_CODE", "Code has expired"))

            consumed = await self.uow.otp_challenges.consume(challenge.id)
            if not consumed:
                logger.info(f"OTP challenge {challenge.id} consumed concurrently")
                return Return.err(
                    Error("INVALID_OR_USED_CODE", "Invalid or already used code")
                )

            await limiter.reset(pair_key, RateLimitKind.otp_challenge)
            await self.uow.commit()

        grant = ExchangeGrant(
            token=generate_opaque_token(),
            guardian_id=guardian_id,
            student_id=student_id,
            expires_at=utcnow() + self.token_ttl,
        )
        await self.token_store.put(grant)

        return Return.ok(
            ValidateOtpResponse(valid=True, token=grant.token, expires_at=grant.expires_at)
        )
