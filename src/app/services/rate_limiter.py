"""
Rate Limiter

Failed-attempt counter with lockout, keyed by (identifier, kind).

This is an at-least-N-attempts-before-lock counter, not a true sliding
window: attempts never decay on their own. They are cleared by an explicit
reset (after a completed password reset) or when a check observes that a
previous lock has expired.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel

from libs.result import Error
from src.app.repositories.rate_limit_repository import IRateLimitRepository
from src.domain.base import utcnow
from src.domain.entities import RateLimitKind

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_LOCKOUT = timedelta(minutes=60)


class RateLimitPolicy(BaseModel):
    """Threshold and lockout duration shared by every counter kind"""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    lockout: timedelta = DEFAULT_LOCKOUT


class RateLimitStatus(BaseModel):
    """Result of a lock check"""

    locked: bool
    locked_until: Optional[datetime] = None
    attempts: int = 0


class AttemptOutcome(BaseModel):
    """Result of recording a failed attempt"""

    allowed: bool
    locked_until: Optional[datetime] = None
    attempts: int = 0


def too_many_attempts(locked_until: Optional[datetime], scope: str) -> Error:
    """TOO_MANY_ATTEMPTS error carrying the lock expiry"""
    return Error(
        "TOO_MANY_ATTEMPTS",
        "Too many attempts. Try again later.",
        {
            "scope": scope,
            "locked_until": locked_until.isoformat() if locked_until else None,
        },
    )


class RateLimiter:
    """
    Rate limiter backed by the rate_limits table.

    Business Rules:
    - An active lock rejects attempts without incrementing the counter
    - Reaching max_attempts sets locked_until = now + lockout
    - Checking an expired lock clears the counter (fresh window)
    - Callers commit the unit of work; the limiter only issues statements
    """

    def __init__(
        self, rate_limits: IRateLimitRepository, policy: Optional[RateLimitPolicy] = None
    ):
        self.rate_limits = rate_limits
        self.policy = policy or RateLimitPolicy()

    async def check(self, identifier: str, kind: RateLimitKind) -> RateLimitStatus:
        """Return lock state; clears an expired lock as a side effect"""
        record = await self.rate_limits.get(identifier, kind)
        if record is None:
            return RateLimitStatus(locked=False)

        now = utcnow()
        if record.locked_until is not None:
            if record.locked_until > now:
                return RateLimitStatus(
                    locked=True,
                    locked_until=record.locked_until,
                    attempts=record.attempts,
                )

            await self.rate_limits.clear_expired_lock(identifier, kind, now)
            logger.info(f"Expired {kind.value} lock cleared")
            return RateLimitStatus(locked=False)

        return RateLimitStatus(locked=False, attempts=record.attempts)

    async def record_attempt(self, identifier: str, kind: RateLimitKind) -> AttemptOutcome:
        """Count one failed attempt and lock when the threshold is reached"""
        status = await self.check(identifier, kind)
        if status.locked:
            return AttemptOutcome(
                allowed=False,
                locked_until=status.locked_until,
                attempts=status.attempts,
            )

        now = utcnow()
        record = await self.rate_limits.increment(
            identifier,
            kind,
            now=now,
            max_attempts=self.policy.max_attempts,
            lock_until=now + self.policy.lockout,
        )

        if record.locked_until is not None and record.locked_until > now:
            logger.warning(
                f"Rate limit lock engaged for {kind.value} after {record.attempts} attempts"
            )
            return AttemptOutcome(
                allowed=False,
                locked_until=record.locked_until,
                attempts=record.attempts,
            )

        return AttemptOutcome(allowed=True, attempts=record.attempts)

    async def reset(self, identifier: str, kind: RateLimitKind) -> None:
        """Clear attempts and lock for identifier/kind"""
        await self.rate_limits.reset(identifier, kind)
