"""
Unit tests for ValidateOtpUseCase
"""
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.app.use_cases.otp import ValidateOtpUseCase
from src.app.use_cases.otp.validate_otp_use_case import otp_pair_key
from src.domain.base import utcnow
from src.domain.entities import DeliveryChannel, OTPChallenge, RateLimit, RateLimitKind

GUARDIAN_ID = uuid4()
STUDENT_ID = uuid4()
PAIR_KEY = otp_pair_key(GUARDIAN_ID, STUDENT_ID)


@pytest.fixture
def token_store():
    store = MagicMock()
    store.put = AsyncMock()
    return store


def make_challenge(expires_in=timedelta(minutes=5)) -> OTPChallenge:
    return OTPChallenge(
        guardian_id=GUARDIAN_ID,
        student_id=STUDENT_ID,
        code="123456",
        channel=DeliveryChannel.email,
        consumed=False,
        expires_at=utcnow() + expires_in,
    )


@pytest.mark.asyncio
async def test_valid_code_mints_exchange_token(mock_uow, token_store):
    challenge = make_challenge()
    mock_uow.otp_challenges.find_active.return_value = challenge

    result = await ValidateOtpUseCase(mock_uow, token_store).execute(
        GUARDIAN_ID, STUDENT_ID, "123456"
    )

    assert result.is_ok()
    assert result.value.valid is True
    assert len(result.value.token) >= 43

    mock_uow.otp_challenges.consume.assert_awaited_once_with(challenge.id)
    mock_uow.rate_limits.reset.assert_awaited_once_with(PAIR_KEY, RateLimitKind.otp_challenge)
    mock_uow.commit.assert_awaited()

    grant = token_store.put.call_args.args[0]
    assert grant.token == result.value.token
    assert grant.guardian_id == GUARDIAN_ID
    assert grant.student_id == STUDENT_ID
    remaining = grant.expires_at - utcnow()
    assert timedelta(minutes=4) < remaining <= timedelta(minutes=5)


@pytest.mark.asyncio
async def test_wrong_code_counts_against_pair(mock_uow, token_store):
    mock_uow.rate_limits.increment.return_value = RateLimit(
        identifier=PAIR_KEY, kind=RateLimitKind.otp_challenge, attempts=1
    )

    result = await ValidateOtpUseCase(mock_uow, token_store).execute(
        GUARDIAN_ID, STUDENT_ID, "654321"
    )

    assert result.error.code == "INVALID_OR_USED_CODE"
    assert mock_uow.rate_limits.increment.call_args.args[:2] == (
        PAIR_KEY,
        RateLimitKind.otp_challenge,
    )
    mock_uow.commit.assert_awaited_once()
    token_store.put.assert_not_called()


@pytest.mark.asyncio
async def test_expired_code_is_distinct_from_invalid(mock_uow, token_store):
    mock_uow.otp_challenges.find_active.return_value = make_challenge(
        expires_in=timedelta(seconds=-1)
    )

    result = await ValidateOtpUseCase(mock_uow, token_store).execute(
        GUARDIAN_ID, STUDENT_ID, "123456"
    )

    assert result.error.code == "EXPIRED_CODE"
    mock_uow.otp_challenges.consume.assert_not_called()
    token_store.put.assert_not_called()


@pytest.mark.asyncio
async def test_lost_consume_race_reports_used_code(mock_uow, token_store):
    mock_uow.otp_challenges.find_active.return_value = make_challenge()
    mock_uow.otp_challenges.consume.return_value = False

    result = await ValidateOtpUseCase(mock_uow, token_store).execute(
        GUARDIAN_ID, STUDENT_ID, "123456"
    )

    assert result.error.code == "INVALID_OR_USED_CODE"
    token_store.put.assert_not_called()


@pytest.mark.asyncio
async def test_locked_pair_is_rejected_before_lookup(mock_uow, token_store):
    mock_uow.rate_limits.get.return_value = RateLimit(
        identifier=PAIR_KEY,
        kind=RateLimitKind.otp_challenge,
        attempts=5,
        locked_until=utcnow() + timedelta(minutes=30),
    )

    result = await ValidateOtpUseCase(mock_uow, token_store).execute(
        GUARDIAN_ID, STUDENT_ID, "123456"
    )

    assert result.error.code == "TOO_MANY_ATTEMPTS"
    assert result.error.details["scope"] == "otp_challenge"
    mock_uow.otp_challenges.find_active.assert_not_called()
