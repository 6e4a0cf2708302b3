"""
Unit tests for VerifyLinkageUseCase

Tests all business logic with mocked dependencies.
"""
from datetime import timedelta
from unittest.mock import call

import pytest

from src.app.use_cases.linkage import VerifyLinkageCommand, VerifyLinkageUseCase
from src.domain.base import utcnow
from src.domain.entities import Guardian, Linkage, RateLimit, RateLimitKind, RelationKind, Student
from src.domain.security import hash_identifier

NATIONAL_ID = "529.982.247-25"
ID_HASH = hash_identifier(NATIONAL_ID)
IP = "203.0.113.10"


@pytest.fixture
def guardian():
    return Guardian(
        name="Maria Souza",
        national_id_hash=ID_HASH,
        email="maria@example.com",
        phone="+5511987654321",
    )


@pytest.fixture
def student():
    return Student(name="Ana Souza", enrollment_code="MAT-001", directory_email="ana@school.example")


def command(**overrides) -> VerifyLinkageCommand:
    data = {"national_id": NATIONAL_ID, "enrollment_code": "MAT-001", "ip_address": IP}
    data.update(overrides)
    return VerifyLinkageCommand(**data)


def arrange_failed_attempt(mock_uow):
    mock_uow.rate_limits.increment.side_effect = lambda identifier, kind, **kwargs: RateLimit(
        identifier=identifier, kind=kind, attempts=1
    )


@pytest.mark.asyncio
async def test_successful_verification(mock_uow, guardian, student):
    """Linked pair returns masked guardian and student fields"""
    mock_uow.guardians.get_by_national_id_hash.return_value = guardian
    mock_uow.students.get_by_enrollment_code.return_value = student
    mock_uow.linkages.get_by_guardian_and_student.return_value = Linkage(
        guardian_id=guardian.id, student_id=student.id, kind=RelationKind.both
    )

    result = await VerifyLinkageUseCase(mock_uow).execute(command())

    assert result.is_ok()
    response = result.value
    assert response.linkage_valid is True
    assert response.relation_kind == "both"
    assert response.guardian.id == str(guardian.id)
    assert response.guardian.email == "ma***@example.com"
    assert response.guardian.phone == "*********4321"
    assert response.guardian.has_email and response.guardian.has_phone
    assert response.student.directory_email == "ana@school.example"

    mock_uow.guardians.get_by_national_id_hash.assert_awaited_once_with(ID_HASH)
    # Success neither increments nor resets
    mock_uow.rate_limits.increment.assert_not_called()
    mock_uow.rate_limits.reset.assert_not_called()
    mock_uow.commit.assert_awaited()


@pytest.mark.asyncio
async def test_lookup_by_email_is_lowercased(mock_uow, guardian, student):
    mock_uow.guardians.get_by_national_id_hash.return_value = guardian
    mock_uow.students.get_by_directory_email.return_value = student
    mock_uow.linkages.get_by_guardian_and_student.return_value = Linkage(
        guardian_id=guardian.id, student_id=student.id, kind=RelationKind.financial
    )

    result = await VerifyLinkageUseCase(mock_uow).execute(
        command(enrollment_code=None, email="  Ana@School.Example ")
    )

    assert result.is_ok()
    mock_uow.students.get_by_directory_email.assert_awaited_once_with("ana@school.example")
    mock_uow.students.get_by_enrollment_code.assert_not_called()


@pytest.mark.asyncio
async def test_invalid_identifier_touches_nothing(mock_uow):
    result = await VerifyLinkageUseCase(mock_uow).execute(command(national_id="529.982.247-26"))

    assert result.is_err()
    assert result.error.code == "INVALID_IDENTIFIER"
    mock_uow.rate_limits.get.assert_not_called()
    mock_uow.rate_limits.increment.assert_not_called()


@pytest.mark.asyncio
async def test_missing_student_key(mock_uow):
    result = await VerifyLinkageUseCase(mock_uow).execute(command(enrollment_code=None))

    assert result.is_err()
    assert result.error.code == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_guardian_not_found_records_attempts_on_both_keys(mock_uow):
    arrange_failed_attempt(mock_uow)

    result = await VerifyLinkageUseCase(mock_uow).execute(command())

    assert result.is_err()
    assert result.error.code == "GUARDIAN_NOT_FOUND"
    recorded = [c.args[:2] for c in mock_uow.rate_limits.increment.call_args_list]
    assert recorded == [
        (ID_HASH, RateLimitKind.national_id_hash),
        (IP, RateLimitKind.network_address),
    ]
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_student_not_found_records_attempts(mock_uow, guardian):
    arrange_failed_attempt(mock_uow)
    mock_uow.guardians.get_by_national_id_hash.return_value = guardian

    result = await VerifyLinkageUseCase(mock_uow).execute(command())

    assert result.error.code == "STUDENT_NOT_FOUND"
    assert mock_uow.rate_limits.increment.await_count == 2


@pytest.mark.asyncio
async def test_linkage_not_found_records_attempts(mock_uow, guardian, student):
    arrange_failed_attempt(mock_uow)
    mock_uow.guardians.get_by_national_id_hash.return_value = guardian
    mock_uow.students.get_by_enrollment_code.return_value = student

    result = await VerifyLinkageUseCase(mock_uow).execute(command())

    assert result.error.code == "LINKAGE_NOT_FOUND"
    assert mock_uow.rate_limits.increment.await_count == 2


@pytest.mark.asyncio
async def test_locked_identifier_is_rejected(mock_uow, guardian):
    locked_until = utcnow() + timedelta(minutes=45)
    mock_uow.rate_limits.get.return_value = RateLimit(
        identifier=ID_HASH,
        kind=RateLimitKind.national_id_hash,
        attempts=5,
        locked_until=locked_until,
    )
    mock_uow.guardians.get_by_national_id_hash.return_value = guardian

    result = await VerifyLinkageUseCase(mock_uow).execute(command())

    assert result.error.code == "TOO_MANY_ATTEMPTS"
    assert result.error.details["scope"] == "national_id"
    assert result.error.details["locked_until"] == locked_until.isoformat()
    mock_uow.guardians.get_by_national_id_hash.assert_not_called()
    mock_uow.rate_limits.increment.assert_not_called()


@pytest.mark.asyncio
async def test_locked_address_is_rejected(mock_uow):
    locked = RateLimit(
        identifier=IP,
        kind=RateLimitKind.network_address,
        attempts=5,
        locked_until=utcnow() + timedelta(minutes=5),
    )
    mock_uow.rate_limits.get.side_effect = lambda identifier, kind: (
        locked if kind == RateLimitKind.network_address else None
    )

    result = await VerifyLinkageUseCase(mock_uow).execute(command())

    assert result.error.code == "TOO_MANY_ATTEMPTS"
    assert result.error.details["scope"] == "network_address"
    assert mock_uow.rate_limits.get.call_args_list == [
        call(ID_HASH, RateLimitKind.national_id_hash),
        call(IP, RateLimitKind.network_address),
    ]
