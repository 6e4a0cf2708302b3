"""
Unit tests for ExecutePasswordResetUseCase
"""
import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.app.services.directory_service import DirectoryResult, DirectoryStatus
from src.app.use_cases.otp.validate_otp_use_case import otp_pair_key
from src.app.use_cases.reset import ExecutePasswordResetUseCase, ExecuteResetCommand
from src.domain.base import utcnow
from src.domain.entities import (
    ExchangeGrant,
    Guardian,
    RateLimitKind,
    ResetStatus,
    Student,
)
from src.domain.security import DIGITS, LOWERCASE, SYMBOLS, UPPERCASE

IP = "198.51.100.4"


@pytest.fixture
def guardian():
    return Guardian(name="Maria Souza", national_id_hash="a" * 64, email="maria@example.com")


@pytest.fixture
def student():
    return Student(name="Ana Souza", enrollment_code="MAT-001", directory_email="ana@school.example")


@pytest.fixture
def grant(guardian, student):
    return ExchangeGrant(
        token="t" * 43,
        guardian_id=guardian.id,
        student_id=student.id,
        expires_at=utcnow() + timedelta(minutes=5),
    )


@pytest.fixture
def token_store(grant):
    store = MagicMock()
    store.take = AsyncMock(return_value=grant)
    return store


@pytest.fixture
def directory():
    directory = MagicMock()
    directory.set_password = AsyncMock(return_value=DirectoryResult(status=DirectoryStatus.success))
    return directory


@pytest.fixture
def loaded_uow(mock_uow, guardian, student):
    mock_uow.guardians.get_by_id.return_value = guardian
    mock_uow.students.get_by_id.return_value = student
    return mock_uow


def make_command() -> ExecuteResetCommand:
    return ExecuteResetCommand(token="t" * 43, ip_address=IP, user_agent="pytest")


@pytest.mark.asyncio
async def test_successful_reset(loaded_uow, token_store, directory, guardian, student):
    result = await ExecutePasswordResetUseCase(loaded_uow, token_store, directory).execute(
        make_command()
    )

    assert result.is_ok()
    response = result.value
    assert response.status == "success"
    assert response.student.name == "Ana Souza"
    assert response.student.email == "ana@school.example"

    secret = response.temporary_password
    assert len(secret) == 12
    assert any(c in UPPERCASE for c in secret)
    assert any(c in LOWERCASE for c in secret)
    assert any(c in DIGITS for c in secret)
    assert any(c in SYMBOLS for c in secret)

    directory.set_password.assert_awaited_once_with(
        "ana@school.example", secret, force_change_at_next_login=True
    )

    audit = loaded_uow.reset_audits.create.call_args.args[0]
    assert audit.status == ResetStatus.pending
    assert audit.ip_address == IP
    assert audit.user_agent == "pytest"
    loaded_uow.reset_audits.complete.assert_awaited_once_with(audit.id, ResetStatus.success)

    reset_keys = [c.args for c in loaded_uow.rate_limits.reset.call_args_list]
    assert reset_keys == [
        (guardian.national_id_hash, RateLimitKind.national_id_hash),
        (IP, RateLimitKind.network_address),
        (otp_pair_key(guardian.id, student.id), RateLimitKind.otp_challenge),
    ]
    # Pending record committed before the directory call, outcome after
    assert loaded_uow.commit.await_count == 2


@pytest.mark.asyncio
async def test_unknown_token(mock_uow, directory):
    store = MagicMock()
    store.take = AsyncMock(return_value=None)

    result = await ExecutePasswordResetUseCase(mock_uow, store, directory).execute(make_command())

    assert result.error.code == "INVALID_OR_EXPIRED_TOKEN"
    mock_uow.reset_audits.create.assert_not_called()
    directory.set_password.assert_not_called()


@pytest.mark.asyncio
async def test_missing_student(mock_uow, token_store, directory):
    result = await ExecutePasswordResetUseCase(mock_uow, token_store, directory).execute(
        make_command()
    )

    assert result.error.code == "STUDENT_NOT_FOUND"
    directory.set_password.assert_not_called()


@pytest.mark.asyncio
async def test_directory_not_found_marks_audit_failure(loaded_uow, token_store, directory):
    directory.set_password.return_value = DirectoryResult(
        status=DirectoryStatus.not_found, reason="account not found"
    )

    result = await ExecutePasswordResetUseCase(loaded_uow, token_store, directory).execute(
        make_command()
    )

    assert result.is_err()
    assert result.error.code == "DIRECTORY_RESET_FAILED"
    assert result.error.details == {"reason": "account not found"}

    audit = loaded_uow.reset_audits.create.call_args.args[0]
    loaded_uow.reset_audits.complete.assert_awaited_once_with(
        audit.id, ResetStatus.failure, "account not found"
    )
    loaded_uow.rate_limits.reset.assert_not_called()
    assert loaded_uow.commit.await_count == 2
    # Token is not put back
    token_store.put.assert_not_called()


@pytest.mark.asyncio
async def test_cancellation_does_not_interrupt_directory_call(loaded_uow, token_store, directory):
    started = asyncio.Event()
    release = asyncio.Event()

    async def slow_set_password(*args, **kwargs):
        started.set()
        await release.wait()
        return DirectoryResult(status=DirectoryStatus.success)

    directory.set_password.side_effect = slow_set_password

    task = asyncio.create_task(
        ExecutePasswordResetUseCase(loaded_uow, token_store, directory).execute(make_command())
    )
    await started.wait()
    task.cancel()
    await asyncio.sleep(0)
    release.set()

    with pytest.raises(asyncio.CancelledError):
        await task

    audit = loaded_uow.reset_audits.create.call_args.args[0]
    loaded_uow.reset_audits.complete.assert_awaited_once_with(audit.id, ResetStatus.success)
    assert loaded_uow.commit.await_count == 2


@pytest.mark.asyncio
async def test_directory_exception_marks_audit_failure(loaded_uow, token_store, directory):
    directory.set_password.side_effect = RuntimeError("connection reset")

    result = await ExecutePasswordResetUseCase(loaded_uow, token_store, directory).execute(
        make_command()
    )

    assert result.is_err()
    assert result.error.code == "DIRECTORY_RESET_FAILED"
    assert result.error.details == {"reason": "unexpected directory service error"}

    audit = loaded_uow.reset_audits.create.call_args.args[0]
    loaded_uow.reset_audits.complete.assert_awaited_once_with(
        audit.id, ResetStatus.failure, "unexpected directory service error"
    )
    loaded_uow.rate_limits.reset.assert_not_called()
    assert loaded_uow.commit.await_count == 2
