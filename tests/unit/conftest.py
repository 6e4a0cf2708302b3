import pytest
from unittest.mock import AsyncMock, MagicMock


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with every repository the pipeline touches"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.guardians = MagicMock()
    uow.guardians.get_by_id = AsyncMock(return_value=None)
    uow.guardians.get_by_national_id_hash = AsyncMock(return_value=None)

    uow.students = MagicMock()
    uow.students.get_by_id = AsyncMock(return_value=None)
    uow.students.get_by_enrollment_code = AsyncMock(return_value=None)
    uow.students.get_by_directory_email = AsyncMock(return_value=None)

    uow.linkages = MagicMock()
    uow.linkages.get_by_guardian_and_student = AsyncMock(return_value=None)

    uow.otp_challenges = MagicMock()
    uow.otp_challenges.create = AsyncMock(side_effect=lambda challenge: challenge)
    uow.otp_challenges.invalidate_active = AsyncMock(return_value=0)
    uow.otp_challenges.find_active = AsyncMock(return_value=None)
    uow.otp_challenges.consume = AsyncMock(return_value=True)

    uow.rate_limits = MagicMock()
    uow.rate_limits.get = AsyncMock(return_value=None)
    uow.rate_limits.increment = AsyncMock()
    uow.rate_limits.clear_expired_lock = AsyncMock(return_value=True)
    uow.rate_limits.reset = AsyncMock()

    uow.reset_audits = MagicMock()
    uow.reset_audits.create = AsyncMock(side_effect=lambda audit: audit)
    uow.reset_audits.complete = AsyncMock(return_value=True)

    return uow
