from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.guardian_repository import GuardianRepository
from src.adapter.repositories.linkage_repository import LinkageRepository
from src.adapter.repositories.otp_challenge_repository import OTPChallengeRepository
from src.adapter.repositories.password_reset_audit_repository import PasswordResetAuditRepository
from src.adapter.repositories.rate_limit_repository import RateLimitRepository
from src.adapter.repositories.student_repository import StudentRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.guardians = GuardianRepository(self.session)
        self.students = StudentRepository(self.session)
        self.linkages = LinkageRepository(self.session)
        self.otp_challenges = OTPChallengeRepository(self.session)
        self.rate_limits = RateLimitRepository(self.session)
        self.reset_audits = PasswordResetAuditRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
