from abc import ABC, abstractmethod

from src.app.repositories.guardian_repository import IGuardianRepository
from src.app.repositories.linkage_repository import ILinkageRepository
from src.app.repositories.otp_challenge_repository import IOTPChallengeRepository
from src.app.repositories.password_reset_audit_repository import IPasswordResetAuditRepository
from src.app.repositories.rate_limit_repository import IRateLimitRepository
from src.app.repositories.student_repository import IStudentRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    guardians: IGuardianRepository
    students: IStudentRepository
    linkages: ILinkageRepository
    otp_challenges: IOTPChallengeRepository
    rate_limits: IRateLimitRepository
    reset_audits: IPasswordResetAuditRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
