from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class DirectoryStatus(str, Enum):
    """Outcome of a directory password update"""

    success = "success"
    not_found = "not_found"
    forbidden = "forbidden"
    error = "error"


class DirectoryResult(BaseModel):
    """Result returned by a directory service call"""

    status: DirectoryStatus
    reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == DirectoryStatus.success


class IDirectoryService(ABC):
    """Directory service interface - application layer"""

    @abstractmethod
    async def set_password(
        self, account_email: str, new_password: str, force_change_at_next_login: bool = True
    ) -> DirectoryResult:
        """Set the password of a directory account.

        Never raises for upstream faults; they are reported in the result.
        """
        pass
