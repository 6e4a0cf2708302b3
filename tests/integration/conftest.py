from typing import List, Optional, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from tests.fixtures.factories import create_guardian, create_student
from tests.fixtures.json_loader import TestDataLoader
from src.adapter.services.in_memory_exchange_token_store import InMemoryExchangeTokenStore
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.directory_service import (
    DirectoryResult,
    DirectoryStatus,
    IDirectoryService,
)
from src.app.services.notifier import INotifier
from src.depends import (
    get_directory_service,
    get_exchange_token_store,
    get_notifier,
    get_unit_of_work,
)
from src.domain.entities import DeliveryChannel, Guardian, Linkage, RelationKind, Student


class FakeDirectoryService(IDirectoryService):
    """Directory double; answers with a preset result and records calls"""

    def __init__(self):
        self.result = DirectoryResult(status=DirectoryStatus.success)
        self.calls: List[Tuple[str, str, bool]] = []

    async def set_password(
        self, account_email: str, new_password: str, force_change_at_next_login: bool = True
    ) -> DirectoryResult:
        self.calls.append((account_email, new_password, force_change_at_next_login))
        return self.result


class CapturingNotifier(INotifier):
    """Notifier double; keeps every dispatched code"""

    def __init__(self):
        self.sent: List[Tuple[DeliveryChannel, str, str]] = []

    async def send(self, channel: DeliveryChannel, address: str, code: str) -> bool:
        self.sent.append((channel, address, code))
        return True

    @property
    def last_code(self) -> Optional[str]:
        return self.sent[-1][2] if self.sent else None


@pytest.fixture
def test_data():
    return TestDataLoader()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest.fixture
def token_store():
    return InMemoryExchangeTokenStore()


@pytest.fixture
def directory():
    return FakeDirectoryService()


@pytest.fixture
def notifier():
    return CapturingNotifier()


@pytest_asyncio.fixture
async def client(db_session, token_store, directory, notifier):
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_exchange_token_store] = lambda: token_store
    app.dependency_overrides[get_directory_service] = lambda: directory
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def linked_pair(db_session, test_data) -> Tuple[Guardian, Student]:
    """Guardian linked to student, plus an unlinked second student"""
    guardian = await create_guardian(db_session, test_data.get_copy("guardian"))
    student = await create_student(db_session, test_data.get_copy("student"))
    await create_student(db_session, test_data.get_copy("other_student"))
    db_session.add(Linkage(guardian_id=guardian.id, student_id=student.id, kind=RelationKind.both))
    await db_session.commit()
    return guardian, student
