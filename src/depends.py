from datetime import timedelta
from functools import lru_cache

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.google_directory_service import GoogleDirectoryService
from src.adapter.services.in_memory_exchange_token_store import InMemoryExchangeTokenStore
from src.adapter.services.logging_notifier import LoggingNotifier
from src.adapter.services.redis_exchange_token_store import RedisExchangeTokenStore
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.directory_service import IDirectoryService
from src.app.services.exchange_token_store import IExchangeTokenStore
from src.app.services.notifier import INotifier
from src.app.services.rate_limiter import RateLimitPolicy

_engine_options = {"echo": False, "future": True}
if not ApplicationConfig.DB_URI.startswith("sqlite"):
    _engine_options["pool_timeout"] = ApplicationConfig.DB_POOL_TIMEOUT_SECONDS
    _engine_options["pool_pre_ping"] = True

engine = create_async_engine(ApplicationConfig.DB_URI, **_engine_options)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


@lru_cache
def get_exchange_token_store() -> IExchangeTokenStore:
    """Process-wide token store; memory for a single instance, redis when shared"""
    if ApplicationConfig.CACHE_BACKEND == "redis":
        return RedisExchangeTokenStore.from_url(ApplicationConfig.REDIS_URL)
    return InMemoryExchangeTokenStore()


@lru_cache
def get_directory_service() -> IDirectoryService:
    return GoogleDirectoryService(
        service_account_email=ApplicationConfig.GOOGLE_SERVICE_ACCOUNT_EMAIL,
        private_key=ApplicationConfig.GOOGLE_PRIVATE_KEY,
        admin_email=ApplicationConfig.GOOGLE_ADMIN_EMAIL,
        timeout=ApplicationConfig.DIRECTORY_TIMEOUT_SECONDS,
    )


def get_notifier() -> INotifier:
    return LoggingNotifier()


def get_rate_limit_policy() -> RateLimitPolicy:
    return RateLimitPolicy(
        max_attempts=ApplicationConfig.RATE_LIMIT_MAX_ATTEMPTS,
        lockout=timedelta(minutes=ApplicationConfig.RATE_LIMIT_LOCKOUT_MINUTES),
    )
