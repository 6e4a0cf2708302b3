"""
In-memory exchange token store.

Suitable for a single service instance only: grants live in this process
and disappear on restart. Use RedisExchangeTokenStore when more than one
instance serves requests.
"""

import asyncio
import logging
from typing import Dict, Optional

from src.app.services.exchange_token_store import IExchangeTokenStore
from src.domain.base import utcnow
from src.domain.entities import ExchangeGrant

logger = logging.getLogger(__name__)


class InMemoryExchangeTokenStore(IExchangeTokenStore):
    """Exchange token store backed by a dict guarded by an asyncio.Lock"""

    def __init__(self):
        self._grants: Dict[str, ExchangeGrant] = {}
        self._lock = asyncio.Lock()

    async def put(self, grant: ExchangeGrant) -> None:
        async with self._lock:
            self._grants[grant.token] = grant

    async def take(self, token: str) -> Optional[ExchangeGrant]:
        async with self._lock:
            grant = self._grants.pop(token, None)

        if grant is None or grant.is_expired():
            return None
        return grant

    async def sweep(self) -> int:
        now = utcnow()
        async with self._lock:
            expired = [token for token, grant in self._grants.items() if grant.is_expired(now)]
            for token in expired:
                del self._grants[token]
        return len(expired)

    def __len__(self) -> int:
        return len(self._grants)


async def run_periodic_sweep(store: IExchangeTokenStore, interval_seconds: float) -> None:
    """Sweep expired grants forever; cancelled on application shutdown"""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            removed = await store.sweep()
        except Exception:
            logger.exception("Exchange token sweep failed")
            continue
        if removed:
            logger.debug(f"Swept {removed} expired exchange tokens")
