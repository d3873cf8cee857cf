# sitehire/database.py
import asyncio
import logging
from typing import Optional

import asyncpg

from .config import settings
from .errors import StoreError
from .store import Store
from .store.memory import InMemoryStore
from .store.postgres import PostgresStore

logger = logging.getLogger(__name__)

_store: Optional[Store] = None
_store_lock = asyncio.Lock()

async def create_pool() -> asyncpg.Pool:
    return await asyncpg.create_pool(
        user=settings.database_username,
        password=settings.database_password,
        database=settings.database_name,
        host=settings.database_hostname,
        port=settings.database_port,
        min_size=settings.database_pool_min_size,
        max_size=settings.database_pool_max_size
    )

async def get_store() -> Store:
    """FastAPI dependency returning the process-wide store, created on first use"""
    global _store
    async with _store_lock:
        if _store is None:
            if settings.store_backend == "memory":
                logger.warning("Using the in-memory store; data is lost on restart")
                _store = InMemoryStore()
            else:
                try:
                    pool = await create_pool()
                except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
                    logger.error(f"Could not connect to the database: {str(e)}")
                    raise StoreError(f"Could not connect to the database: {e}") from e
                _store = PostgresStore(pool)
    return _store

async def close_store():
    global _store
    if isinstance(_store, PostgresStore):
        await _store.pool.close()
    _store = None
