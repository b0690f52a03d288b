import asyncio
import logging

import asyncpg
from config import (
    DATABASE_URL,
    DB_COMMAND_TIMEOUT,
    DB_POOL_MAX_SIZE,
    DB_POOL_MIN_SIZE,
)

logger = logging.getLogger(__name__)

pool = None

# Ошибки соединения/запроса, которые считаем временными:
# состояние не меняем, повтор при следующем триггере
DB_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.exceptions.InterfaceError,
    asyncio.TimeoutError,
    ConnectionResetError,
    OSError,
)


async def create_pool():
    global pool
    if pool is None:
        if not DATABASE_URL:
            raise RuntimeError("DATABASE_URL не задан. Проверь .env")

        pool = await asyncpg.create_pool(
            DATABASE_URL,
            min_size=DB_POOL_MIN_SIZE,
            max_size=DB_POOL_MAX_SIZE,
            command_timeout=DB_COMMAND_TIMEOUT,
        )
        logger.info(
            f"✅ [DB] пул создан ({DB_POOL_MIN_SIZE}–{DB_POOL_MAX_SIZE}, "
            f"таймаут запроса {DB_COMMAND_TIMEOUT}s)"
        )
    return pool


async def close_pool():
    global pool
    if pool:
        await pool.close()
        pool = None
        logger.info("🔒 [DB] пул закрыт")


async def get_pool():
    if pool is None:
        raise RuntimeError("Пул БД не создан, сначала вызови create_pool()")
    return pool
