# engine.py

import asyncio
import logging

from config import LOG_LEVEL
from database import create_pool, close_pool
from init_pg_db import create_progression_tables

from celebrations.queue import CelebrationQueue, queue_consumer
from milestones import setup_milestones
from repositories.cursor_repository import PgCursorRepository
from repositories.progression_repository import ProgressionRepository
from services.progression_service import ProgressionService

logger = logging.getLogger(__name__)


def configure_logging(level: str = LOG_LEVEL):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


async def start_engine(process_celebration=None):
    """
    Поднимает пул, схему и собирает ProgressionService.
    process_celebration — корутина слоя отображения для событий очереди.
    """
    # 1) Подключение к БД (asyncpg pool)
    pool = await create_pool()

    # 2) Схема
    await create_progression_tables()
    logger.info("✅ Database connected and schema ensured")

    # 3) Сборка сервисов
    reconciler = await setup_milestones()
    celebrations = CelebrationQueue()

    service = ProgressionService(
        progression_repo=ProgressionRepository(pool),
        reconciler=reconciler,
        cursor_store=PgCursorRepository(pool),
        celebrations=celebrations,
    )

    # 4) Потребитель очереди празднований
    consumer = None
    if process_celebration is not None:
        consumer = asyncio.create_task(queue_consumer(celebrations, process_celebration))

    logger.info("🚀 Progression engine started")
    return service, consumer


async def stop_engine(service, consumer=None):
    await service.wait_background()

    if consumer is not None:
        consumer.cancel()
        try:
            await consumer
        except asyncio.CancelledError:
            pass

    await close_pool()
    logger.info("🛑 Progression engine stopped, pool closed.")


async def _log_celebration(event):
    logger.info(f"🎉 [CELEBRATION] {event['kind']} scope={event['scope_id']}")


async def main():
    configure_logging()
    service, consumer = await start_engine(_log_celebration)

    try:
        await asyncio.Event().wait()
    finally:
        await stop_engine(service, consumer)


if __name__ == "__main__":
    asyncio.run(main())
