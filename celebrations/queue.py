# celebrations/queue.py  ОЧЕРЕДЬ ПРАЗДНОВАНИЙ
import asyncio
import logging

from config import CELEBRATION_QUEUE_SIZE

logger = logging.getLogger(__name__)


class CelebrationQueue:
    """
    События {kind, scope_id, payload} для слоя отображения.
    Движок только кладёт, показывает кто-то другой.
    """

    def __init__(self, maxsize: int = CELEBRATION_QUEUE_SIZE):
        self.queue = asyncio.Queue(maxsize=maxsize)

    async def publish(self, event):
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            # показывать некому: самое старое событие уступает место новому
            dropped = self.queue.get_nowait()
            self.queue.task_done()
            logger.warning(
                f"⚠️ [CELEBRATION] очередь заполнена, отброшено "
                f"{dropped['kind']} scope={dropped['scope_id']}"
            )
            self.queue.put_nowait(event)

        logger.debug(f"[CELEBRATION] в очереди {event['kind']} scope={event['scope_id']}")

    def drain(self):
        """Забирает всё, что уже лежит в очереди, не дожидаясь новых."""
        events = []
        while True:
            try:
                events.append(self.queue.get_nowait())
            except asyncio.QueueEmpty:
                return events
            self.queue.task_done()

    def __len__(self):
        return self.queue.qsize()


async def queue_consumer(celebrations: CelebrationQueue, process_func):
    while True:
        event = await celebrations.queue.get()
        try:
            await process_func(event)
        except Exception as e:
            logger.error(f"[CELEBRATION QUEUE ERROR] {e}", exc_info=True)
        finally:
            celebrations.queue.task_done()
