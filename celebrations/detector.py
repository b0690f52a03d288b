# celebrations/detector.py

import asyncio
import logging

from core.errors import CursorStoreError
from core.tiers import resolve_tier

logger = logging.getLogger(__name__)

TIER_UP = "tier-up"
LEVEL_UP = "level-up"


def _tier_card(tier):
    # всё, что нужно UI для показа, без повторного запроса к движку
    return {
        "tier": tier["tier"],
        "key": tier["key"],
        "title": tier["title"],
        "emoji": tier["emoji"],
        "multiplier": tier["multiplier"],
    }


class CelebrationDetector:
    """
    Решает, что праздновать при переходе счётчика old → new.

    Два независимых механизма:
      🔹 seen-сеты в памяти — защита от повторов внутри одного процесса
      🔹 курсор в хранилище — догоняющая проверка между запусками

    Tier-Up важнее Level-Up: для одного значения никогда не оба.
    """

    def __init__(self, table, cursor_store):
        self.table = table
        self.cursor_store = cursor_store
        self._tier_seen = {}
        self._level_seen = {}
        self._locks = {}

    # -----------------------------------------
    # 🎉 Правило перехода (синхронно, без I/O)
    # -----------------------------------------
    def observe(self, scope_id: str, old_value: int, new_value: int):
        if new_value == old_value:
            return None

        if new_value < old_value:
            logger.warning(
                f"⚠️ [CELEBRATION] scope={scope_id} счётчик уменьшился "
                f"{old_value} → {new_value}, не празднуем"
            )
            return None

        previous_tier, _ = resolve_tier(old_value, self.table)
        current_tier, _ = resolve_tier(new_value, self.table)

        tier_seen = self._tier_seen.setdefault(scope_id, set())
        level_seen = self._level_seen.setdefault(scope_id, set())

        # tier-up помечает оба сета, поэтому level_seen — полный список показанного
        if new_value in level_seen:
            logger.debug(f"[CELEBRATION] scope={scope_id} значение {new_value} уже праздновали")
            return None

        if current_tier["tier"] > previous_tier["tier"]:
            tier_seen.add(new_value)
            level_seen.add(new_value)

            logger.info(
                f"🏆 [CELEBRATION] scope={scope_id} tier-up "
                f"{previous_tier['tier']} → {current_tier['tier']} (значение {new_value})"
            )

            return {
                "kind": TIER_UP,
                "scope_id": scope_id,
                "payload": {
                    "previous_tier": previous_tier["tier"],
                    "current_tier": current_tier["tier"],
                    "new_value": new_value,
                    "old_value": old_value,
                    "tier": _tier_card(current_tier),
                },
            }

        level_seen.add(new_value)

        logger.info(
            f"⬆️ [CELEBRATION] scope={scope_id} level-up {old_value} → {new_value}"
        )

        return {
            "kind": LEVEL_UP,
            "scope_id": scope_id,
            "payload": {
                "old_value": old_value,
                "new_value": new_value,
                "current_tier": current_tier["tier"],
                "tier": _tier_card(current_tier),
            },
        }

    def _lock_for(self, scope_id: str):
        lock = self._locks.get(scope_id)
        if lock is None:
            lock = self._locks[scope_id] = asyncio.Lock()
        return lock

    # -----------------------------------------
    # 🔁 Догоняющая проверка при активации scope
    # -----------------------------------------
    async def catch_up(self, scope_id: str, new_value: int):
        """
        Сравнивает текущее значение с курсором и схлопывает
        всё, что произошло без клиента, в одно событие.

        Чтение и запись курсора — одна транзакция на scope:
        параллельные проверки одного scope идут строго по очереди.
        """
        async with self._lock_for(scope_id):
            # проверяем значение до того, как трогать курсор
            resolve_tier(new_value, self.table)

            cursor = await self.cursor_store.get(scope_id)
            event = None

            if cursor is None:
                logger.info(f"[CATCH-UP] scope={scope_id} первое наблюдение, курсор = {new_value}")

            elif cursor == new_value:
                return None

            elif cursor < new_value:
                logger.info(
                    f"🔁 [CATCH-UP] scope={scope_id} прогресс без клиента: {cursor} → {new_value}"
                )
                event = self.observe(scope_id, cursor, new_value)

            else:
                logger.warning(
                    f"⚠️ [CATCH-UP] scope={scope_id} счётчик уменьшился "
                    f"{cursor} → {new_value}, курсор сдвигаем без празднования"
                )

            try:
                await self.cursor_store.set(scope_id, new_value)
            except CursorStoreError as e:
                # событие уже отмечено в seen-сетах, отдаём его; повтор после рестарта допустим
                logger.warning(f"⚠️ [CURSOR] scope={scope_id} не удалось сохранить {new_value} — {e}")

            return event

    def reset_seen(self, scope_id: str = None):
        """Сбрасывает seen-сеты (смена пользователя). Курсоры не трогает."""
        if scope_id is None:
            self._tier_seen.clear()
            self._level_seen.clear()
            return
        self._tier_seen.pop(scope_id, None)
        self._level_seen.pop(scope_id, None)
