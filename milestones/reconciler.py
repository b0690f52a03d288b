# milestones/reconciler.py

import asyncio
import logging

from core.errors import AwardRequestError
from .definitions import HABIT_MILESTONES
from .ledger import milestones_reached

logger = logging.getLogger(__name__)


def _result(status: str, newly_unlocked=None, total_xp_awarded: int = 0):
    return {
        "status": status,
        "newly_unlocked": newly_unlocked or [],
        "total_xp_awarded": total_xp_awarded,
    }


def _merge(earlier, result):
    """Добавляет к результату выдачи, о которых ещё никому не сообщили."""
    if not earlier:
        return result

    newly_unlocked = [m for r in earlier for m in r["newly_unlocked"]] + result["newly_unlocked"]
    total_xp = sum(r["total_xp_awarded"] for r in earlier) + result["total_xp_awarded"]
    return _result("awarded", newly_unlocked, total_xp)


class AwardReconciler:
    """
    Выдаёт XP за каждый майлстоун ровно один раз на привычку.

    🔹 delta = достигнутые − уже выданные (выданные — с сервера)
    🔹 одна пачка на весь delta, без запросов по одному
    🔹 пока запрос по scope в полёте, новые вызовы схлопываются в no-op
    """

    def __init__(self, backend, table=HABIT_MILESTONES):
        self.backend = backend
        self.table = table
        # scope_id → задача с запросом выдачи
        self._in_flight = {}
        # scope_id → id, выдачу которых сервер подтвердил в этом процессе
        self._confirmed = {}
        # scope_id → результаты, которые не дошли до отменённого вызывающего
        self._unreported = {}

    def is_in_flight(self, scope_id: str) -> bool:
        return scope_id in self._in_flight

    def pending_delta(self, days: int, awarded_ids, scope_id: str = None):
        awarded = set(awarded_ids)
        if scope_id is not None:
            awarded |= self._confirmed.get(scope_id, set())
        return [m for m in milestones_reached(days, self.table) if m["id"] not in awarded]

    async def reconcile(self, scope_id: str, days: int, awarded_ids):
        if scope_id in self._in_flight:
            logger.debug(f"[AWARD] scope={scope_id} уже в полёте → пропуск")
            return _result("in_flight")

        unreported = self._unreported.pop(scope_id, [])

        delta = self.pending_delta(days, awarded_ids, scope_id)
        if not delta:
            return _merge(unreported, _result("noop"))

        task = asyncio.ensure_future(self._award(scope_id, delta))
        self._in_flight[scope_id] = task

        try:
            # shield: если вызывающий отменён, ответ всё равно будет смержен
            result = await asyncio.shield(task)
        except asyncio.CancelledError:
            self._unreported.setdefault(scope_id, []).extend(unreported)
            task.add_done_callback(lambda t: self._keep_unreported(scope_id, t))
            raise

        return _merge(unreported, result)

    def _keep_unreported(self, scope_id: str, task):
        if task.cancelled():
            return
        if task.exception() is not None:
            logger.error(f"❌ [AWARD] scope={scope_id} выдача упала: {task.exception()!r}")
            return

        result = task.result()
        if result["newly_unlocked"]:
            self._unreported.setdefault(scope_id, []).append(result)
            logger.info(
                f"[AWARD] scope={scope_id} вызывающий отменён, "
                f"{len(result['newly_unlocked'])} майлстоун(ов) покажем при следующей сверке"
            )

    async def _award(self, scope_id: str, delta):
        ids = [m["id"] for m in delta]

        logger.info(f"🎯 [AWARD] scope={scope_id} запрос выдачи {ids}")

        try:
            response = await self.backend.award_milestones(scope_id, ids)

        except AwardRequestError as e:
            logger.warning(
                f"⚠️ [AWARD] scope={scope_id} выдача не подтверждена, "
                f"повтор при следующем триггере — {e}"
            )
            return _result("failed")

        finally:
            self._in_flight.pop(scope_id, None)

        # сервер подтвердил всю пачку: все id теперь записаны
        self._confirmed.setdefault(scope_id, set()).update(ids)

        newly_awarded = set(response.get("awarded_ids", []))
        newly_unlocked = [m for m in delta if m["id"] in newly_awarded]
        total_xp = response.get("total_xp", 0)

        logger.info(
            f"✅ [AWARD] scope={scope_id} выдано {len(newly_unlocked)} "
            f"майлстоун(ов), +{total_xp} XP"
        )

        return _result("awarded", newly_unlocked, total_xp)
