# services/progression_service.py

import asyncio
import logging

from celebrations.detector import CelebrationDetector
from core.errors import (
    CursorStoreError,
    InvariantViolation,
    ProgressionFetchError,
)
from core.levels import group_level_progress, user_level_view
from core.tiers import GROUP_TIERS, HABIT_TIERS, counter_to_next_tier, next_tier, resolve_tier
from milestones.ledger import habit_age_days

logger = logging.getLogger(__name__)

MILESTONE = "milestone"


def habit_scope(habit_id) -> str:
    return f"habit:{habit_id}"


def group_scope(group_id) -> str:
    return f"group:{group_id}"


def tier_view(counter: int, table):
    """Синхронный снимок тира для мгновенного показа (без сети)."""
    tier, progress = resolve_tier(counter, table)
    following = next_tier(tier, table)

    return {
        "counter": counter,
        "tier": tier,
        "progress": progress,
        "next_tier": following,
        "to_next_tier": counter_to_next_tier(counter, table),
    }


class ProgressionService:
    """
    Два независимых пути чтения:
      1) tier_view — синхронно, сразу при показе экрана
      2) refresh_* — асинхронно: выдача майлстоунов + догоняющие празднования

    Асинхронный путь никогда не блокирует синхронный,
    он только обновляет выданное и кладёт события в очередь.
    """

    def __init__(self, progression_repo, reconciler, cursor_store, celebrations):
        self.repo = progression_repo
        self.reconciler = reconciler
        self.celebrations = celebrations
        self.habit_detector = CelebrationDetector(HABIT_TIERS, cursor_store)
        self.group_detector = CelebrationDetector(GROUP_TIERS, cursor_store)
        self._background = set()

    # -----------------------------------------
    # ⚡ Синхронный путь
    # -----------------------------------------
    def habit_tier_view(self, streak: int):
        return tier_view(streak, HABIT_TIERS)

    def group_tier_view(self, level: int):
        return tier_view(level, GROUP_TIERS)

    def observe_habit(self, habit_id, streak: int):
        """Отдаёт тир сразу, сверку запускает в фоне."""
        view = self.habit_tier_view(streak)
        self._spawn(self.refresh_habit(habit_id, known_streak=streak))
        return view

    def observe_group(self, group_id, level: int):
        view = self.group_tier_view(level)
        self._spawn(self.refresh_group(group_id, known_level=level))
        return view

    def _spawn(self, coro):
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def wait_background(self):
        if self._background:
            await asyncio.gather(*list(self._background))

    # -----------------------------------------
    # 🔄 Асинхронный путь: привычка
    # -----------------------------------------
    async def refresh_habit(self, habit_id, now=None, known_streak: int = None):
        result = {
            "habit_id": habit_id,
            "status": "ok",
            "tier": None,
            "award": None,
            "celebration": None,
        }

        try:
            record = await self.repo.fetch_habit(habit_id)
        except ProgressionFetchError as e:
            logger.warning(f"⚠️ [PROGRESSION] habit={habit_id} прогресс недоступен, тир может быть устаревшим — {e}")
            return self._stale(result, known_streak, HABIT_TIERS)

        if record is None:
            logger.warning(f"[PROGRESSION] habit={habit_id} не найдена")
            result["status"] = "missing"
            return result

        streak = record["counter"]

        try:
            result["tier"] = self.habit_tier_view(streak)

            days = habit_age_days(record["created_at"], now, record.get("timezone"))
            award = await self.reconciler.reconcile(habit_id, days, record["awarded_ids"])
            result["award"] = award

            if award["newly_unlocked"]:
                await self.celebrations.publish({
                    "kind": MILESTONE,
                    "scope_id": habit_scope(habit_id),
                    "payload": {
                        "newly_unlocked": award["newly_unlocked"],
                        "total_xp_awarded": award["total_xp_awarded"],
                    },
                })

            event = await self.habit_detector.catch_up(habit_scope(habit_id), streak)

        except InvariantViolation as e:
            logger.error(
                f"❌ [INVARIANT] habit={habit_id} streak={streak} "
                f"awarded={sorted(record['awarded_ids'])}: {e}"
            )
            result["status"] = "invalid"
            return result

        except CursorStoreError as e:
            logger.warning(f"⚠️ [PROGRESSION] habit={habit_id} сверка отложена — {e}")
            result["status"] = "stale"
            return result

        if event:
            await self.celebrations.publish(event)
            result["celebration"] = event

        return result

    # -----------------------------------------
    # 🔄 Асинхронный путь: группа
    # -----------------------------------------
    async def refresh_group(self, group_id, known_level: int = None):
        result = {
            "group_id": group_id,
            "status": "ok",
            "tier": None,
            "level_progress": None,
            "celebration": None,
        }

        try:
            record = await self.repo.fetch_group(group_id)
        except ProgressionFetchError as e:
            logger.warning(f"⚠️ [PROGRESSION] group={group_id} прогресс недоступен — {e}")
            return self._stale(result, known_level, GROUP_TIERS)

        if record is None:
            logger.warning(f"[PROGRESSION] group={group_id} не найдена")
            result["status"] = "missing"
            return result

        level = record["counter"]

        try:
            result["tier"] = self.group_tier_view(level)
            result["level_progress"] = group_level_progress(record["total_xp"])
            event = await self.group_detector.catch_up(group_scope(group_id), level)

        except InvariantViolation as e:
            logger.error(f"❌ [INVARIANT] group={group_id} level={level}: {e}")
            result["status"] = "invalid"
            return result

        except CursorStoreError as e:
            logger.warning(f"⚠️ [PROGRESSION] group={group_id} курсор недоступен — {e}")
            result["status"] = "stale"
            return result

        if event:
            await self.celebrations.publish(event)
            result["celebration"] = event

        return result

    # -----------------------------------------
    # 🧍 Уровень пользователя
    # -----------------------------------------
    async def refresh_user(self, user_id):
        try:
            total_xp = await self.repo.fetch_user_xp(user_id)
        except ProgressionFetchError as e:
            logger.warning(f"⚠️ [PROGRESSION] user={user_id} XP недоступен — {e}")
            return {"user_id": user_id, "status": "stale", "level": None}

        if total_xp is None:
            return {"user_id": user_id, "status": "missing", "level": None}

        return {"user_id": user_id, "status": "ok", "level": user_level_view(total_xp)}

    def _stale(self, result, known_counter, table):
        result["status"] = "stale"
        if known_counter is not None:
            try:
                result["tier"] = tier_view(known_counter, table)
            except InvariantViolation as e:
                logger.error(f"❌ [INVARIANT] {result}: {e}")
        return result
