# repositories/progression_repository.py

from core.errors import ProgressionFetchError
from core.levels import group_level_from_xp
from database import DB_ERRORS


class ProgressionRepository:
    """
    Авторитетный прогресс привычек и групп.
    Только SQL, никакой логики тиров и празднований.
    """

    def __init__(self, pool):
        self.pool = pool

    async def fetch_habit(self, habit_id: str):
        """
        Возвращает:
            dict с counter (текущий стрик), created_at, timezone,
            awarded_ids (уже выданные майлстоуны), total_xp
            None — если привычки нет
        """
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow("""
                    SELECT habit_id, user_id, current_streak, total_xp,
                           timezone, created_at
                    FROM habit_progression
                    WHERE habit_id = $1
                """, habit_id)

                if not row:
                    return None

                awarded = await conn.fetch("""
                    SELECT milestone_id FROM awarded_milestones
                    WHERE scope_id = $1
                """, habit_id)

        except DB_ERRORS as e:
            raise ProgressionFetchError(f"habit {habit_id}: {e}") from e

        return {
            "habit_id": row["habit_id"],
            "user_id": row["user_id"],
            "counter": row["current_streak"] or 0,
            "total_xp": row["total_xp"] or 0,
            "timezone": row["timezone"],
            "created_at": row["created_at"],
            "awarded_ids": {r["milestone_id"] for r in awarded},
        }

    async def fetch_group(self, group_id: str):
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow("""
                    SELECT group_id, total_xp
                    FROM group_progression
                    WHERE group_id = $1
                """, group_id)

        except DB_ERRORS as e:
            raise ProgressionFetchError(f"group {group_id}: {e}") from e

        if not row:
            return None

        total_xp = row["total_xp"] or 0

        # уровень не храним отдельно, он всегда следует из XP
        return {
            "group_id": row["group_id"],
            "counter": group_level_from_xp(total_xp),
            "total_xp": total_xp,
        }

    async def fetch_user_xp(self, user_id: int):
        """Суммарный XP пользователя по всем привычкам. None — если привычек нет."""
        try:
            async with self.pool.acquire() as conn:
                return await conn.fetchval("""
                    SELECT SUM(total_xp) FROM habit_progression
                    WHERE user_id = $1
                """, user_id)

        except DB_ERRORS as e:
            raise ProgressionFetchError(f"user {user_id}: {e}") from e
