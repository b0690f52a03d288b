# milestones/repository.py

from core.errors import AwardRequestError
from database import DB_ERRORS
from .definitions import MILESTONES_BY_ID


class MilestoneRepository:
    def __init__(self, pool):
        self.pool = pool

    async def award_milestones(self, scope_id: str, milestone_ids):
        """
        Выдаёт пачку майлстоунов одной транзакцией (всё или ничего).

        Повторная выдача уже записанного id — no-op, не ошибка.
        Возвращает только реально записанные этим запросом id и их XP.
        """
        insert_query = """
        INSERT INTO awarded_milestones (scope_id, milestone_id, xp)
        VALUES ($1, $2, $3)
        ON CONFLICT (scope_id, milestone_id) DO NOTHING
        RETURNING milestone_id, xp
        """
        xp_query = """
        UPDATE habit_progression
        SET total_xp = total_xp + $1,
            updated_at = NOW()
        WHERE habit_id = $2
        """

        awarded_ids = []
        total_xp = 0

        try:
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    for milestone_id in milestone_ids:
                        milestone = MILESTONES_BY_ID.get(milestone_id)
                        if milestone is None:
                            # откатываем всю пачку
                            raise AwardRequestError(f"Неизвестный майлстоун {milestone_id}")

                        row = await conn.fetchrow(insert_query, scope_id, milestone_id, milestone["xp"])
                        if row is None:
                            continue

                        awarded_ids.append(row["milestone_id"])
                        total_xp += row["xp"]

                    if total_xp > 0:
                        await conn.execute(xp_query, total_xp, scope_id)

        except DB_ERRORS as e:
            raise AwardRequestError(f"award failed for {scope_id}: {e}") from e

        return {"awarded_ids": awarded_ids, "total_xp": total_xp}
