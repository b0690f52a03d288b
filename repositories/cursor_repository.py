# repositories/cursor_repository.py

from core.errors import CursorStoreError
from database import DB_ERRORS

# =====================================================
# 🔹 Курсоры прогресса: одно целое число на scope
#     "последнее значение, которое клиент увидел и принял".
#     Переживает рестарт процесса, откатов нет.
# =====================================================


class PgCursorRepository:
    def __init__(self, pool):
        self.pool = pool

    async def get(self, scope_id: str):
        try:
            async with self.pool.acquire() as conn:
                return await conn.fetchval("""
                    SELECT value FROM progress_cursors
                    WHERE scope_id = $1
                """, scope_id)
        except DB_ERRORS as e:
            raise CursorStoreError(f"read {scope_id}: {e}") from e

    async def set(self, scope_id: str, value: int):
        try:
            async with self.pool.acquire() as conn:
                await conn.execute("""
                    INSERT INTO progress_cursors (scope_id, value, updated_at)
                    VALUES ($1, $2, NOW())
                    ON CONFLICT (scope_id)
                    DO UPDATE SET value = EXCLUDED.value, updated_at = NOW()
                """, scope_id, value)
        except DB_ERRORS as e:
            raise CursorStoreError(f"write {scope_id}: {e}") from e


class MemoryCursorRepository:
    """Курсоры в памяти процесса (тесты, локальный запуск без БД)."""

    def __init__(self, initial=None):
        self.values = dict(initial or {})

    async def get(self, scope_id: str):
        return self.values.get(scope_id)

    async def set(self, scope_id: str, value: int):
        self.values[scope_id] = value
