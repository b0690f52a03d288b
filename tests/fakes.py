import asyncio

from core.errors import AwardRequestError, CursorStoreError, ProgressionFetchError
from milestones.definitions import MILESTONES_BY_ID
from repositories.cursor_repository import MemoryCursorRepository


class FakeAwardBackend:
    """Сервер выдачи: идемпотентный, с возможностью задержать или уронить запрос."""

    def __init__(self):
        self.calls = []
        self.awarded = {}
        self.fail = False
        self.gate = None

    async def award_milestones(self, scope_id, milestone_ids):
        self.calls.append((scope_id, list(milestone_ids)))

        if self.gate is not None:
            await self.gate.wait()

        if self.fail:
            raise AwardRequestError("backend unavailable")

        already = self.awarded.setdefault(scope_id, set())
        new_ids = [i for i in milestone_ids if i not in already]
        already.update(new_ids)

        return {
            "awarded_ids": new_ids,
            "total_xp": sum(MILESTONES_BY_ID[i]["xp"] for i in new_ids),
        }


class FakeProgressionRepo:
    def __init__(self, backend=None):
        self.habits = {}
        self.groups = {}
        self.backend = backend
        self.fail = False

    async def fetch_habit(self, habit_id):
        if self.fail:
            raise ProgressionFetchError("connection lost")

        habit = self.habits.get(habit_id)
        if habit is None:
            return None

        awarded = set(habit.get("awarded_ids", set()))
        if self.backend is not None:
            awarded |= self.backend.awarded.get(habit_id, set())

        return {**habit, "awarded_ids": awarded}

    async def fetch_group(self, group_id):
        if self.fail:
            raise ProgressionFetchError("connection lost")
        return self.groups.get(group_id)

    async def fetch_user_xp(self, user_id):
        if self.fail:
            raise ProgressionFetchError("connection lost")

        owned = [h["total_xp"] for h in self.habits.values() if h["user_id"] == user_id]
        return sum(owned) if owned else None


class SlowCursorStore(MemoryCursorRepository):
    """Каждое чтение уступает цикл событий, чтобы параллельные проверки пересеклись."""

    async def get(self, scope_id):
        await asyncio.sleep(0)
        value = await super().get(scope_id)
        await asyncio.sleep(0)
        return value


class BrokenWriteCursorStore(MemoryCursorRepository):
    async def set(self, scope_id, value):
        raise CursorStoreError("disk full")




class FakeTransaction:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.conn.committed = True
        else:
            self.conn.rolled_back = True
        return False


class FakeConnection:
    """
    Минимальный asyncpg-коннект: INSERT в awarded_milestones
    возвращает None для уже записанных id, как ON CONFLICT DO NOTHING.
    """

    def __init__(self, existing=(), row=None, value=None, error=None):
        self.existing = set(existing)
        self.row = row
        self.value = value
        self.error = error
        self.executed = []
        self.committed = False
        self.rolled_back = False

    def transaction(self):
        return FakeTransaction(self)

    async def fetchrow(self, query, *args):
        if self.error is not None:
            raise self.error

        if "INSERT INTO awarded_milestones" in query:
            _, milestone_id, xp = args
            if milestone_id in self.existing:
                return None
            self.existing.add(milestone_id)
            return {"milestone_id": milestone_id, "xp": xp}

        return self.row

    async def fetch(self, query, *args):
        if self.error is not None:
            raise self.error
        return []

    async def fetchval(self, query, *args):
        if self.error is not None:
            raise self.error
        return self.value

    async def execute(self, query, *args):
        if self.error is not None:
            raise self.error
        self.executed.append((" ".join(query.split()), args))


class FakeAcquire:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self.conn

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakePool:
    def __init__(self, conn):
        self.conn = conn

    def acquire(self):
        return FakeAcquire(self.conn)
