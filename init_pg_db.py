from database import get_pool

async def create_progression_tables():
    pool = await get_pool()
    async with pool.acquire() as conn:
        # -------------------------------
        # 🔹 Прогресс привычек (стрик + XP)
        # -------------------------------
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS habit_progression (
                id SERIAL PRIMARY KEY,
                habit_id TEXT UNIQUE NOT NULL,
                user_id BIGINT NOT NULL,
                current_streak INTEGER DEFAULT 0,
                total_xp INTEGER DEFAULT 0,
                timezone TEXT,
                created_at TIMESTAMPTZ DEFAULT NOW(),
                updated_at TIMESTAMPTZ DEFAULT NOW()
            )
        """)

        # -------------------------------
        # 🔹 Прогресс групп (уровень считается из XP)
        # -------------------------------
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS group_progression (
                id SERIAL PRIMARY KEY,
                group_id TEXT UNIQUE NOT NULL,
                total_xp INTEGER DEFAULT 0,
                created_at TIMESTAMPTZ DEFAULT NOW(),
                updated_at TIMESTAMPTZ DEFAULT NOW()
            )
        """)

        # -------------------------------
        # 🔹 Выданные майлстоуны
        #     UNIQUE → повторная выдача = no-op
        # -------------------------------
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS awarded_milestones (
                id SERIAL PRIMARY KEY,
                scope_id TEXT NOT NULL,
                milestone_id TEXT NOT NULL,
                xp INTEGER NOT NULL DEFAULT 0,
                awarded_at TIMESTAMPTZ DEFAULT NOW(),
                UNIQUE(scope_id, milestone_id)
            )
        """)

        # -------------------------------
        # 🔹 Курсоры прогресса (последнее увиденное значение)
        # -------------------------------
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS progress_cursors (
                scope_id TEXT PRIMARY KEY,
                value INTEGER NOT NULL,
                updated_at TIMESTAMPTZ DEFAULT NOW()
            )
        """)

        # -------------------------------
        # 🔹 Индексы
        # -------------------------------
        await conn.execute("CREATE INDEX IF NOT EXISTS idx_habit_progression_user_id ON habit_progression(user_id)")
        await conn.execute("CREATE INDEX IF NOT EXISTS idx_awarded_milestones_scope_id ON awarded_milestones(scope_id)")
