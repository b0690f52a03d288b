# core/tiers.py

from core.errors import InvariantViolation

# =====================================================
# 🔹 Тиры привычки (по длине стрика)
#     min/max — включительно, max=None только у верхнего
# =====================================================
HABIT_TIERS = [
    {"tier": 1, "key": "beginner",  "title": "Beginner",  "emoji": "🌱", "min": 0,   "max": 6,    "multiplier": 1.0},
    {"tier": 2, "key": "novice",    "title": "Novice",    "emoji": "🌿", "min": 7,   "max": 13,   "multiplier": 1.1},
    {"tier": 3, "key": "adept",     "title": "Adept",     "emoji": "🌳", "min": 14,  "max": 29,   "multiplier": 1.2},
    {"tier": 4, "key": "expert",    "title": "Expert",    "emoji": "⭐", "min": 30,  "max": 59,   "multiplier": 1.3},
    {"tier": 5, "key": "master",    "title": "Master",    "emoji": "🔥", "min": 60,  "max": 99,   "multiplier": 1.5},
    {"tier": 6, "key": "legendary", "title": "Legendary", "emoji": "👑", "min": 100, "max": None, "multiplier": 2.0},
]

# =====================================================
# 🔹 Тиры группы (по уровню)
# =====================================================
GROUP_TIERS = [
    {"tier": 1, "key": "crystal",  "title": "Crystal",  "emoji": "💠", "min": 0,  "max": 9,    "multiplier": 1.0},
    {"tier": 2, "key": "ruby",     "title": "Ruby",     "emoji": "❤️", "min": 10, "max": 19,   "multiplier": 1.1},
    {"tier": 3, "key": "amethyst", "title": "Amethyst", "emoji": "💜", "min": 20, "max": 29,   "multiplier": 1.2},
    {"tier": 4, "key": "jade",     "title": "Jade",     "emoji": "💚", "min": 30, "max": 39,   "multiplier": 1.3},
    {"tier": 5, "key": "topaz",    "title": "Topaz",    "emoji": "🧡", "min": 40, "max": 49,   "multiplier": 1.5},
    {"tier": 6, "key": "obsidian", "title": "Obsidian", "emoji": "🖤", "min": 50, "max": None, "multiplier": 2.0},
]


def validate_tier_table(table):
    """
    Проверяет, что границы тиров покрывают все неотрицательные
    значения без дыр и пересечений.
    """
    if not table:
        raise InvariantViolation("Пустая таблица тиров")

    if table[0]["min"] != 0:
        raise InvariantViolation(
            f"Первый тир должен начинаться с 0, а не с {table[0]['min']}"
        )

    for i, tier in enumerate(table):
        if tier["tier"] != i + 1:
            raise InvariantViolation(
                f"Номера тиров должны идти 1..N подряд: позиция {i}, tier={tier['tier']}"
            )

        is_last = i == len(table) - 1

        if tier["max"] is None:
            if not is_last:
                raise InvariantViolation(
                    f"Открытая верхняя граница допустима только у последнего тира (tier={tier['tier']})"
                )
            continue

        if is_last:
            raise InvariantViolation("У последнего тира не должно быть верхней границы")

        if tier["max"] < tier["min"]:
            raise InvariantViolation(
                f"tier={tier['tier']}: max={tier['max']} меньше min={tier['min']}"
            )

        following = table[i + 1]
        if following["min"] != tier["max"] + 1:
            raise InvariantViolation(
                f"Дыра или пересечение между tier={tier['tier']} и tier={following['tier']}"
            )

    return table


def resolve_tier(counter: int, table):
    """
    Счётчик → (тир, прогресс внутри тира в %).

    Работает синхронно и без I/O: тир можно показать сразу,
    ещё до ответа бэкенда.
    """
    if not isinstance(counter, int) or counter < 0:
        raise InvariantViolation(f"Недопустимое значение счётчика: {counter!r}")

    for tier in table:
        if counter < tier["min"]:
            continue
        if tier["max"] is not None and counter > tier["max"]:
            continue

        # Верхний тир — всегда 100%
        if tier["max"] is None:
            return tier, 100.0

        span = tier["max"] - tier["min"] + 1
        progress = (counter - tier["min"]) / span * 100
        return tier, max(0.0, min(100.0, progress))

    raise InvariantViolation(f"Счётчик {counter} не попал ни в один тир")


def next_tier(tier, table):
    """Следующий тир или None, если уже максимальный."""
    index = tier["tier"]
    if index < len(table):
        return table[index]
    return None


def counter_to_next_tier(counter: int, table) -> int:
    """Сколько ещё единиц счётчика нужно до следующего тира (0 на максимуме)."""
    tier, _ = resolve_tier(counter, table)
    if tier["max"] is None:
        return 0
    return tier["max"] + 1 - counter


validate_tier_table(HABIT_TIERS)
validate_tier_table(GROUP_TIERS)
