# milestones/ledger.py

from datetime import datetime

import pytz

from config import DEFAULT_TIMEZONE
from core.errors import InvariantViolation
from .definitions import HABIT_MILESTONES


def validate_milestones(table):
    """Пороги строго по возрастанию, id уникальны, XP не отрицательный."""
    seen_ids = set()
    previous_days = None

    for m in table:
        if m["id"] in seen_ids:
            raise InvariantViolation(f"Повторяющийся id майлстоуна: {m['id']}")
        seen_ids.add(m["id"])

        if previous_days is not None and m["days"] <= previous_days:
            raise InvariantViolation(
                f"Пороги майлстоунов не отсортированы: {m['id']} ({m['days']}) после {previous_days}"
            )
        previous_days = m["days"]

        if m["xp"] < 0:
            raise InvariantViolation(f"Отрицательный XP у майлстоуна {m['id']}")

    return table


# -------------------------------
# 📅 Возраст привычки в днях
# -------------------------------
def habit_age_days(created_at: datetime, now: datetime = None, tz_name: str = None) -> int:
    """
    Разница в календарных днях между created_at и now,
    обе даты приводятся к локальной полуночи.

    День создания = день 1 (а не «через 24 часа»).
    Наивные datetime считаются UTC.
    """
    try:
        tz = pytz.timezone(tz_name or DEFAULT_TIMEZONE)
    except pytz.UnknownTimeZoneError:
        tz = pytz.timezone(DEFAULT_TIMEZONE)

    if now is None:
        now = datetime.now(pytz.utc)

    if created_at.tzinfo is None:
        created_at = pytz.utc.localize(created_at)
    if now.tzinfo is None:
        now = pytz.utc.localize(now)

    created_local = created_at.astimezone(tz).date()
    today_local = now.astimezone(tz).date()

    # created_at из будущего (сбитые часы) → ещё ни одного дня
    return max(0, (today_local - created_local).days + 1)


# -------------------------------
# 🎯 Какие майлстоуны достигнуты
# -------------------------------
def milestones_reached(days: int, table=HABIT_MILESTONES):
    """
    Упорядоченный список майлстоунов с порогом ≤ days.
    Чистая функция: не знает, что уже выдано.
    """
    if not isinstance(days, int) or days < 0:
        raise InvariantViolation(f"Недопустимое число дней: {days!r}")

    return [m for m in table if m["days"] <= days]


def milestone_status(days: int, awarded_ids, table=HABIT_MILESTONES):
    awarded_ids = set(awarded_ids)

    unlocked = [m for m in table if m["id"] in awarded_ids or m["days"] <= days]
    upcoming = [m for m in table if m["days"] > days and m["id"] not in awarded_ids]

    return {
        "unlocked": unlocked,
        "next": upcoming[0] if upcoming else None,
        "upcoming": upcoming[:3],
    }


def has_unclaimed_milestone(days: int, awarded_ids, table=HABIT_MILESTONES) -> bool:
    awarded_ids = set(awarded_ids)
    return any(m["id"] not in awarded_ids for m in milestones_reached(days, table))


validate_milestones(HABIT_MILESTONES)
