# core/levels.py

# -------------------------------
# 👥 Группы: 100 XP = 1 уровень
# -------------------------------
GROUP_XP_PER_LEVEL = 100


def group_level_from_xp(xp: int) -> int:
    return max(1, xp // GROUP_XP_PER_LEVEL + 1)


def group_level_progress(xp: int) -> int:
    """Процент внутри текущего уровня группы (0–99)."""
    level = group_level_from_xp(xp)
    xp_in_level = xp - (level - 1) * GROUP_XP_PER_LEVEL
    return max(0, xp_in_level * 100 // GROUP_XP_PER_LEVEL)


# -------------------------------
# 🧍 Пользователь: кривая XP по уровням
# (до_уровня, база, шаг)
# -------------------------------
XP_CURVE_BANDS = [
    (5,    80,   20),    # 80, 100, 120, 140, 160
    (10,   160,  40),    # 200 … 360
    (15,   360,  80),    # 440 … 760
    (20,   760,  120),   # 880 … 1360
    (25,   1360, 200),   # 1560 … 2360
    (30,   2360, 300),   # 2660 … 3860
    (35,   3860, 400),   # 4260 … 5860
]
XP_CURVE_TAIL = (35, 5860, 500)


def xp_for_next_level(level: int) -> int:
    """Сколько XP нужно, чтобы перейти с уровня level на level + 1."""
    if level < 1:
        level = 1

    previous_cap = 0
    for cap, base, step in XP_CURVE_BANDS:
        if level <= cap:
            # первая полоса считается от уровня 1, остальные — от предыдущей границы
            if previous_cap == 0:
                return base + (level - 1) * step
            return base + (level - previous_cap) * step
        previous_cap = cap

    cap, base, step = XP_CURVE_TAIL
    return base + (level - cap) * step


def total_xp_for_level(target_level: int) -> int:
    """Суммарный XP, нужный чтобы достичь target_level с нуля."""
    return sum(xp_for_next_level(lvl) for lvl in range(1, target_level))


def level_from_total_xp(total_xp: int) -> int:
    level = 1
    spent = 0
    while True:
        need = xp_for_next_level(level)
        if spent + need > total_xp:
            return level
        spent += need
        level += 1


def user_level_view(total_xp: int):
    """Уровень пользователя и прогресс до следующего (для шапки профиля)."""
    total_xp = max(0, total_xp or 0)
    level = level_from_total_xp(total_xp)
    xp_into_level = total_xp - total_xp_for_level(level)
    xp_needed = xp_for_next_level(level)

    return {
        "level": level,
        "total_xp": total_xp,
        "xp_into_level": xp_into_level,
        "xp_for_next_level": xp_needed,
        "progress": xp_into_level * 100 // xp_needed,
    }
