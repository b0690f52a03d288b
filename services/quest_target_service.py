# services/quest_target_service.py

from config import DYNAMIC_TARGET_PERCENT


# -------------------------------
# 🎚 Динамическая цель квеста
# -------------------------------
def calculate_dynamic_target(base_target: int, habits_count: int, percentage: float = None) -> int:
    """
    Пока привычек не больше базовой цели — цель не меняется.
    Дальше — процент от числа привычек, но не ниже базы.
    """
    if percentage is None:
        percentage = DYNAMIC_TARGET_PERCENT

    if habits_count <= base_target:
        return base_target

    # .5 округляем вверх, не банковским round()
    scaled = int(habits_count * percentage + 0.5)
    return max(base_target, scaled)


def adjusted_target(quest: dict, habits_count: int) -> int:
    if not quest.get("is_dynamic"):
        return quest["target_value"]

    return calculate_dynamic_target(
        quest["target_value"],
        habits_count,
        quest.get("dynamic_percentage"),
    )


def quest_progress_percentage(progress_value: int, target: int, completed: bool = False) -> int:
    if completed:
        return 100
    if target <= 0:
        return 100
    return min(100, int(progress_value * 100 / target + 0.5))
