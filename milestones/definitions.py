# milestones/definitions.py

# ==================================================
# 🎯 МАЙЛСТОУНЫ ПРИВЫЧКИ — по возрасту привычки в днях
# days строго по возрастанию, id уникальны
# ==================================================

HABIT_MILESTONES = [
    {"id": "m3",   "days": 3,   "title": "Getting Started",   "xp": 50,   "badge": "🎯"},
    {"id": "m7",   "days": 7,   "title": "Week Warrior",      "xp": 100,  "badge": "📅"},
    {"id": "m14",  "days": 14,  "title": "Fortnight Fighter", "xp": 200,  "badge": "💪"},
    {"id": "m21",  "days": 21,  "title": "Habit Former",      "xp": 300,  "badge": "🧠"},
    {"id": "m30",  "days": 30,  "title": "Monthly Master",    "xp": 500,  "badge": "🏆"},
    {"id": "m60",  "days": 60,  "title": "Committed",         "xp": 750,  "badge": "💎"},
    {"id": "m90",  "days": 90,  "title": "Quarter Champion",  "xp": 1000, "badge": "🌟"},
    {"id": "m100", "days": 100, "title": "Century",           "xp": 1500, "badge": "💯"},
    {"id": "m365", "days": 365, "title": "Year Legend",       "xp": 5000, "badge": "🎊"},
]

MILESTONES_BY_ID = {m["id"]: m for m in HABIT_MILESTONES}
