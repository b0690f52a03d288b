import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")

# Часовой пояс по умолчанию для границ дня (локальная полночь)
DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "Europe/Kyiv")

# Процент для динамических целей квестов
DYNAMIC_TARGET_PERCENT = float(os.getenv("DYNAMIC_TARGET_PERCENT", "0.6"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# 0 = очередь без ограничения
CELEBRATION_QUEUE_SIZE = int(os.getenv("CELEBRATION_QUEUE_SIZE", "0"))

# Пул и таймаут запроса: одна операция движка не ждёт дольше одного запроса к БД
DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", "1"))
DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", "10"))
DB_COMMAND_TIMEOUT = float(os.getenv("DB_COMMAND_TIMEOUT", "5"))
