# core/errors.py


class ProgressionError(Exception):
    """Базовая ошибка движка прогресса."""


class InvariantViolation(ProgressionError):
    """
    Нарушен инвариант данных: счётчик не попал ни в один тир,
    таблица не отсортирована, отрицательное значение и т.п.
    Это баг выше по течению — операцию прерываем, ничего не сохраняем.
    """


class AwardRequestError(ProgressionError):
    """Бэкенд не подтвердил выдачу. Повтор — при следующем естественном триггере."""


class ProgressionFetchError(ProgressionError):
    """Не удалось получить авторитетный прогресс. UI остаётся на синхронном тире."""


class CursorStoreError(ProgressionError):
    """Хранилище курсоров недоступно."""
