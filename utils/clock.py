"""
Модуль: `utils/clock.py`.
Назначение: Единый источник текущего времени (naive UTC, как хранится в БД).
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
