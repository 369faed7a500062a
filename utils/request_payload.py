"""
Модуль: `utils/request_payload.py`.
Назначение: Чтение JSON-тела запроса функций.
"""

from flask import request


def json_object() -> dict:
    """Возвращает тело запроса как словарь; строка, список или пустое тело дают {}."""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}
