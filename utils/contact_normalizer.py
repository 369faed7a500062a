"""
Модуль: `utils/contact_normalizer.py`.
Назначение: Нормализация email-адресов пользователей.
"""

import re


EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def canonical_email(value: str | None) -> str:
    """Приводит email к виду, в котором он хранится (без проверки формата)."""
    if not value:
        return ""
    return value.strip().lower()


def normalize_email(value: str | None) -> str:
    """Возвращает канонический email или пустую строку, если формат некорректен."""
    email = canonical_email(value)
    if not EMAIL_RE.match(email):
        return ""
    return email
