"""
Модуль: `utils/password_policy.py`.
Назначение: Требования к сложности пароля (общие для сервера и клиента сброса).
"""

MIN_PASSWORD_LENGTH = 8

PASSWORD_REQUIREMENTS = (
    ("At least 8 characters", lambda p: len(p) >= MIN_PASSWORD_LENGTH),
    ("Uppercase letter", lambda p: any(ch.isupper() for ch in p)),
    ("Lowercase letter", lambda p: any(ch.islower() for ch in p)),
    ("Number", lambda p: any(ch.isdigit() for ch in p)),
    ("Special character", lambda p: any(not ch.isalnum() for ch in p)),
)


def password_checklist(password: str) -> list[tuple[str, bool]]:
    """Список (требование, выполнено) для подсказки в форме."""
    return [(label, bool(test(password))) for label, test in PASSWORD_REQUIREMENTS]


def failed_requirements(password: str) -> list[str]:
    return [label for label, passed in password_checklist(password or "") if not passed]


def is_password_strong(password: str | None) -> bool:
    return not failed_requirements(password or "")
