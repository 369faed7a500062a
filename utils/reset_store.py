"""
Модуль: `utils/reset_store.py`.
Назначение: Хранилище одноразовых кодов восстановления пароля.

- На каждый email после выдачи остаётся не более одной строки.
- Неверные коды считаются; после лимита попыток код гасится.
- Погашение кода выполняется одним условным UPDATE: проверка
  «код действителен» и отметка «использован» неразделимы.
"""

from datetime import datetime

from sqlalchemy import or_

from extensions import db
from models.password_reset_code import PasswordResetCode


def put(email: str, code: str, expires_at: datetime) -> PasswordResetCode:
    """Сохраняет новый код, удаляя все предыдущие коды для этого email."""
    PasswordResetCode.query.filter_by(email=email).delete(synchronize_session=False)
    entry = PasswordResetCode(email=email, code=code, expires_at=expires_at, used=False, attempts=0)
    db.session.add(entry)
    db.session.commit()
    return entry


def find_valid(email: str, code: str, now: datetime) -> PasswordResetCode | None:
    return (
        PasswordResetCode.query.filter(
            PasswordResetCode.email == email,
            PasswordResetCode.code == code,
            PasswordResetCode.used.is_(False),
            PasswordResetCode.expires_at >= now,
        )
        .order_by(PasswordResetCode.created_at.desc())
        .first()
    )


def mark_used(email: str, code: str, now: datetime) -> bool:
    """Гасит действующий код; True, если строка была затронута."""
    affected = PasswordResetCode.query.filter(
        PasswordResetCode.email == email,
        PasswordResetCode.code == code,
        PasswordResetCode.used.is_(False),
        PasswordResetCode.expires_at >= now,
    ).update({PasswordResetCode.used: True}, synchronize_session=False)
    db.session.commit()
    return affected > 0


def burn(email: str, code: str) -> None:
    """Гасит код без проверки срока, например если письмо не ушло."""
    PasswordResetCode.query.filter(
        PasswordResetCode.email == email,
        PasswordResetCode.code == code,
    ).update({PasswordResetCode.used: True}, synchronize_session=False)
    db.session.commit()


def record_failed_attempt(email: str, now: datetime, max_attempts: int) -> bool:
    """Засчитывает неверный код для действующей строки email.

    Когда число попыток достигает `max_attempts`, код гасится.
    Возвращает True, если код был погашен этим вызовом.
    """
    live = PasswordResetCode.query.filter(
        PasswordResetCode.email == email,
        PasswordResetCode.used.is_(False),
        PasswordResetCode.expires_at >= now,
    )
    live.update(
        {PasswordResetCode.attempts: PasswordResetCode.attempts + 1},
        synchronize_session=False,
    )
    burned = PasswordResetCode.query.filter(
        PasswordResetCode.email == email,
        PasswordResetCode.used.is_(False),
        PasswordResetCode.attempts >= max_attempts,
    ).update({PasswordResetCode.used: True}, synchronize_session=False)
    db.session.commit()
    return burned > 0


def purge_stale(now: datetime) -> int:
    """Удаляет использованные и просроченные коды. Возвращает число удалённых строк."""
    deleted = PasswordResetCode.query.filter(
        or_(PasswordResetCode.used.is_(True), PasswordResetCode.expires_at < now)
    ).delete(synchronize_session=False)
    db.session.commit()
    return deleted
