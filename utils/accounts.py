"""
Модуль: `utils/accounts.py`.
Назначение: Операции над хранилищем учётных записей, нужные сценарию сброса пароля.
"""

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import generate_password_hash

from errors import UpstreamTransportFailure
from extensions import db
from models.user import User


def find_account_by_email(email: str) -> User | None:
    try:
        return User.query.filter_by(email=email).first()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise UpstreamTransportFailure("Account lookup failed") from exc


def update_account_password(account: User, new_password: str) -> None:
    """Заменяет пароль аккаунта (scrypt-хеш)."""
    try:
        account.password_hash = generate_password_hash(new_password, method="scrypt")
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise UpstreamTransportFailure("Failed to update password") from exc
