"""
Программа: «CRAVINGS» – бэкенд социального сервиса поиска рецептов.
Модуль: models/password_reset_code.py – одноразовые коды восстановления пароля.
"""

from extensions import db
from utils.clock import utcnow


class PasswordResetCode(db.Model):
    """Выданный код восстановления: не более одной строки на email после выдачи."""
    __tablename__ = "password_reset_code"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    code = db.Column(db.String(6), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    used = db.Column(db.Boolean, nullable=False, default=False)
    attempts = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (db.Index("ix_password_reset_code_email_code", "email", "code"),)
