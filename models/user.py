"""
Программа: «CRAVINGS» – бэкенд социального сервиса поиска рецептов.
Модуль: models/user.py – модель учётной записи.

Назначение модуля:
- Описание ORM-модели User (логин, email, хеш пароля).
- Email служит идентификатором аккаунта в сценарии восстановления пароля.
"""

from flask_login import UserMixin

from extensions import db
from utils.clock import utcnow


class User(UserMixin, db.Model):
    """Учётная запись пользователя."""
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {"id": self.id, "username": self.username, "email": self.email}
