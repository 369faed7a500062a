"""
Модуль: `models/__init__.py`.
Назначение: Импорт моделей для корректной регистрации в SQLAlchemy metadata.
"""

from .user import User
from .password_reset_code import PasswordResetCode

__all__ = ["User", "PasswordResetCode"]
