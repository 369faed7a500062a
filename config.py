"""
Программа: «CRAVINGS» – бэкенд социального сервиса поиска рецептов.
Модуль: config.py – конфигурация приложения.

Назначение модуля:
- Определение базовых параметров приложения Flask (секретный ключ, строка подключения к БД).
- Параметры одноразовых кодов восстановления пароля и доставки писем.
- Параметры LLM-шлюза для генерации рецептов и проверки сообществ.
"""

import os
import warnings


def _get_env_bool(name: str, default: bool = False) -> bool:
    """Преобразует переменную окружения в bool."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_env_int(name: str, default: int) -> int:
    """Преобразует переменную окружения в int."""
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str] | None = None) -> list[str]:
    """Преобразует переменную окружения вида 'a,b,c' в список."""
    value = os.environ.get(name)
    if value is None:
        return list(default or [])
    return [item.strip() for item in value.split(",") if item.strip()]


def _is_production() -> bool:
    """Определяет production-режим по FLASK_ENV."""
    return os.environ.get("FLASK_ENV", "").strip().lower() == "production"


class Config:
    """Базовая конфигурация приложения."""

    _PRODUCTION = _is_production()

    SECRET_KEY = os.environ.get("SECRET_KEY")
    if not SECRET_KEY:
        if _PRODUCTION:
            raise RuntimeError(
                "SECRET_KEY environment variable is required in production. "
                "Set a strong random value before starting the app."
            )
        SECRET_KEY = "dev-insecure-secret-key"
        warnings.warn(
            "SECRET_KEY is not set. Using insecure development fallback key.",
            RuntimeWarning,
            stacklevel=1,
        )

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:////app/instance/cravings.db" if _PRODUCTION else "sqlite:///cravings.db",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SESSION_COOKIE_SECURE = _get_env_bool("SESSION_COOKIE_SECURE", default=_PRODUCTION)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.environ.get("SESSION_COOKIE_SAMESITE", "Lax")

    # Функции вызываются с фронтенда на другом домене, поэтому по умолчанию "*"
    CORS_ORIGINS = _get_env_list("CORS_ORIGINS", default=["*"])
    CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

    RATE_LIMIT_ENABLED = _get_env_bool("RATE_LIMIT_ENABLED", default=True)

    PASSWORD_RESET_CODE_TTL_MINUTES = _get_env_int("PASSWORD_RESET_CODE_TTL_MINUTES", 10)
    # False: коды 100000–999999 (как в мобильном клиенте), True: 000000–999999
    PASSWORD_RESET_CODE_FULL_RANGE = _get_env_bool("PASSWORD_RESET_CODE_FULL_RANGE", default=False)
    # После стольких неверных кодов действующий код гасится
    PASSWORD_RESET_MAX_ATTEMPTS = _get_env_int("PASSWORD_RESET_MAX_ATTEMPTS", 5)

    EMAIL_TRANSPORT = os.environ.get("EMAIL_TRANSPORT", "resend").strip().lower() or "resend"
    MAIL_FROM = os.environ.get("MAIL_FROM", "CRAVINGS <onboarding@resend.dev>").strip()
    RESEND_API_KEY = os.environ.get("RESEND_API_KEY", "").strip()
    RESEND_API_URL = os.environ.get("RESEND_API_URL", "https://api.resend.com/emails").strip()
    EMAIL_API_TIMEOUT = _get_env_int("EMAIL_API_TIMEOUT", 10)

    SMTP_HOST = os.environ.get("SMTP_HOST", "").strip()
    SMTP_PORT = _get_env_int("SMTP_PORT", 587)
    SMTP_USER = os.environ.get("SMTP_USER", "").strip()
    SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD", "")
    SMTP_USE_TLS = _get_env_bool("SMTP_USE_TLS", default=True)
    SMTP_USE_SSL = _get_env_bool("SMTP_USE_SSL", default=False)

    LLM_GATEWAY_URL = os.environ.get(
        "LLM_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions"
    ).strip()
    LLM_API_KEY = os.environ.get("LLM_API_KEY", "").strip()
    LLM_MODEL = os.environ.get("LLM_MODEL", "google/gemini-2.5-flash").strip()
    LLM_TIMEOUT = _get_env_int("LLM_TIMEOUT", 30)

    # Таймаут HTTP-клиента сценария восстановления (client/api_client.py)
    RESET_CLIENT_TIMEOUT = _get_env_int("RESET_CLIENT_TIMEOUT", 15)
