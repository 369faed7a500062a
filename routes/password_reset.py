"""
Программа: «CRAVINGS» – бэкенд социального сервиса поиска рецептов.
Модуль: routes/password_reset.py – восстановление пароля по одноразовому коду.

Назначение модуля:
- POST /send-reset-code: выдача 6-значного кода и отправка его на email.
- POST /reset-password: проверка кода, его погашение и смена пароля.
- Ответ на выдачу кода одинаков для существующих и несуществующих аккаунтов.
"""

import secrets
from datetime import datetime, timedelta

from flask import current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from errors import (
    AccountNotFound,
    ApiError,
    InternalError,
    InvalidOrExpiredCode,
    RateLimited,
    UpstreamTransportFailure,
    ValidationError,
)
from extensions import db
from utils import reset_store
from utils.accounts import find_account_by_email, update_account_password
from utils.clock import utcnow
from utils.contact_normalizer import canonical_email
from utils.password_policy import failed_requirements
from utils.rate_limit import is_rate_limited
from utils.request_payload import json_object
from utils.reset_delivery import send_password_reset_code

ISSUE_ACCEPTED_MESSAGE = "If an account exists, a code will be sent."
RESET_SUCCESS_MESSAGE = "Password updated successfully"


def generate_reset_code(full_range: bool = False) -> str:
    """Возвращает ровно 6 цифр: 100000–999999 либо 000000–999999 при full_range."""
    if full_range:
        return f"{secrets.randbelow(1_000_000):06d}"
    return str(100_000 + secrets.randbelow(900_000))


def issue_reset_code(email: str | None, now: datetime | None = None) -> dict:
    """Выдаёт код для аккаунта с данным email. Ответ не раскрывает наличие аккаунта."""
    email = canonical_email(email if isinstance(email, str) else None)
    if not email:
        raise ValidationError("Email is required")

    account = find_account_by_email(email)
    if account is None:
        current_app.logger.info("Запрошен код восстановления для неизвестного email")
        return {"success": True, "message": ISSUE_ACCEPTED_MESSAGE}

    now = now or utcnow()
    ttl_minutes = int(current_app.config.get("PASSWORD_RESET_CODE_TTL_MINUTES", 10))
    code = generate_reset_code(bool(current_app.config.get("PASSWORD_RESET_CODE_FULL_RANGE", False)))

    try:
        reset_store.put(email, code, now + timedelta(minutes=ttl_minutes))
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise UpstreamTransportFailure("Failed to store reset code") from exc

    if not send_password_reset_code(email, code):
        # Неотправленный код не должен оставаться действующим
        try:
            reset_store.burn(email, code)
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception("Не удалось погасить неотправленный код")
        current_app.logger.warning("Не удалось отправить код восстановления пользователю %s", account.id)
        raise UpstreamTransportFailure("Failed to send email")

    current_app.logger.info("Код восстановления отправлен пользователю %s", account.id)
    return {"success": True, "message": ISSUE_ACCEPTED_MESSAGE}


def verify_and_reset(
    email: str | None,
    code: str | None,
    new_password: str | None,
    now: datetime | None = None,
) -> dict:
    """Погашает код и устанавливает новый пароль.

    Условный UPDATE в `reset_store.mark_used` является единственной проверкой
    кода: из нескольких одновременных запросов с одним кодом успешен ровно один.
    Неверный код засчитывается как попытка; после PASSWORD_RESET_MAX_ATTEMPTS
    попыток действующий код гасится.
    Если после погашения смена пароля не удалась, код остаётся использованным
    и пользователю нужно запросить новый.
    """
    fields = [value if isinstance(value, str) else "" for value in (email, code, new_password)]
    email, code, new_password = canonical_email(fields[0]), fields[1].strip(), fields[2]
    if not email or not code or not new_password:
        raise ValidationError("Email, code, and new password are required")

    missing = failed_requirements(new_password)
    if missing:
        raise ValidationError("Password does not meet requirements: " + ", ".join(missing))

    now = now or utcnow()
    try:
        consumed = reset_store.mark_used(email, code, now)
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise UpstreamTransportFailure("Failed to verify reset code") from exc

    if not consumed:
        current_app.logger.warning("Неверный или просроченный код восстановления для %s", email)
        max_attempts = max(3, int(current_app.config.get("PASSWORD_RESET_MAX_ATTEMPTS", 5)))
        try:
            if reset_store.record_failed_attempt(email, now, max_attempts):
                current_app.logger.warning("Код восстановления для %s погашен: превышено число попыток", email)
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise UpstreamTransportFailure("Failed to verify reset code") from exc
        raise InvalidOrExpiredCode()

    account = find_account_by_email(email)
    if account is None:
        raise AccountNotFound()

    update_account_password(account, new_password)
    current_app.logger.info("Пароль сброшен для пользователя %s", account.id)
    return {"success": True, "message": RESET_SUCCESS_MESSAGE}


def _api_error(error: ApiError):
    body, status = error.to_response()
    return jsonify(body), status


def register_routes(app):
    @app.post("/send-reset-code")
    def send_reset_code():
        try:
            if is_rate_limited("send_reset_code_ip", limit=8, window_seconds=15 * 60):
                raise RateLimited()

            payload = json_object()
            email = payload.get("email")
            if isinstance(email, str) and is_rate_limited(
                "send_reset_code_email",
                limit=5,
                window_seconds=15 * 60,
                identity=canonical_email(email),
            ):
                raise RateLimited()

            return jsonify(issue_reset_code(email)), 200
        except ApiError as exc:
            if exc.status_code >= 500:
                current_app.logger.error("Ошибка в send-reset-code: %s", exc.message)
            return _api_error(exc)
        except Exception:
            current_app.logger.exception("Критическая ошибка в send-reset-code")
            return _api_error(InternalError())

    @app.post("/reset-password")
    def reset_password():
        try:
            if is_rate_limited("reset_password_ip", limit=20, window_seconds=15 * 60):
                raise RateLimited()

            payload = json_object()
            email = payload.get("email")
            if isinstance(email, str) and is_rate_limited(
                "reset_password_email",
                limit=12,
                window_seconds=15 * 60,
                identity=canonical_email(email),
            ):
                raise RateLimited()

            result = verify_and_reset(email, payload.get("code"), payload.get("newPassword"))
            return jsonify(result), 200
        except ApiError as exc:
            if exc.status_code >= 500:
                current_app.logger.error("Ошибка в reset-password: %s", exc.message)
            return _api_error(exc)
        except Exception:
            current_app.logger.exception("Критическая ошибка в reset-password")
            return _api_error(InternalError())
