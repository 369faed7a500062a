"""
Программа: «CRAVINGS» – бэкенд социального сервиса поиска рецептов.
Модуль: routes/auth.py – регистрация, вход и выход.

Назначение модуля:
- Регистрация новых пользователей с проверкой сложности пароля.
- Вход и выход из системы с использованием Flask-Login.
- Загрузка пользователя по идентификатору для управления сессией.
"""

from flask import current_app, jsonify
from flask_login import current_user, login_required, login_user, logout_user
from werkzeug.security import check_password_hash, generate_password_hash

from extensions import db, login_manager
from models.user import User
from utils.contact_normalizer import canonical_email, normalize_email
from utils.password_policy import failed_requirements
from utils.rate_limit import is_rate_limited
from utils.request_payload import json_object


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def handle_unauthorized():
    return jsonify({"error": "Authentication required"}), 401


def _validate_username(username: str) -> str | None:
    if not username:
        return "Username is required."
    if len(username) < 3:
        return "Username must be at least 3 characters."
    if len(username) > 80:
        return "Username must be at most 80 characters."
    if any(ch.isspace() for ch in username):
        return "Username must not contain spaces."
    return None


def _error(message: str, status: int = 400):
    return jsonify({"error": message}), status


def register_routes(app):
    @app.post("/auth/signup")
    def signup():
        if is_rate_limited("signup", limit=10, window_seconds=15 * 60):
            return _error("Too many sign-up attempts. Please try again later.", 429)

        payload = json_object()
        username = str(payload.get("username") or "").strip()
        raw_email = str(payload.get("email") or "")
        password = str(payload.get("password") or "")

        username_error = _validate_username(username)
        if username_error:
            return _error(username_error)

        email = normalize_email(raw_email)
        if not email:
            return _error("Please enter a valid email.")

        missing = failed_requirements(password)
        if missing:
            return _error("Password does not meet requirements: " + ", ".join(missing))

        if User.query.filter_by(username=username).first():
            return _error("This username is already taken.", 409)
        if User.query.filter_by(email=email).first():
            return _error("An account with this email already exists.", 409)

        user = User(
            username=username,
            email=email,
            password_hash=generate_password_hash(password, method="scrypt"),
        )
        db.session.add(user)
        db.session.commit()
        current_app.logger.info("Зарегистрирован пользователь %s", user.id)
        return jsonify({"success": True, "user": user.to_dict()}), 201

    @app.post("/auth/login")
    def login():
        payload = json_object()
        email = canonical_email(str(payload.get("email") or ""))
        password = str(payload.get("password") or "")

        if is_rate_limited("login_ip", limit=20, window_seconds=10 * 60):
            return _error("Too many sign-in attempts. Please try again later.", 429)
        if is_rate_limited("login_email", limit=10, window_seconds=10 * 60, identity=email or "anonymous"):
            return _error("Too many sign-in attempts for this account. Please try again later.", 429)

        user = User.query.filter_by(email=email).first() if email else None
        if user and check_password_hash(user.password_hash, password):
            login_user(user)
            return jsonify({"success": True, "user": user.to_dict()}), 200

        return _error("Invalid email or password", 401)

    @app.post("/auth/logout")
    @login_required
    def logout():
        logout_user()
        return jsonify({"success": True}), 200

    @app.get("/auth/me")
    @login_required
    def me():
        return jsonify({"user": current_user.to_dict()}), 200
