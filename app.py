"""
Название: «CRAVINGS»
Язык: Python (Flask)
Краткое описание: бэкенд социального сервиса поиска рецептов – восстановление пароля
по одноразовому коду, учётные записи и LLM-функции подбора рецептов и модерации сообществ
"""

import os

from flask import Flask

from config import Config
from extensions import db, login_manager, cors
import models  # noqa: F401 - регистрирует модели для db.create_all()
from routes.auth import register_routes as register_auth_routes
from routes.password_reset import register_routes as register_password_reset_routes
from routes.ai import register_routes as register_ai_routes
from utils.cleanup import cleanup_stale_reset_codes, purge_reset_codes_command
from utils.rate_limit import InMemoryRateLimiter


def create_app(config_object=Config) -> Flask:
    """Фабрика приложения, собирающая все модули воедино."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Инициализация расширений
    db.init_app(app)
    login_manager.init_app(app)
    cors.init_app(
        app,
        resources={r"/*": {"origins": app.config["CORS_ORIGINS"]}},
        allow_headers=app.config["CORS_ALLOW_HEADERS"],
        send_wildcard=True,
    )

    app.extensions["rate_limiter"] = InMemoryRateLimiter()
    os.makedirs(app.instance_path, exist_ok=True)

    # Регистрация роутов по модулям
    register_auth_routes(app)
    register_password_reset_routes(app)
    register_ai_routes(app)
    app.cli.add_command(purge_reset_codes_command)

    with app.app_context():
        # Создаем отсутствующие таблицы (без изменения существующих колонок)
        db.create_all()

    @app.after_request
    def apply_security_headers(response):
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        return response

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}, 200

    return app


app = create_app()


if __name__ == "__main__":
    with app.app_context():
        # Удаляем использованные и просроченные коды при запуске приложения
        cleanup_stale_reset_codes()
    is_production = os.environ.get("FLASK_ENV", "").lower() == "production"
    app.run(debug=not is_production)
