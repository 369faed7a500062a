"""
Модуль: `errors.py`.
Назначение: Иерархия ошибок API и их сопоставление с HTTP-статусами.
"""


class ApiError(Exception):
    """Ошибка, которую обработчик превращает в ответ `{"error": message}`."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_response(self):
        return {"error": self.message}, self.status_code


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request"


class InvalidOrExpiredCode(ApiError):
    # Не различаем «неверный», «истёкший» и «уже использованный» код
    status_code = 400
    default_message = "Invalid or expired code"


class AccountNotFound(ApiError):
    status_code = 404
    default_message = "User not found"


class RateLimited(ApiError):
    status_code = 429
    default_message = "Too many requests. Please try again later."


class UpstreamTransportFailure(ApiError):
    """Сбой почтового транспорта, хранилища аккаунтов или LLM-шлюза."""

    status_code = 500
    default_message = "Upstream service failure"


class UpstreamRateLimited(ApiError):
    status_code = 429
    default_message = "Rate limit exceeded, please try again later."


class UpstreamPaymentRequired(ApiError):
    status_code = 402
    default_message = "Payment required."


class InternalError(ApiError):
    status_code = 500
    default_message = "Internal server error"
