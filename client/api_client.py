"""
Модуль: `client/api_client.py`.
Назначение: HTTP-клиент функций /send-reset-code и /reset-password.
"""

import json
import socket
import urllib.error
import urllib.request

from config import Config

DEFAULT_TIMEOUT = Config.RESET_CLIENT_TIMEOUT


class ResetRequestFailed(Exception):
    """Запрос не удался; `message` показывается пользователю как есть."""

    def __init__(self, message: str, status: int | None = None, retryable: bool = False):
        super().__init__(message)
        self.message = message
        self.status = status
        self.retryable = retryable


class ResetApiClient:
    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT, api_key: str | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.api_key = api_key

    def send_reset_code(self, email: str) -> dict:
        return self._post("/send-reset-code", {"email": email})

    def reset_password(self, email: str, code: str, new_password: str) -> dict:
        return self._post(
            "/reset-password",
            {"email": email, "code": code, "newPassword": new_password},
        )

    def _post(self, path: str, payload: dict) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"

        request = urllib.request.Request(
            f"{self.base_url}{path}",
            data=json.dumps(payload).encode("utf-8"),
            headers=headers,
            method="POST",
        )
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                return json.loads(response.read().decode("utf-8") or "{}")
        except urllib.error.HTTPError as exc:
            raise ResetRequestFailed(_error_message(exc), status=exc.code) from exc
        except (TimeoutError, socket.timeout) as exc:
            raise ResetRequestFailed("Request timed out. Please try again.", retryable=True) from exc
        except urllib.error.URLError as exc:
            if isinstance(exc.reason, (TimeoutError, socket.timeout)):
                raise ResetRequestFailed("Request timed out. Please try again.", retryable=True) from exc
            raise ResetRequestFailed("Network error. Please try again.", retryable=True) from exc
        except json.JSONDecodeError as exc:
            raise ResetRequestFailed("Unexpected server response.") from exc


def _error_message(exc: urllib.error.HTTPError) -> str:
    try:
        body = json.loads(exc.read().decode("utf-8") or "{}")
    except (ValueError, OSError):
        body = {}
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return f"Request failed with status {exc.code}"
