"""
Модуль: `client/reset_flow.py`.
Назначение: Трёхшаговый сценарий восстановления пароля на стороне клиента.

Шаги: EmailStep -> VerifyStep(email) -> DoneStep. Переход между шагами
вычисляется чистой функцией `transition(state, event)`; контроллер только
выполняет сетевые вызовы и подаёт события.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Union

from utils.password_policy import is_password_strong, password_checklist

from .api_client import ResetRequestFailed

CODE_LENGTH = 6


@dataclass(frozen=True)
class EmailStep:
    step: str = "email"


@dataclass(frozen=True)
class VerifyStep:
    email: str
    step: str = "verify"


@dataclass(frozen=True)
class DoneStep:
    step: str = "done"


FlowState = Union[EmailStep, VerifyStep, DoneStep]


@dataclass(frozen=True)
class CodeSent:
    email: str


@dataclass(frozen=True)
class CodeSendFailed:
    message: str


@dataclass(frozen=True)
class ResetSucceeded:
    pass


@dataclass(frozen=True)
class ResetFailed:
    message: str


class InvalidTransition(Exception):
    pass


class FlowBusy(Exception):
    """Предыдущий запрос контроллера ещё не завершён."""


def transition(state: FlowState, event) -> FlowState:
    if isinstance(state, EmailStep):
        if isinstance(event, CodeSent):
            return VerifyStep(email=event.email)
        if isinstance(event, CodeSendFailed):
            return state
    elif isinstance(state, VerifyStep):
        # Повторная отправка кода оставляет нас на том же шаге
        if isinstance(event, (CodeSent, CodeSendFailed, ResetFailed)):
            return state
        if isinstance(event, ResetSucceeded):
            return DoneStep()
    raise InvalidTransition(f"{type(event).__name__} is not allowed in step {state.step!r}")


def can_submit_reset(code: str, new_password: str) -> bool:
    return len(code or "") == CODE_LENGTH and is_password_strong(new_password)


class ResetFlowController:
    """Ведёт пользователя по шагам и не допускает параллельных запросов."""

    def __init__(self, api, on_success: Callable[[], None] | None = None):
        self.api = api
        self.on_success = on_success
        self.state: FlowState = EmailStep()
        self.error: str | None = None
        self.notice: str | None = None
        self._in_flight = Lock()

    @property
    def busy(self) -> bool:
        return self._in_flight.locked()

    def password_checklist(self, new_password: str) -> list[tuple[str, bool]]:
        return password_checklist(new_password or "")

    def request_code(self, email: str) -> FlowState:
        if not isinstance(self.state, EmailStep):
            raise InvalidTransition(f"Cannot request a code in step {self.state.step!r}")
        return self._send_code((email or "").strip())

    def resend_code(self) -> FlowState:
        if not isinstance(self.state, VerifyStep):
            raise InvalidTransition(f"Cannot resend a code in step {self.state.step!r}")
        return self._send_code(self.state.email)

    def submit_reset(self, code: str, new_password: str) -> FlowState:
        if not isinstance(self.state, VerifyStep):
            raise InvalidTransition(f"Cannot reset the password in step {self.state.step!r}")
        if not can_submit_reset(code, new_password):
            self.error = "Enter the 6-digit code and a password that meets all requirements."
            return self.state

        with self._exclusive():
            try:
                self.api.reset_password(self.state.email, code, new_password)
            except ResetRequestFailed as exc:
                self._apply(ResetFailed(exc.message))
                return self.state
            self._apply(ResetSucceeded())
            self.notice = "Your password has been successfully reset."

        if self.on_success is not None:
            self.on_success()
        return self.state

    def _send_code(self, email: str) -> FlowState:
        if not email:
            self.error = "Email is required"
            return self.state

        with self._exclusive():
            try:
                self.api.send_reset_code(email)
            except ResetRequestFailed as exc:
                self._apply(CodeSendFailed(exc.message))
                return self.state
            self._apply(CodeSent(email))
            self.notice = "Check your email for the 6-digit verification code."
        return self.state

    def _apply(self, event) -> None:
        self.state = transition(self.state, event)
        self.error = getattr(event, "message", None)

    @contextmanager
    def _exclusive(self):
        if not self._in_flight.acquire(blocking=False):
            raise FlowBusy("A request is already in progress")
        try:
            yield
        finally:
            self._in_flight.release()
