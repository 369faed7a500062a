"""
Модуль: `client/__init__.py`.
Назначение: Клиентская часть сценария восстановления пароля (HTTP-клиент и контроллер шагов).
"""

from .api_client import ResetApiClient, ResetRequestFailed
from .reset_flow import (
    DoneStep,
    EmailStep,
    FlowBusy,
    ResetFlowController,
    VerifyStep,
    can_submit_reset,
    transition,
)

__all__ = [
    "ResetApiClient",
    "ResetRequestFailed",
    "EmailStep",
    "VerifyStep",
    "DoneStep",
    "FlowBusy",
    "ResetFlowController",
    "can_submit_reset",
    "transition",
]
