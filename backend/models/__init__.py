"""Data models for BelowMSRP Chat Assistant."""
from .conversation import Session, Turn, USER_ROLE, ASSISTANT_ROLE
from .api import (
    MessageRequest,
    EmailRequest,
    SessionRequest,
    ErrorInfo,
    TurnModel,
    SessionResponse,
    MessageResponse,
    HistoryResponse,
)

__all__ = [
    "Session",
    "Turn",
    "USER_ROLE",
    "ASSISTANT_ROLE",
    "MessageRequest",
    "EmailRequest",
    "SessionRequest",
    "ErrorInfo",
    "TurnModel",
    "SessionResponse",
    "MessageResponse",
    "HistoryResponse",
]
