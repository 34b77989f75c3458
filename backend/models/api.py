"""API request and response models."""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""
    model_config = ConfigDict(populate_by_name=True)


class MessageRequest(CamelModel):
    """Body of POST /chat/message."""
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    message: str = Field(..., min_length=1)


class EmailRequest(CamelModel):
    """Body of POST /chat/email."""
    session_id: str = Field(..., alias="sessionId", min_length=1)
    email: str = Field(..., min_length=1)


class SessionRequest(CamelModel):
    """Body of POST /chat/reset."""
    session_id: str = Field(..., alias="sessionId", min_length=1)


class ErrorInfo(BaseModel):
    code: str
    message: str


class TurnModel(BaseModel):
    role: str
    content: str


class SessionResponse(CamelModel):
    status: str
    session_id: str = Field(..., alias="sessionId")


class MessageResponse(CamelModel):
    status: str = "ok"
    session_id: str = Field(..., alias="sessionId")
    reply: str
    error: Optional[ErrorInfo] = None


class HistoryResponse(CamelModel):
    status: str = "ok"
    session_id: str = Field(..., alias="sessionId")
    history: List[TurnModel]
