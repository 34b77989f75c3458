"""Conversation data models."""
from dataclasses import dataclass, field
from typing import Dict, List

USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"
ROLES = (USER_ROLE, ASSISTANT_ROLE)


@dataclass(frozen=True)
class Turn:
    """Represents a single message in a conversation."""
    role: str
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Invalid turn role: {self.role!r}")

    @classmethod
    def user(cls, content: str) -> "Turn":
        return cls(role=USER_ROLE, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Turn":
        return cls(role=ASSISTANT_ROLE, content=content)

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class Session:
    """Represents a visitor's chat session."""
    session_id: str
    history: List[Turn] = field(default_factory=list)

