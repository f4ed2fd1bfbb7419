"""
Message types for conversation history and chat-completion requests.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel


class Role(str, Enum):
    """Message role in conversation."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ConversationMessage(BaseModel):
    """A single message in a conversation."""
    role: Role
    content: str

    @classmethod
    def system(cls, content: str) -> "ConversationMessage":
        """Create a system message."""
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "ConversationMessage":
        """Create a user message."""
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "ConversationMessage":
        """Create an assistant message."""
        return cls(role=Role.ASSISTANT, content=content)

    def to_api_format(self) -> dict[str, Any]:
        """Convert to API-compatible format."""
        return {"role": self.role.value, "content": self.content}
