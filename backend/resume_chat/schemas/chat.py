from __future__ import annotations

from typing import Literal, Optional

from pydantic import ConfigDict, Field

from resume_chat.schemas.common import APIModel

ChatRole = Literal["system", "user", "bot"]
FeedbackTag = Literal["up", "down", "heart"]

WIRE_ROLES = {"system": "system", "user": "user", "bot": "assistant"}


class ChatMessage(APIModel):
    """One conversation or prompt message. Instances are never mutated."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    role: ChatRole
    text: str
    tag: Optional[FeedbackTag] = None

    def to_wire(self) -> dict[str, str]:
        """Render as an OpenAI chat message."""

        return {"role": WIRE_ROLES[self.role], "content": self.text}


def toggle_tag(message: ChatMessage, tag: FeedbackTag) -> ChatMessage:
    """Return a copy with ``tag`` set, or cleared when it is already set."""

    next_tag = None if message.tag == tag else tag
    return message.model_copy(update={"tag": next_tag})


class ChatRequest(APIModel):
    """Payload for one chat turn."""

    message: Optional[str] = Field(default=None)
    session_id: Optional[str] = Field(default=None, alias="sessionId")


class ChatResponse(APIModel):
    """Reply text, also used to carry failure messages."""

    reply: str
