from __future__ import annotations

from typing import Optional

from pydantic import Field

from resume_chat.schemas.common import APIModel


class LogRequest(APIModel):
    """Either an email submission or a chat interaction to forward."""

    email: Optional[str] = Field(default=None)
    user_input: Optional[str] = Field(default=None, alias="userInput")
    bot_reply: Optional[str] = Field(default=None, alias="botReply")
    session_id: Optional[str] = Field(default=None, alias="sessionId")

    def has_interaction(self) -> bool:
        return self.user_input is not None or self.bot_reply is not None


class LogResponse(APIModel):
    """Acknowledgement returned once the webhook accepted the record."""

    logged: bool = True
