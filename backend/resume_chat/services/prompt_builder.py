from __future__ import annotations

from typing import List, Optional

from resume_chat.schemas.chat import ChatMessage

DEFAULT_PERSONA_PROMPT = (
    "You are {name}'s AI assistant. Use the provided context to answer questions.\n"
    "If the answer is not directly in the context, you may still answer using relevant "
    "generalizations or summaries based on the provided information.\n"
    "Avoid fabricating specific experiences or job titles that are not explicitly stated."
)
NO_MATCH_PLACEHOLDER = "(no strong match)"


class PromptBuilder:
    """Compose the persona and question messages for the completion call."""

    def __init__(self, persona_name: str, persona_prompt: Optional[str] = None) -> None:
        self._persona_name = persona_name.strip() or "the candidate"
        template = (persona_prompt or "").strip() or DEFAULT_PERSONA_PROMPT
        self._system_prompt = template.replace("{name}", self._persona_name)

    @property
    def persona_name(self) -> str:
        return self._persona_name

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    def build_messages(self, context_block: str, question: str) -> List[ChatMessage]:
        """Create the two-message prompt for one question."""

        context_text = context_block if context_block else NO_MATCH_PLACEHOLDER
        user_prompt = f"Context:\n{context_text}\n\nQuestion: {question}"
        return [
            ChatMessage(role="system", text=self._system_prompt),
            ChatMessage(role="user", text=user_prompt),
        ]
