from __future__ import annotations

NO_CONTEXT_PREAMBLE = (
    "I don't have exact details on that, but here's what I can share "
    "from the general context I know:\n\n"
)
APOLOGY_PREFIX = "Sorry"


def redirect_message(persona_name: str) -> str:
    return (
        "Based on the information I have, I'm not sure about that. "
        f"You might want to ask {persona_name} directly!"
    )


def format_reply(reply: str, context_block: str, persona_name: str) -> str:
    """Soften replies that were generated without grounding context."""

    if context_block:
        return reply
    if reply.strip().startswith(APOLOGY_PREFIX):
        return redirect_message(persona_name)
    return NO_CONTEXT_PREAMBLE + reply
