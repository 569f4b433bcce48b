from __future__ import annotations

import re

SECRET_PATTERNS = (
    (re.compile(r"(sk-[A-Za-z0-9_\-]{6,})"), "sk-***"),
    (re.compile(r"(Bearer\s+)[A-Za-z0-9._\-]{8,}"), r"\1***"),
    (re.compile(r"eyJ[A-Za-z0-9_\-]{10,}\.[A-Za-z0-9_\-]{10,}\.[A-Za-z0-9_\-]+"), "jwt-***"),
)


def redact_secrets(text: str) -> str:
    """Redact API keys, bearer tokens and service JWTs from a string."""

    for pattern, replacement in SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text
