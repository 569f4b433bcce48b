from __future__ import annotations


class InputError(ValueError):
    """Raised when a required request field is missing or empty."""


class ConfigurationError(RuntimeError):
    """Raised when a required deployment setting is absent."""


class UpstreamError(RuntimeError):
    """Raised when a downstream service (completion, embedding, search, webhook) fails."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


class QuotaExceededError(UpstreamError):
    """Upstream failure caused by an exhausted billing quota."""


class EmbeddingError(UpstreamError):
    """Raised when embedding generation fails."""

    def __init__(self, message: str, code: str = "EMBEDDING_FAILED") -> None:
        super().__init__(code, message)


def is_quota_error(exc: BaseException) -> bool:
    """Match quota failures by type or by the "quota" token in the message."""

    if isinstance(exc, QuotaExceededError):
        return True
    return "quota" in str(exc).lower()
