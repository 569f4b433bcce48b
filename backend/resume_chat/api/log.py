from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from resume_chat.core.errors import ConfigurationError
from resume_chat.schemas.common import ErrorResponse
from resume_chat.schemas.log import LogRequest, LogResponse
from resume_chat.services.interaction_logger import (
    InteractionLogger,
    LogRecord,
    client_metadata,
    get_interaction_logger,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["log"])

NOTHING_TO_LOG = "Nothing to log."


@router.post("/log", response_model=LogResponse)
async def log_interaction(
    payload: LogRequest,
    request: Request,
    interaction_logger: InteractionLogger = Depends(get_interaction_logger),
) -> JSONResponse:
    """Forward an email submission or a chat exchange to the logging webhook."""

    if request.app.state.settings.is_verbose:
        logger.info("Received log payload: %s", payload.model_dump(by_alias=True))

    if not payload.email and not payload.has_interaction():
        return _error(status.HTTP_400_BAD_REQUEST, NOTHING_TO_LOG)

    ip, user_agent = client_metadata(request)
    record = LogRecord(
        ip=ip,
        user_agent=user_agent,
        email=payload.email or None,
        user_input=None if payload.email else payload.user_input,
        bot_reply=None if payload.email else payload.bot_reply,
        session_id=payload.session_id,
    )
    try:
        logged = await interaction_logger.log(record)
    except ConfigurationError:
        logger.error("Missing LOG_WEBHOOK_URL")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server misconfigured")
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error while logging")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Unexpected error")

    if not logged:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to log")
    return JSONResponse(content=LogResponse(logged=True).model_dump())


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())
