from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from resume_chat.api import chat as chat_api
from resume_chat.api import log as log_api
from resume_chat.api import ui as ui_api
from resume_chat.core.config import get_settings
from resume_chat.core.logging import setup_logging
from resume_chat.schemas.chat import ChatResponse
from resume_chat.schemas.common import ErrorResponse
from resume_chat.services.chat_service import NO_INPUT_REPLY, create_chat_service
from resume_chat.services.interaction_logger import create_interaction_logger

INVALID_LOG_PAYLOAD = "Invalid log payload."


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Answer malformed bodies in the owning endpoint's response shape."""

    if request.url.path == "/chat":
        content = ChatResponse(reply=NO_INPUT_REPLY).model_dump()
    elif request.url.path == "/log":
        missing_body = any(
            error.get("type") == "missing" and tuple(error.get("loc", ())) == ("body",)
            for error in exc.errors()
        )
        message = log_api.NOTHING_TO_LOG if missing_body else INVALID_LOG_PAYLOAD
        content = ErrorResponse(error=message).model_dump()
    else:
        return await request_validation_exception_handler(request, exc)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    setup_logging("DEBUG" if settings.verbose_logging else settings.log_level)

    app = FastAPI(title="Résumé Chat Assistant")
    app.state.settings = settings
    app.state.chat_service = create_chat_service(settings)
    app.state.interaction_logger = create_interaction_logger(settings)

    origins = settings.parsed_cors_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(ui_api.router)
    app.include_router(chat_api.router)
    app.include_router(log_api.router)

    return app


app = create_app()
