from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import JSONResponse

from resume_chat.core.errors import InputError
from resume_chat.schemas.chat import ChatRequest, ChatResponse
from resume_chat.services.chat_service import ChatService, get_chat_service
from resume_chat.services.interaction_logger import (
    InteractionLogger,
    LogRecord,
    client_metadata,
    get_interaction_logger,
)

router = APIRouter(tags=["chat"])


@router.post("/chat", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    embeddings: Optional[str] = None,
    chat_service: ChatService = Depends(get_chat_service),
    interaction_logger: InteractionLogger = Depends(get_interaction_logger),
) -> JSONResponse:
    """Answer one recruiter question, grounding it in résumé snippets when available."""

    use_embeddings = (embeddings or "").strip().lower() != "false"
    try:
        outcome = await chat_service.answer(payload.message, use_embeddings=use_embeddings)
    except InputError as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ChatResponse(reply=str(exc)).model_dump(),
        )

    if outcome.ok and request.app.state.settings.chat_log_interactions:
        ip, user_agent = client_metadata(request)
        background_tasks.add_task(
            interaction_logger.log_detached,
            LogRecord(
                ip=ip,
                user_agent=user_agent,
                user_input=payload.message,
                bot_reply=outcome.reply,
                session_id=payload.session_id,
            ),
        )

    return JSONResponse(
        status_code=outcome.status_code,
        content=ChatResponse(reply=outcome.reply).model_dump(),
    )
