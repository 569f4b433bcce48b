from __future__ import annotations

import html
from functools import lru_cache
from pathlib import Path
from string import Template

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from resume_chat.services.chat_service import ChatService, get_chat_service

router = APIRouter(tags=["ui"])

STATIC_DIR = Path(__file__).resolve().parents[1] / "static"


@lru_cache(maxsize=1)
def _page_template() -> Template:
    return Template((STATIC_DIR / "index.html").read_text(encoding="utf-8"))


def render_chat_page(assistant_name: str) -> str:
    """Render the chat page with the persona name filled in."""

    return _page_template().safe_substitute(assistant_name=html.escape(assistant_name))


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def chat_page(chat_service: ChatService = Depends(get_chat_service)) -> HTMLResponse:
    return HTMLResponse(render_chat_page(chat_service.persona_name))


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}
