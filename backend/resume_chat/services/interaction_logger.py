from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx
from fastapi import Request

from resume_chat.core.config import Settings
from resume_chat.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"


@dataclass(frozen=True)
class LogRecord:
    """One email submission or chat exchange bound for the webhook."""

    ip: str = UNKNOWN
    user_agent: str = UNKNOWN
    email: Optional[str] = None
    user_input: Optional[str] = None
    bot_reply: Optional[str] = None
    session_id: Optional[str] = None

    @property
    def is_email(self) -> bool:
        return bool(self.email)


def client_metadata(request: Request) -> tuple[str, str]:
    """Return the caller's forwarded IP and user agent, or ``"unknown"``."""

    ip = request.headers.get("x-forwarded-for") or UNKNOWN
    user_agent = request.headers.get("user-agent") or UNKNOWN
    return ip, user_agent


def format_timestamp(moment: datetime, tz_name: str) -> str:
    """Render ``moment`` like ``10/16/2026, 3:04:05 PM`` in the given zone."""

    try:
        zone = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown LOG_TIMEZONE=%s; fallback to UTC", tz_name)
        zone = ZoneInfo("UTC")
    local = moment.astimezone(zone)
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return (
        f"{local.month}/{local.day}/{local.year}, "
        f"{hour}:{local.minute:02d}:{local.second:02d} {meridiem}"
    )


class InteractionLogger:
    """Best-effort forwarder of log records to a spreadsheet webhook."""

    def __init__(
        self,
        webhook_url: str,
        *,
        tz_name: str = "America/New_York",
        timeout_sec: float = 20.0,
        verbose: bool = False,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._webhook_url = webhook_url.strip()
        self._tz_name = tz_name
        self._timeout_sec = timeout_sec
        self._verbose = verbose
        self._client = http_client

    @property
    def configured(self) -> bool:
        return bool(self._webhook_url)

    def build_payload(self, record: LogRecord, now: Optional[datetime] = None) -> dict[str, Any]:
        """Shape the webhook body; the timestamp is always taken server-side."""

        timestamp = format_timestamp(now or datetime.now(timezone.utc), self._tz_name)
        if record.is_email:
            payload: dict[str, Any] = {
                "timestamp": timestamp,
                "email": record.email,
                "ip": record.ip,
                "userAgent": record.user_agent,
            }
        else:
            payload = {
                "timestamp": timestamp,
                "userInput": record.user_input,
                "botReply": record.bot_reply,
                "ip": record.ip,
                "userAgent": record.user_agent,
            }
        if record.session_id:
            payload["sessionId"] = record.session_id
        return payload

    async def log(self, record: LogRecord) -> bool:
        """Send one record. Returns ``False`` when the webhook did not accept it."""

        if not self._webhook_url:
            raise ConfigurationError("LOG_WEBHOOK_URL is not configured")

        payload = self.build_payload(record)
        if self._verbose:
            logger.info("Forwarding log payload: %s", payload)
        try:
            if self._client:
                response = await self._client.post(
                    self._webhook_url, json=payload, timeout=self._timeout_sec
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout_sec) as client:
                    response = await client.post(self._webhook_url, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Log webhook request failed: %s", exc)
            return False

        if not response.is_success:
            logger.error(
                "Log webhook failed with status %s: %s", response.status_code, response.text
            )
            return False
        return True

    async def log_detached(self, record: LogRecord) -> None:
        """Background-task wrapper around :meth:`log` that never raises."""

        try:
            await self.log(record)
        except ConfigurationError:
            logger.error("Interaction not logged: LOG_WEBHOOK_URL is not configured")
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error while logging interaction")


def create_interaction_logger(settings: Settings) -> InteractionLogger:
    """Wire the webhook logger from settings."""

    if not settings.log_webhook_url.strip():
        logger.warning("LOG_WEBHOOK_URL is missing; /log will report a misconfiguration")
    return InteractionLogger(
        settings.log_webhook_url,
        tz_name=settings.log_timezone,
        timeout_sec=settings.http_timeout_sec,
        verbose=settings.is_verbose,
    )


def get_interaction_logger(request: Request) -> InteractionLogger:
    """Dependency to access the interaction logger from app state."""

    return request.app.state.interaction_logger
