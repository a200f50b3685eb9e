from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Query, status
from fastapi.responses import PlainTextResponse, Response

from quiz.api.deps import get_context, get_settings
from quiz.config import Settings
from quiz.core.context import AppContext, PlayerMessage
from quiz.engine import process_message
from quiz.session import PlayerId

logger = logging.getLogger(__name__)

router = APIRouter()

SUPPORTED_OBJECTS = {"page", "instagram"}


@dataclass(frozen=True, slots=True)
class TextMessage:
    text: str
    sender: str
    recipient: str


def extract_messages(root: dict[str, Any]) -> list[TextMessage]:
    """Pull plain text messages out of a Messenger/Instagram webhook event.

    Echoes of the page's own messages and non-text events are skipped.
    """

    if root.get("object") not in SUPPORTED_OBJECTS:
        return []

    out: list[TextMessage] = []
    for entry in root.get("entry") or []:
        if not isinstance(entry, dict):
            continue
        for msg in entry.get("messaging") or []:
            if not isinstance(msg, dict) or not isinstance(msg.get("message"), dict):
                continue
            message = msg["message"]
            if message.get("is_echo") is not None:
                continue
            sender = (msg.get("sender") or {}).get("id")
            recipient = (msg.get("recipient") or {}).get("id")
            text = message.get("text")
            if isinstance(sender, str) and isinstance(recipient, str) and isinstance(text, str):
                out.append(TextMessage(text=text, sender=sender, recipient=recipient))
    return out


async def process_messages(messages: list[TextMessage], ctx: AppContext) -> None:
    for msg in messages:
        player_message = PlayerMessage(player_id=PlayerId(channel_id=msg.recipient, id=msg.sender), text=msg.text)
        try:
            await process_message(player_message, ctx=ctx)
        except Exception:
            # One failing player must not block the rest of the batch.
            logger.exception("Failed to process message from %s on %s", msg.sender, msg.recipient)


@router.get("/api/webhook")
async def subscribe(
    mode: str | None = Query(default=None, alias="hub.mode"),
    verify_token: str | None = Query(default=None, alias="hub.verify_token"),
    challenge: str | None = Query(default=None, alias="hub.challenge"),
    settings: Settings = Depends(get_settings),
) -> Response:
    if mode == "subscribe" and verify_token == settings.verify_token:
        logger.info("Webhook subscription confirmed")
        return PlainTextResponse(challenge or "")
    logger.warning("Rejected webhook subscription (mode=%s)", mode)
    return Response(status_code=status.HTTP_403_FORBIDDEN)


@router.post("/api/webhook")
async def receive_event(
    background_tasks: BackgroundTasks,
    payload: dict[str, Any] = Body(...),
    ctx: AppContext = Depends(get_context),
    settings: Settings = Depends(get_settings),
) -> Response:
    messages = extract_messages(payload)
    if messages:
        if settings.delivery_mode == "sync":
            await process_messages(messages, ctx)
        else:
            background_tasks.add_task(process_messages, messages, ctx)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
