"""Telegram webhook endpoint.

Telegram POSTs one JSON update per request and retries on any non-2xx
answer, so every POST is acknowledged with 200 once the method is right,
whether or not handling the update worked.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Request

from chatrelay.store import ConversationId

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhook"])

APOLOGY_MESSAGE = "😔 Sorry, something went wrong while handling your message."

_ACK = {"ok": True}


def extract_message(body: Any) -> tuple[ConversationId, str] | None:
    """Return ``(chat_id, trimmed text)`` from an update, or None if unusable."""
    if not isinstance(body, dict):
        return None
    message = body.get("message")
    if not isinstance(message, dict):
        return None
    chat = message.get("chat")
    text = message.get("text")
    if not isinstance(chat, dict) or not isinstance(text, str):
        return None
    chat_id = chat.get("id")
    if isinstance(chat_id, bool) or not isinstance(chat_id, (int, str)):
        return None
    text = text.strip()
    if not text:
        return None
    return chat_id, text


@router.get("")
async def liveness() -> dict:
    """Cheap liveness probe, touches no state."""
    return {"status": "ok"}


@router.post("")
async def receive_update(request: Request) -> dict:
    """Handle one Telegram update."""
    try:
        body = await request.json()
    except ValueError:
        logger.warning("Ignoring update with an unparseable body")
        return _ACK

    incoming = extract_message(body)
    if incoming is None:
        return _ACK
    chat_id, text = incoming

    try:
        await request.app.state.router.dispatch(chat_id, text)
    except Exception:
        logger.exception("Error handling update for chat %s", chat_id)
        await _apologize(request, chat_id)
    return _ACK


async def _apologize(request: Request, chat_id: ConversationId) -> None:
    """Tell the user something broke. Failures are logged and ignored."""
    try:
        await request.app.state.delivery.send(chat_id, APOLOGY_MESSAGE)
    except Exception:
        logger.warning("Failed to send apology to chat %s", chat_id, exc_info=True)
