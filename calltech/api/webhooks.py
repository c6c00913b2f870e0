"""
Webhook API routes.

Webhook callers have no user session, so these paths are public at the
access gate and authenticate the caller themselves.
"""

import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from calltech.config.settings import Settings, get_settings
from calltech.dependencies import get_telegram_bot
from calltech.integrations import TelegramBot, TelegramUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])

TELEGRAM_SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def _telegram_secret_matches(settings: Settings, provided: Optional[str]) -> bool:
    expected = settings.telegram_webhook_secret
    if not expected:
        return True
    return provided is not None and secrets.compare_digest(provided, expected)


def echo_reply(update: TelegramUpdate) -> Optional[tuple[int, str]]:
    """Chat id and reply text for an update, or None if there is nothing to answer."""
    message = update.effective_message
    if message is None:
        return None

    text = (message.text or "").strip()
    if not text:
        return None

    sender = message.from_user
    name = (sender.username or sender.first_name) if sender else None
    return message.chat.id, f'Received, {name or "user"}! You wrote: "{text}"'


@router.get("/telegram")
async def telegram_health():
    return {"ok": True, "service": "telegram-webhook"}


@router.post("/telegram")
async def telegram_webhook(
    request: Request,
    secret_token: Optional[str] = Header(None, alias=TELEGRAM_SECRET_HEADER),
    settings: Settings = Depends(get_settings),
    bot: TelegramBot = Depends(get_telegram_bot),
):
    """
    Receive a bot update and echo text messages back to the chat.

    Updates without a message (callbacks, channel posts) are acknowledged
    and ignored.
    """
    if not _telegram_secret_matches(settings, secret_token):
        logger.warning("Telegram webhook called with a bad secret token")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"ok": False, "error": "Unauthorized"},
        )

    try:
        update = TelegramUpdate.model_validate(await request.json())
    except (ValueError, ValidationError) as e:
        logger.info(f"Ignoring malformed Telegram update: {e}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"ok": False, "error": "Invalid update"},
        )

    try:
        reply = echo_reply(update)
        if reply is not None:
            chat_id, text = reply
            await bot.send_message(chat_id, text)
    except Exception as e:
        logger.error(f"Telegram update {update.update_id} failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"ok": False, "error": "Internal server error"},
        )

    return {"ok": True}
