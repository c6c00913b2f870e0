"""Messaging bot (Telegram) adapter and update envelope."""

import logging
from typing import Optional, Union

import httpx
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"


class TelegramUser(BaseModel):
    id: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class TelegramChat(BaseModel):
    id: int
    type: str


class TelegramMessage(BaseModel):
    message_id: int
    chat: TelegramChat
    text: Optional[str] = None
    # "from" is a Python keyword
    from_user: Optional[TelegramUser] = Field(default=None, alias="from")

    model_config = {"populate_by_name": True}


class TelegramUpdate(BaseModel):
    """Bot API update; only message-bearing fields are read."""

    update_id: int
    message: Optional[TelegramMessage] = None
    edited_message: Optional[TelegramMessage] = None

    @property
    def effective_message(self) -> Optional[TelegramMessage]:
        return self.message or self.edited_message


class TelegramBot:
    def __init__(
        self,
        token: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.token)

    async def send_message(self, chat_id: Union[int, str], text: str) -> bool:
        """
        Send a text message to a chat.

        Returns:
            True if Telegram accepted the message
        """
        if not self.configured:
            logger.warning("Telegram bot token not configured; reply dropped")
            return False

        url = f"{TELEGRAM_API_BASE}/bot{self.token}/sendMessage"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json={"chat_id": chat_id, "text": text})
        except httpx.HTTPError as e:
            logger.warning(f"Telegram sendMessage failed: {e!r}")
            return False

        if not response.is_success:
            logger.error(f"Telegram sendMessage returned {response.status_code}: {response.text}")
            return False
        return True
