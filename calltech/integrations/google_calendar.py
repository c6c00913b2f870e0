"""Google Calendar OAuth handshake.

Builds the consent URL and exchanges the returned authorization code for
tokens. Only the handshake lives here; the tokens are stored per
organisation by the calendar store.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"

SCOPES = [
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/calendar.freebusy",
]


class GoogleTokenPayload(BaseModel):
    access_token: str
    expires_in: int = 3600
    refresh_token: Optional[str] = None


@dataclass
class CalendarTokens:
    access_token: str
    refresh_token: Optional[str]
    expires_at: datetime


class GoogleCalendarOAuth:
    """OAuth 2.0 authorization-code flow against Google."""

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self._transport = transport

    @property
    def can_authorize(self) -> bool:
        return bool(self.client_id)

    @property
    def can_exchange(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def authorization_url(self, state: str, redirect_uri: str) -> Optional[str]:
        """
        Google consent URL for offline calendar access.

        Returns:
            URL, or None when no client id is configured
        """
        if not self.can_authorize:
            return None

        params = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str, redirect_uri: str) -> Optional[CalendarTokens]:
        """
        Exchange an authorization code for tokens.

        Returns:
            CalendarTokens, or None when unavailable or rejected
        """
        if not self.can_exchange:
            logger.error("Google OAuth credentials not set")
            return None

        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": redirect_uri,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    GOOGLE_TOKEN_URL,
                    data=data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.HTTPError as e:
            logger.warning(f"Google token exchange failed: {e!r}")
            return None

        if response.status_code != 200:
            logger.error(f"Google token exchange returned {response.status_code}: {response.text}")
            return None

        try:
            tokens = GoogleTokenPayload.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning(f"Malformed Google token response: {e}")
            return None

        return CalendarTokens(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=tokens.expires_in),
        )
