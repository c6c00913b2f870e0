"""
Session resolution.

Reads the session cookie (or a Bearer header) and turns it into an
identity. A missing, malformed or expired session is a normal outcome and
yields no identity instead of an error. Sessions close to expiry are
rotated, and whatever cookie change results is written onto the response.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from jose import JWTError
from pydantic import BaseModel
from starlette.requests import Request
from starlette.responses import Response

from calltech.config.settings import Settings
from calltech.security import SESSION_TOKEN_TYPE, create_session_token, decode_token

logger = logging.getLogger(__name__)


class SessionIdentity(BaseModel):
    """Authenticated identity extracted from a session."""

    user_id: str
    email: Optional[str] = None


@dataclass
class SessionResult:
    """
    Outcome of resolving a request's session.

    Attributes:
        identity: The authenticated identity, or None
        rotated_token: Replacement token to set on the response, if any
        clear_cookie: Whether the response should delete the session cookie
    """

    identity: Optional[SessionIdentity] = None
    rotated_token: Optional[str] = None
    clear_cookie: bool = False

    @property
    def authenticated(self) -> bool:
        return self.identity is not None


class SessionResolver:
    """Resolve and refresh cookie sessions."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def cookie_name(self) -> str:
        return self.settings.session_cookie_name

    def _extract_bearer(self, request: Request) -> Optional[str]:
        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return None

        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return None

        return parts[1]

    def resolve(self, request: Request) -> SessionResult:
        """
        Resolve the identity behind a request.

        Never raises for bad credentials; an unusable cookie is scheduled
        for deletion instead.
        """
        cookie_token = request.cookies.get(self.cookie_name)
        payload = self._decode(cookie_token) if cookie_token else None
        clear_cookie = bool(cookie_token) and payload is None

        # A stale cookie must not mask valid Bearer credentials
        from_cookie = payload is not None
        if payload is None:
            bearer_token = self._extract_bearer(request)
            payload = self._decode(bearer_token) if bearer_token else None

        if payload is None:
            return SessionResult(clear_cookie=clear_cookie)

        identity = SessionIdentity(user_id=payload["sub"], email=payload.get("email"))

        # Only cookie sessions are rotated; a Bearer caller manages its own token
        rotated_token = None
        if from_cookie and self._needs_refresh(payload):
            rotated_token = create_session_token(
                user_id=identity.user_id, email=identity.email, settings=self.settings
            )
            logger.debug(f"Rotated session for user {identity.user_id}")

        return SessionResult(identity=identity, rotated_token=rotated_token, clear_cookie=clear_cookie)

    def _decode(self, token: str) -> Optional[dict]:
        try:
            payload = decode_token(token, SESSION_TOKEN_TYPE, settings=self.settings)
        except (JWTError, ValueError) as e:
            logger.debug(f"Rejected session token: {e}")
            return None

        if not payload.get("sub"):
            return None
        return payload

    def _needs_refresh(self, payload: dict) -> bool:
        exp = payload.get("exp")
        if exp is None:
            return True
        remaining = exp - datetime.now(timezone.utc).timestamp()
        return remaining < self.settings.session_refresh_threshold_minutes * 60

    def set_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            max_age=self.settings.session_expire_minutes * 60,
            httponly=True,
            secure=self.settings.session_cookie_secure,
            samesite="lax",
            path="/",
        )

    def delete_cookie(self, response: Response) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            httponly=True,
            secure=self.settings.session_cookie_secure,
            samesite="lax",
        )

    def _response_sets_cookie(self, response: Response) -> bool:
        prefix = f"{self.cookie_name}=".encode("latin-1")
        return any(
            name.lower() == b"set-cookie" and value.startswith(prefix)
            for name, value in response.raw_headers
        )

    def apply(self, response: Response, result: SessionResult) -> Response:
        """
        Write the session cookie change onto a response.

        Applies to every response kind. A handler that already set or
        cleared the session cookie (login, logout) takes precedence.
        """
        if self._response_sets_cookie(response):
            return response

        if result.rotated_token:
            self.set_cookie(response, result.rotated_token)
        elif result.clear_cookie:
            self.delete_cookie(response)
        return response
