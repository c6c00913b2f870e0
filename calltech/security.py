"""
Security utilities.

Password hashing with bcrypt, signed session tokens carried in the session
cookie, and signed OAuth ``state`` values for the calendar handshake.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import bcrypt
from jose import jwt

from calltech.config.settings import Settings, get_settings

SESSION_TOKEN_TYPE = "session"
OAUTH_STATE_TOKEN_TYPE = "oauth_state"


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password as string
    """
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    Returns:
        True if password matches, False otherwise (including malformed hashes)
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def create_session_token(
    user_id: str,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
    settings: Optional[Settings] = None,
) -> str:
    """
    Create a signed session token for the session cookie.

    Args:
        user_id: User identifier
        email: User email (optional claim)
        expires_delta: Optional custom lifetime
        settings: Settings override

    Returns:
        Encoded JWT string
    """
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.session_expire_minutes)

    to_encode = {
        "sub": user_id,
        "email": email,
        "exp": now + expires_delta,
        "iat": now,
        "type": SESSION_TOKEN_TYPE,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(to_encode, settings.session_secret_key, algorithm=settings.session_algorithm)


def decode_token(token: str, token_type: str, settings: Optional[Settings] = None) -> dict:
    """
    Verify and decode a token issued by this service.

    Raises:
        JWTError: If the signature is invalid or the token expired
        ValueError: If the token type doesn't match
    """
    settings = settings or get_settings()
    payload = jwt.decode(token, settings.session_secret_key, algorithms=[settings.session_algorithm])

    if payload.get("type") != token_type:
        raise ValueError(f"Invalid token type. Expected {token_type}, got {payload.get('type')}")

    return payload


def create_oauth_state(organisation_id: UUID, settings: Optional[Settings] = None) -> str:
    """
    Encode the organisation id into an opaque, signed OAuth ``state``.

    The state is short-lived; the callback rejects it once expired.
    """
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    to_encode = {
        "org": str(organisation_id),
        "exp": now + timedelta(minutes=settings.oauth_state_expire_minutes),
        "iat": now,
        "type": OAUTH_STATE_TOKEN_TYPE,
        "nonce": uuid.uuid4().hex,
    }
    return jwt.encode(to_encode, settings.session_secret_key, algorithm=settings.session_algorithm)


def verify_oauth_state(state: str, settings: Optional[Settings] = None) -> UUID:
    """
    Decode an OAuth ``state`` back into an organisation id.

    Raises:
        JWTError: If the state was tampered with or expired
        ValueError: If the state is not an OAuth state or carries no valid id
    """
    payload = decode_token(state, OAUTH_STATE_TOKEN_TYPE, settings=settings)
    org = payload.get("org")
    if not org:
        raise ValueError("OAuth state carries no organisation")
    return UUID(org)
