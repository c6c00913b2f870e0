"""
Unit tests for security utilities (password hashing, session tokens, OAuth state).
"""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import JWTError, jwt

from calltech.config.settings import Settings
from calltech.security import (
    OAUTH_STATE_TOKEN_TYPE,
    SESSION_TOKEN_TYPE,
    create_oauth_state,
    create_session_token,
    decode_token,
    hash_password,
    verify_oauth_state,
    verify_password,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, session_secret_key="unit-secret")


class TestPasswordHashing:
    """Test password hashing and verification."""

    def test_hash_password_different_each_time(self):
        """Test that same password produces different hashes (salt)."""
        password = "testpassword123"
        hash1 = hash_password(password)
        hash2 = hash_password(password)

        assert hash1 != hash2
        assert password not in hash1

    def test_verify_password_correct(self):
        hashed = hash_password("testpassword123")
        assert verify_password("testpassword123", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("testpassword123")
        assert verify_password("wrongpassword", hashed) is False

    def test_verify_password_invalid_hash(self):
        """Test password verification with invalid hash."""
        assert verify_password("testpassword123", "invalid_hash") is False


class TestSessionTokens:
    """Test session token creation and decoding."""

    def test_session_token_claims(self, settings: Settings):
        token = create_session_token(user_id="user-1", email="a@b.com", settings=settings)
        payload = decode_token(token, SESSION_TOKEN_TYPE, settings=settings)

        assert payload["sub"] == "user-1"
        assert payload["email"] == "a@b.com"
        assert payload["type"] == SESSION_TOKEN_TYPE
        assert payload["exp"] - payload["iat"] == settings.session_expire_minutes * 60
        assert payload["jti"]

    def test_each_session_token_is_unique(self, settings: Settings):
        first = create_session_token(user_id="user-1", settings=settings)
        second = create_session_token(user_id="user-1", settings=settings)

        assert first != second

    def test_expired_token_rejected(self, settings: Settings):
        token = create_session_token(
            user_id="user-1", expires_delta=timedelta(seconds=-1), settings=settings
        )

        with pytest.raises(JWTError):
            decode_token(token, SESSION_TOKEN_TYPE, settings=settings)

    def test_token_signed_with_other_key_rejected(self, settings: Settings):
        other = Settings(_env_file=None, session_secret_key="someone-else")
        token = create_session_token(user_id="user-1", settings=other)

        with pytest.raises(JWTError):
            decode_token(token, SESSION_TOKEN_TYPE, settings=settings)

    def test_wrong_token_type_rejected(self, settings: Settings):
        token = jwt.encode(
            {"sub": "user-1", "type": "refresh"},
            settings.session_secret_key,
            algorithm=settings.session_algorithm,
        )

        with pytest.raises(ValueError, match="Invalid token type"):
            decode_token(token, SESSION_TOKEN_TYPE, settings=settings)


class TestOAuthState:
    """Test signed OAuth state values."""

    def test_state_round_trips_organisation(self, settings: Settings):
        organisation_id = uuid4()
        state = create_oauth_state(organisation_id, settings=settings)

        assert verify_oauth_state(state, settings=settings) == organisation_id

    def test_state_is_opaque(self, settings: Settings):
        organisation_id = uuid4()
        state = create_oauth_state(organisation_id, settings=settings)

        assert str(organisation_id) not in state

    def test_session_token_is_not_a_state(self, settings: Settings):
        token = create_session_token(user_id="user-1", settings=settings)

        with pytest.raises(ValueError):
            verify_oauth_state(token, settings=settings)

    def test_tampered_state_rejected(self, settings: Settings):
        state = create_oauth_state(uuid4(), settings=settings)
        header, payload, signature = state.split(".")
        forged = jwt.encode(
            {"org": str(uuid4()), "type": OAUTH_STATE_TOKEN_TYPE},
            "guessed-key",
            algorithm=settings.session_algorithm,
        )

        with pytest.raises(JWTError):
            verify_oauth_state(forged, settings=settings)
        with pytest.raises(JWTError):
            verify_oauth_state(f"{header}.{payload}.{signature[::-1]}", settings=settings)

    def test_expired_state_rejected(self, settings: Settings):
        expired = Settings(_env_file=None, session_secret_key="unit-secret", oauth_state_expire_minutes=-1)
        state = create_oauth_state(uuid4(), settings=expired)

        with pytest.raises(JWTError):
            verify_oauth_state(state, settings=settings)
