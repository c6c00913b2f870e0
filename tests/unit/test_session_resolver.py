"""
Unit tests for session resolution and cookie propagation.
"""

from datetime import timedelta

import pytest
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse

from calltech.config.settings import Settings
from calltech.middleware.session import SessionResolver, SessionResult
from calltech.security import create_oauth_state, create_session_token

pytestmark = pytest.mark.unit


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, session_secret_key="unit-secret")


@pytest.fixture
def resolver(settings: Settings) -> SessionResolver:
    return SessionResolver(settings)


def make_request(cookie: str | None = None, authorization: str | None = None) -> Request:
    headers = []
    if cookie is not None:
        headers.append((b"cookie", cookie.encode("latin-1")))
    if authorization is not None:
        headers.append((b"authorization", authorization.encode("latin-1")))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


def set_cookie_headers(response) -> list[str]:
    return [
        value.decode("latin-1")
        for name, value in response.raw_headers
        if name.lower() == b"set-cookie"
    ]


class TestResolve:
    """Test SessionResolver.resolve."""

    def test_no_credentials(self, resolver: SessionResolver):
        result = resolver.resolve(make_request())

        assert result.identity is None
        assert result.clear_cookie is False
        assert result.rotated_token is None

    def test_valid_cookie(self, resolver: SessionResolver, settings: Settings):
        token = create_session_token(user_id="user-1", email="a@b.com", settings=settings)
        result = resolver.resolve(make_request(cookie=f"{settings.session_cookie_name}={token}"))

        assert result.authenticated
        assert result.identity.user_id == "user-1"
        assert result.identity.email == "a@b.com"
        assert result.rotated_token is None

    def test_bearer_header(self, resolver: SessionResolver, settings: Settings):
        token = create_session_token(user_id="user-2", settings=settings)
        result = resolver.resolve(make_request(authorization=f"Bearer {token}"))

        assert result.identity.user_id == "user-2"

    def test_malformed_bearer_header_ignored(self, resolver: SessionResolver):
        result = resolver.resolve(make_request(authorization="Token abc"))

        assert result.identity is None
        assert result.clear_cookie is False

    def test_garbage_cookie_is_cleared(self, resolver: SessionResolver, settings: Settings):
        result = resolver.resolve(make_request(cookie=f"{settings.session_cookie_name}=not-a-jwt"))

        assert result.identity is None
        assert result.clear_cookie is True

    def test_expired_cookie_is_cleared(self, resolver: SessionResolver, settings: Settings):
        token = create_session_token(
            user_id="user-1", expires_delta=timedelta(seconds=-5), settings=settings
        )
        result = resolver.resolve(make_request(cookie=f"{settings.session_cookie_name}={token}"))

        assert result.identity is None
        assert result.clear_cookie is True

    def test_oauth_state_is_not_a_session(self, resolver: SessionResolver, settings: Settings):
        from uuid import uuid4

        state = create_oauth_state(uuid4(), settings=settings)
        result = resolver.resolve(make_request(cookie=f"{settings.session_cookie_name}={state}"))

        assert result.identity is None
        assert result.clear_cookie is True

    def test_cookie_near_expiry_is_rotated(self, resolver: SessionResolver, settings: Settings):
        token = create_session_token(
            user_id="user-1", expires_delta=timedelta(minutes=5), settings=settings
        )
        result = resolver.resolve(make_request(cookie=f"{settings.session_cookie_name}={token}"))

        assert result.identity.user_id == "user-1"
        assert result.rotated_token is not None
        assert result.rotated_token != token

    def test_bearer_near_expiry_is_not_rotated(self, resolver: SessionResolver, settings: Settings):
        token = create_session_token(
            user_id="user-1", expires_delta=timedelta(minutes=5), settings=settings
        )
        result = resolver.resolve(make_request(authorization=f"Bearer {token}"))

        assert result.identity.user_id == "user-1"
        assert result.rotated_token is None

    def test_bad_cookie_falls_back_to_bearer(self, resolver: SessionResolver, settings: Settings):
        token = create_session_token(
            user_id="user-2", expires_delta=timedelta(minutes=5), settings=settings
        )
        result = resolver.resolve(
            make_request(
                cookie=f"{settings.session_cookie_name}=not-a-jwt",
                authorization=f"Bearer {token}",
            )
        )

        assert result.identity.user_id == "user-2"
        assert result.clear_cookie is True
        assert result.rotated_token is None

    def test_valid_cookie_preferred_over_bearer(self, resolver: SessionResolver, settings: Settings):
        cookie = create_session_token(user_id="user-1", settings=settings)
        bearer = create_session_token(user_id="user-2", settings=settings)
        result = resolver.resolve(
            make_request(
                cookie=f"{settings.session_cookie_name}={cookie}",
                authorization=f"Bearer {bearer}",
            )
        )

        assert result.identity.user_id == "user-1"
        assert result.clear_cookie is False


class TestApply:
    """Test cookie propagation onto responses."""

    def test_rotated_token_set_on_json_response(self, resolver: SessionResolver, settings: Settings):
        response = resolver.apply(JSONResponse({"ok": True}), SessionResult(rotated_token="new-token"))

        cookies = set_cookie_headers(response)
        assert len(cookies) == 1
        assert cookies[0].startswith(f"{settings.session_cookie_name}=new-token")
        assert "httponly" in cookies[0].lower()

    def test_rotated_token_set_on_redirect(self, resolver: SessionResolver, settings: Settings):
        response = resolver.apply(RedirectResponse("/login"), SessionResult(rotated_token="new-token"))

        assert set_cookie_headers(response)[0].startswith(f"{settings.session_cookie_name}=new-token")

    def test_clear_cookie(self, resolver: SessionResolver, settings: Settings):
        response = resolver.apply(JSONResponse({}, status_code=401), SessionResult(clear_cookie=True))

        cookies = set_cookie_headers(response)
        assert cookies[0].startswith(f'{settings.session_cookie_name}=""')
        assert "max-age=0" in cookies[0].lower()

    def test_nothing_to_apply(self, resolver: SessionResolver):
        response = resolver.apply(JSONResponse({}), SessionResult())

        assert set_cookie_headers(response) == []

    def test_handler_cookie_wins(self, resolver: SessionResolver):
        response = JSONResponse({})
        resolver.set_cookie(response, "login-token")
        resolver.apply(response, SessionResult(rotated_token="rotated-token"))

        cookies = set_cookie_headers(response)
        assert len(cookies) == 1
        assert "login-token" in cookies[0]
