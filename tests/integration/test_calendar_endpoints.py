"""
Integration tests for the calendar OAuth handshake.
"""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from httpx import AsyncClient

from calltech.config.settings import Settings
from calltech.dependencies import get_calendar_oauth
from calltech.integrations import GoogleCalendarOAuth
from calltech.models import Organisation
from calltech.security import create_oauth_state, verify_oauth_state
from calltech.stores import CalendarConnectionStore
from calltech.tenancy import TenantKey

pytestmark = pytest.mark.integration


class FakeGoogle:
    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": "invalid_grant"})
        return httpx.Response(
            200,
            json={"access_token": "access-1", "refresh_token": "refresh-1", "expires_in": 3600},
        )

    def oauth(self, client_id="google-client", client_secret="google-secret") -> GoogleCalendarOAuth:
        return GoogleCalendarOAuth(
            client_id=client_id,
            client_secret=client_secret,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def google(app) -> FakeGoogle:
    fake = FakeGoogle()
    app.dependency_overrides[get_calendar_oauth] = lambda: fake.oauth()
    return fake


def calendar_outcome(response: httpx.Response) -> str:
    assert response.status_code == 307
    location = urlparse(response.headers["location"])
    assert location.path == "/dashboard"
    return parse_qs(location.query)["calendar"][0]


class TestConnect:
    @pytest.mark.asyncio
    async def test_redirects_to_google_with_signed_state(
        self,
        auth_client: AsyncClient,
        google: FakeGoogle,
        test_organisation: Organisation,
        test_settings: Settings,
    ):
        response = await auth_client.get("/api/calendar/connect")

        assert response.status_code == 307
        location = urlparse(response.headers["location"])
        assert location.netloc == "accounts.google.com"
        params = parse_qs(location.query)
        assert params["client_id"] == ["google-client"]
        assert params["redirect_uri"] == ["http://test/api/calendar/callback"]
        assert params["access_type"] == ["offline"]
        assert verify_oauth_state(params["state"][0], settings=test_settings) == test_organisation.id

    @pytest.mark.asyncio
    async def test_unconfigured_client(self, app, auth_client: AsyncClient):
        app.dependency_overrides[get_calendar_oauth] = lambda: GoogleCalendarOAuth(None, None)

        response = await auth_client.get("/api/calendar/connect")

        assert calendar_outcome(response) == "error"

    @pytest.mark.asyncio
    async def test_anonymous_rejected(self, client: AsyncClient):
        response = await client.get("/api/calendar/connect")

        assert response.status_code == 401


class TestCallback:
    @pytest.mark.asyncio
    async def test_success_stores_tokens(
        self,
        auth_client: AsyncClient,
        google: FakeGoogle,
        test_organisation: Organisation,
        test_settings: Settings,
        session_factory,
    ):
        state = create_oauth_state(test_organisation.id, settings=test_settings)

        response = await auth_client.get(
            "/api/calendar/callback", params={"code": "auth-code", "state": state}
        )

        assert calendar_outcome(response) == "connected"
        exchange = parse_qs(google.requests[0].content.decode())
        assert exchange["code"] == ["auth-code"]
        assert exchange["grant_type"] == ["authorization_code"]

        async with session_factory() as session:
            connection = await CalendarConnectionStore(session).get(
                TenantKey.for_organisation(test_organisation.id)
            )
        assert connection.access_token == "access-1"
        assert connection.refresh_token == "refresh-1"

    @pytest.mark.asyncio
    async def test_consent_denied(self, auth_client: AsyncClient, google: FakeGoogle):
        response = await auth_client.get("/api/calendar/callback", params={"error": "access_denied"})

        assert calendar_outcome(response) == "denied"
        assert google.requests == []

    @pytest.mark.asyncio
    async def test_missing_code(self, auth_client: AsyncClient, google: FakeGoogle):
        response = await auth_client.get("/api/calendar/callback", params={"state": "x"})

        assert calendar_outcome(response) == "error"

    @pytest.mark.asyncio
    async def test_forged_state(
        self, auth_client: AsyncClient, google: FakeGoogle, test_organisation: Organisation
    ):
        forged = create_oauth_state(
            test_organisation.id, settings=Settings(_env_file=None, session_secret_key="attacker")
        )

        response = await auth_client.get(
            "/api/calendar/callback", params={"code": "auth-code", "state": forged}
        )

        assert calendar_outcome(response) == "error"
        assert google.requests == []

    @pytest.mark.asyncio
    async def test_state_for_foreign_organisation(
        self,
        auth_client: AsyncClient,
        google: FakeGoogle,
        other_organisation: Organisation,
        test_settings: Settings,
        session_factory,
    ):
        state = create_oauth_state(other_organisation.id, settings=test_settings)

        response = await auth_client.get(
            "/api/calendar/callback", params={"code": "auth-code", "state": state}
        )

        assert calendar_outcome(response) == "error"
        assert google.requests == []
        async with session_factory() as session:
            connection = await CalendarConnectionStore(session).get(
                TenantKey.for_organisation(other_organisation.id)
            )
        assert connection is None

    @pytest.mark.asyncio
    async def test_rejected_code(
        self, app, auth_client: AsyncClient, test_organisation: Organisation, test_settings: Settings
    ):
        google = FakeGoogle(status_code=400)
        app.dependency_overrides[get_calendar_oauth] = lambda: google.oauth()
        state = create_oauth_state(test_organisation.id, settings=test_settings)

        response = await auth_client.get(
            "/api/calendar/callback", params={"code": "stale", "state": state}
        )

        assert calendar_outcome(response) == "error"
