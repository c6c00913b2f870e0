"""
Integration tests for organisation endpoints.
"""

import json

import pytest
import pytest_asyncio
from httpx import AsyncClient

from calltech.models import Organisation, User
from tests.conftest import FakeVapi

pytestmark = pytest.mark.integration


class TestCurrentOrganisation:
    @pytest.mark.asyncio
    async def test_get(self, auth_client: AsyncClient, test_organisation: Organisation):
        response = await auth_client.get("/api/organisation")

        assert response.status_code == 200
        organisation = response.json()["organisation"]
        assert organisation["id"] == str(test_organisation.id)
        assert organisation["name"] == "Acme"
        assert organisation["selected_voice_agent_id"] is None

    @pytest.mark.asyncio
    async def test_rename(self, auth_client: AsyncClient, fake_vapi: FakeVapi):
        response = await auth_client.patch("/api/organisation", json={"name": "  Acme Ltd  "})

        assert response.status_code == 200
        assert response.json()["organisation"]["name"] == "Acme Ltd"
        assert fake_vapi.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{}, {"name": "   "}, {"unknown": "x"}])
    async def test_nothing_to_update(self, auth_client: AsyncClient, payload: dict):
        response = await auth_client.patch("/api/organisation", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": "No valid fields to update"}

    @pytest.mark.asyncio
    async def test_select_assistant_binds_numbers_and_syncs(
        self, auth_client: AsyncClient, fake_vapi: FakeVapi
    ):
        fake_vapi.add_assistant("asst-9", name="Max")
        await auth_client.post(
            "/api/phone-numbers",
            json={"phone_number": "+14155550100", "vapi_phone_number_id": "pn-1"},
        )
        await auth_client.post(
            "/api/intents",
            json={
                "intent_name": "Location",
                "example_user_phrases": ["Where are you?"],
                "english_responses": ["Main street."],
            },
        )

        response = await auth_client.patch(
            "/api/organisation", json={"selected_voice_agent_id": "asst-9"}
        )

        assert response.status_code == 200
        assert response.json()["organisation"]["selected_voice_agent_id"] == "asst-9"

        binds = fake_vapi.requests_for("PATCH", "/phone-number/pn-1")
        assert json.loads(binds[-1].content) == {"assistantId": "asst-9"}

        prompt_update = fake_vapi.requests_for("PATCH", "/assistant/asst-9")[-1]
        prompt = json.loads(prompt_update.content)["model"]["messages"][0]["content"]
        assert "You are Max" in prompt
        assert "Intent: Location" in prompt

    @pytest.mark.asyncio
    async def test_empty_selection_clears_assistant(self, auth_client: AsyncClient):
        await auth_client.patch("/api/organisation", json={"selected_voice_agent_id": "asst-1"})

        response = await auth_client.patch("/api/organisation", json={"selected_voice_agent_id": ""})

        assert response.status_code == 200
        assert response.json()["organisation"]["selected_voice_agent_id"] is None


class TestOrganisationById:
    """Addressing an organisation explicitly requires membership."""

    @pytest.mark.asyncio
    async def test_own_organisation(self, auth_client: AsyncClient, test_organisation: Organisation):
        response = await auth_client.get(f"/api/organisations/{test_organisation.id}")

        assert response.status_code == 200
        assert response.json()["organisation"]["name"] == "Acme"

    @pytest.mark.asyncio
    async def test_foreign_organisation_forbidden(
        self, auth_client: AsyncClient, other_organisation: Organisation
    ):
        response = await auth_client.get(f"/api/organisations/{other_organisation.id}")

        assert response.status_code == 403
        assert "Globex" not in response.text

    @pytest.mark.asyncio
    async def test_unknown_organisation_forbidden(self, auth_client: AsyncClient):
        response = await auth_client.get("/api/organisations/00000000-0000-0000-0000-000000000000")

        assert response.status_code == 403


class TestDeactivatedUser:
    """A live session stops working once its user is deactivated."""

    @pytest_asyncio.fixture
    async def deactivated(self, auth_client: AsyncClient, session_factory, test_user: User) -> AsyncClient:
        async with session_factory() as session:
            user = await session.get(User, test_user.id)
            user.is_active = False
            await session.commit()
        return auth_client

    @pytest.mark.asyncio
    async def test_tenant_routes_rejected(self, deactivated: AsyncClient):
        for path in ("/api/organisation", "/api/intents", "/api/phone-numbers", "/api/subscription-status"):
            response = await deactivated.get(path)

            assert response.status_code == 401, path
            assert response.json() == {"error": "Unauthorized"}

    @pytest.mark.asyncio
    async def test_organisation_by_id_rejected(
        self, deactivated: AsyncClient, test_organisation: Organisation
    ):
        response = await deactivated.get(f"/api/organisations/{test_organisation.id}")

        assert response.status_code == 401
