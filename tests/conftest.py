"""
Pytest configuration and fixtures for dashboard tests.

Provides fixtures for:
- Database engine and session (SQLite via aiosqlite)
- Test client with the access gate and dependency overrides
- Test users, organisations and memberships
- Session tokens
- A fake voice platform behind httpx.MockTransport
"""

import json
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from calltech.config.settings import Settings, get_settings
from calltech.database import get_db
from calltech.dependencies import get_vapi_client
from calltech.integrations import VapiClient
from calltech.main import create_app
from calltech.models import Base, Organisation, OrganisationMember, Subscription, User
from calltech.security import create_session_token, hash_password

VAPI_BASE_URL = "https://vapi.test"


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without HTTP round trips")
    config.addinivalue_line("markers", "integration: endpoint tests through the full app")


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test_db.sqlite'}",
        session_secret_key="test-secret-key",
        public_app_url="http://test",
        vapi_api_key="test-vapi-key",
        vapi_base_url=VAPI_BASE_URL,
        upstream_timeout_seconds=1.0,
        telegram_webhook_secret=None,
    )


@pytest_asyncio.fixture
async def test_engine(test_settings: Settings):
    """Create test database engine."""
    engine = create_async_engine(test_settings.database_url, poolclass=NullPool, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session


async def make_user(
    db: AsyncSession,
    email: str,
    password: str = "password123",
    is_active: bool = True,
) -> User:
    user = User(
        email=email,
        full_name=email.split("@")[0].title(),
        hashed_password=hash_password(password),
        is_active=is_active,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_organisation(
    db: AsyncSession,
    name: str,
    owner: Optional[User] = None,
    selected_voice_agent_id: Optional[str] = None,
) -> Organisation:
    organisation = Organisation(name=name, selected_voice_agent_id=selected_voice_agent_id)
    db.add(organisation)
    await db.flush()
    if owner is not None:
        db.add(OrganisationMember(organisation_id=organisation.id, user_id=owner.id, role="owner"))
    await db.commit()
    await db.refresh(organisation)
    return organisation


async def add_member(
    db: AsyncSession,
    organisation: Organisation,
    user: User,
    role: str = "member",
    created_at: Optional[datetime] = None,
) -> OrganisationMember:
    member = OrganisationMember(organisation_id=organisation.id, user_id=user.id, role=role)
    if created_at is not None:
        member.created_at = created_at
    db.add(member)
    await db.commit()
    await db.refresh(member)
    return member


async def add_subscription(session_factory, user: User, **fields) -> Subscription:
    now = utc_now()
    values = {
        "status": "active",
        "plan_name": "basic",
        "billing_cycle": "monthly",
        "stripe_customer_id": "cus_123",
        "current_period_start": now - timedelta(days=3),
        "current_period_end": now + timedelta(days=27),
    }
    values.update(fields)
    async with session_factory() as session:
        subscription = Subscription(user_id=user.id, **values)
        session.add(subscription)
        await session.commit()
        await session.refresh(subscription)
    return subscription


@pytest_asyncio.fixture
async def test_user(test_db: AsyncSession) -> User:
    return await make_user(test_db, "owner@acme.com")


@pytest_asyncio.fixture
async def test_organisation(test_db: AsyncSession, test_user: User) -> Organisation:
    """Organisation X, owned by test_user."""
    return await make_organisation(test_db, "Acme", owner=test_user)


@pytest_asyncio.fixture
async def other_user(test_db: AsyncSession) -> User:
    return await make_user(test_db, "owner@globex.com")


@pytest_asyncio.fixture
async def other_organisation(test_db: AsyncSession, other_user: User) -> Organisation:
    """Organisation Y, owned by other_user."""
    return await make_organisation(test_db, "Globex", owner=other_user)


@pytest.fixture
def session_token(test_user: User, test_settings: Settings) -> str:
    return create_session_token(user_id=test_user.id, email=test_user.email, settings=test_settings)


@pytest.fixture
def other_session_token(other_user: User, test_settings: Settings) -> str:
    return create_session_token(user_id=other_user.id, email=other_user.email, settings=test_settings)


class FakeVapi:
    """
    In-memory voice platform.

    Records every request; ``fail_with`` makes every call raise the given
    httpx exception instead of answering.
    """

    def __init__(self):
        self.assistants: dict[str, dict] = {}
        self.calls: dict[str, list[dict]] = {}
        self.requests: list[httpx.Request] = []
        self.fail_with: Optional[Exception] = None

    def add_assistant(self, assistant_id: str, name: str = "Kylie", prompt: str = "Be nice.") -> dict:
        payload = {
            "id": assistant_id,
            "name": name,
            "firstMessage": "Hi!",
            "model": {
                "provider": "openai",
                "model": "gpt-4o",
                "temperature": 0.3,
                "messages": [{"role": "system", "content": prompt}],
            },
            "voice": {"provider": "11labs", "voiceId": "pNInz6obpgDQGcFmaJgB"},
        }
        self.assistants[assistant_id] = payload
        return payload

    def add_call(
        self,
        phone_number_id: str,
        call_id: str,
        started_at: str = "2026-10-18T14:05:00Z",
        seconds: int = 95,
        status: str = "ended",
        **fields,
    ) -> dict:
        started = datetime.fromisoformat(started_at.replace("Z", "+00:00"))
        payload = {
            "id": call_id,
            "phoneNumberId": phone_number_id,
            "status": status,
            "startedAt": started_at,
            "endedAt": (started + timedelta(seconds=seconds)).isoformat(),
            "customer": {"number": "+14155559999"},
            **fields,
        }
        self.calls.setdefault(phone_number_id, []).append(payload)
        return payload

    def requests_for(self, method: str, path_prefix: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path.startswith(path_prefix)
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with

        parts = request.url.path.strip("/").split("/")
        if parts[0] == "assistant" and len(parts) == 2:
            assistant = self.assistants.get(parts[1])
            if assistant is None:
                return httpx.Response(404, json={"message": "Not Found"})
            if request.method == "PATCH":
                assistant.update(json.loads(request.content))
            return httpx.Response(200, json=assistant)

        if parts[0] == "phone-number" and len(parts) == 2 and request.method == "PATCH":
            return httpx.Response(200, json={"id": parts[1], **json.loads(request.content)})

        if parts == ["call"] and request.method == "GET":
            return httpx.Response(200, json=self.calls.get(request.url.params.get("phoneNumberId"), []))

        return httpx.Response(404, json={"message": "Not Found"})

    def client(self, api_key: Optional[str] = "test-vapi-key") -> VapiClient:
        return VapiClient(
            api_key=api_key,
            base_url=VAPI_BASE_URL,
            timeout=1.0,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def fake_vapi() -> FakeVapi:
    return FakeVapi()


@pytest.fixture
def app(test_settings: Settings, session_factory, fake_vapi: FakeVapi):
    """Application wired to the test database and fake upstreams."""
    application = create_app(test_settings)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_settings] = lambda: test_settings
    application.dependency_overrides[get_vapi_client] = lambda: fake_vapi.client()
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Anonymous HTTP client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def auth_client(
    app, test_settings: Settings, session_token: str, test_organisation: Organisation
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client carrying test_user's session cookie (tenant X)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        cookies={test_settings.session_cookie_name: session_token},
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def other_client(
    app, test_settings: Settings, other_session_token: str, other_organisation: Organisation
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client carrying other_user's session cookie (tenant Y)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        cookies={test_settings.session_cookie_name: other_session_token},
    ) as ac:
        yield ac


def expiring_token(user: User, settings: Settings, minutes_left: int = 5) -> str:
    """Session token close enough to expiry to be rotated."""
    return create_session_token(
        user_id=user.id,
        email=user.email,
        expires_delta=timedelta(minutes=minutes_left),
        settings=settings,
    )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
