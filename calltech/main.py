"""
CallTech Dashboard API application.

Multi-tenant backend for the voice assistant dashboard: authenticates
browser sessions, scopes every request to the caller's organisation and
proxies the voice, billing, calendar and messaging providers.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from calltech import __version__
from calltech.api import (
    assistants_router,
    auth_router,
    billing_router,
    calendar_router,
    calls_router,
    dashboard_router,
    intents_router,
    organisation_router,
    phone_numbers_router,
    subscriptions_router,
    webhooks_router,
    working_hours_router,
)
from calltech.config.settings import Settings, get_settings
from calltech.database import DataStore
from calltech.errors import register_exception_handlers
from calltech.middleware import AccessGateMiddleware

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def configure_sentry(settings: Settings) -> bool:
    """Initialise error reporting when a DSN is configured."""
    if not settings.sentry_dsn:
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.environment == "development" else 0.01,
        integrations=[
            StarletteIntegration(),
            FastApiIntegration(),
        ],
    )
    logger.info(f"Sentry configured for environment: {settings.environment}")
    return True


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    The DataStore is created by the lifespan, so building the app never
    touches the database.
    """
    settings = settings or get_settings()
    configure_logging(settings)
    configure_sentry(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        # Startup
        logger.info(f"{settings.service_name} v{settings.service_version} starting ({settings.environment})")
        app.state.datastore = DataStore.from_settings(settings)

        yield

        # Shutdown
        logger.info("Shutting down...")
        await app.state.datastore.close()

    app = FastAPI(
        title="CallTech Dashboard API",
        description="Multi-tenant dashboard backend for voice assistants",
        version=__version__,
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # The gate runs inside CORS so preflight requests are answered first
    app.add_middleware(AccessGateMiddleware, settings=settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(organisation_router)
    app.include_router(intents_router)
    app.include_router(assistants_router)
    app.include_router(phone_numbers_router)
    app.include_router(calls_router)
    app.include_router(working_hours_router)
    app.include_router(dashboard_router)
    app.include_router(billing_router)
    app.include_router(subscriptions_router)
    app.include_router(calendar_router)
    app.include_router(webhooks_router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": settings.service_name,
            "version": settings.service_version,
            "status": "running",
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "service": settings.service_name}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "calltech.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
