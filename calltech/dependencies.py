"""
FastAPI dependencies for upstream adapters.

Each adapter is built from settings; tests swap them through
``app.dependency_overrides``.
"""

from fastapi import Depends, Request

from calltech.config.settings import Settings, get_settings
from calltech.integrations import BillingPortal, GoogleCalendarOAuth, TelegramBot, VapiClient


def get_vapi_client(settings: Settings = Depends(get_settings)) -> VapiClient:
    return VapiClient(
        api_key=settings.vapi_api_key,
        base_url=settings.vapi_base_url,
        timeout=settings.upstream_timeout_seconds,
    )


def get_billing_portal(settings: Settings = Depends(get_settings)) -> BillingPortal:
    return BillingPortal(secret_key=settings.stripe_secret_key)


def get_calendar_oauth(settings: Settings = Depends(get_settings)) -> GoogleCalendarOAuth:
    return GoogleCalendarOAuth(
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        timeout=settings.upstream_timeout_seconds,
    )


def get_telegram_bot(settings: Settings = Depends(get_settings)) -> TelegramBot:
    return TelegramBot(token=settings.telegram_bot_token, timeout=settings.upstream_timeout_seconds)


def public_base_url(request: Request, settings: Settings = Depends(get_settings)) -> str:
    """Externally visible origin, for OAuth redirect and billing return URLs."""
    if settings.public_app_url:
        return settings.public_app_url.rstrip("/")
    return str(request.base_url).rstrip("/")
