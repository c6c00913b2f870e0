"""
Adapters for upstream providers.

- VAPI: assistant configuration, phone-number binding and call history
- Stripe: customers, checkout and portal sessions, subscriptions
- Google: calendar OAuth handshake
- Telegram: messaging bot replies
"""

from calltech.integrations.billing import BillingPortal, StripeSubscriptionInfo
from calltech.integrations.google_calendar import CalendarTokens, GoogleCalendarOAuth
from calltech.integrations.telegram import TelegramBot, TelegramUpdate
from calltech.integrations.vapi import AssistantConfig, ModelConfig, VapiCall, VapiClient

__all__ = [
    "AssistantConfig",
    "BillingPortal",
    "CalendarTokens",
    "GoogleCalendarOAuth",
    "ModelConfig",
    "StripeSubscriptionInfo",
    "TelegramBot",
    "TelegramUpdate",
    "VapiCall",
    "VapiClient",
]
