"""
Dashboard API routes.

Provides REST API endpoints for:
- Authentication (signup, login, logout, current identity)
- The caller's organisation
- Intents, assistants and phone numbers
- Dashboard stats, subscription status and billing portal
- Subscription checkout and cancellation
- Call logs and call analytics
- Working hours
- Calendar OAuth
- Messaging webhooks
"""

from calltech.api.assistants import router as assistants_router
from calltech.api.auth import router as auth_router
from calltech.api.billing import router as billing_router
from calltech.api.calendar import router as calendar_router
from calltech.api.calls import router as calls_router
from calltech.api.dashboard import router as dashboard_router
from calltech.api.intents import router as intents_router
from calltech.api.organisation import router as organisation_router
from calltech.api.phone_numbers import router as phone_numbers_router
from calltech.api.subscriptions import router as subscriptions_router
from calltech.api.webhooks import router as webhooks_router
from calltech.api.working_hours import router as working_hours_router

__all__ = [
    "assistants_router",
    "auth_router",
    "billing_router",
    "calendar_router",
    "calls_router",
    "dashboard_router",
    "intents_router",
    "organisation_router",
    "phone_numbers_router",
    "subscriptions_router",
    "webhooks_router",
    "working_hours_router",
]
