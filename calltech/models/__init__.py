"""
Database models for the multi-tenant dashboard.

- Users and organisations (tenants), linked by memberships
- Tenant-owned records: intents, phone numbers, calendar connections,
  working hours
- User-owned billing records: subscriptions and usage counters
"""

from calltech.models.base import Base
from calltech.models.calendar import CalendarConnection
from calltech.models.intent import Intent
from calltech.models.organisation import Organisation, OrganisationMember
from calltech.models.phone_number import PhoneNumber
from calltech.models.subscription import Subscription, UsageTracking
from calltech.models.user import User
from calltech.models.working_hours import WorkingHours

__all__ = [
    "Base",
    "User",
    "Organisation",
    "OrganisationMember",
    "Intent",
    "PhoneNumber",
    "CalendarConnection",
    "Subscription",
    "UsageTracking",
    "WorkingHours",
]
