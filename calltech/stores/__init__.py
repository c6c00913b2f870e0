"""
Tenant-scoped data access.

Each store wraps one table family and takes a TenantKey on every call.
"""

from calltech.stores.calendar import CalendarConnectionStore
from calltech.stores.intents import IntentStore
from calltech.stores.organisations import OrganisationStore
from calltech.stores.phone_numbers import PhoneNumberStore
from calltech.stores.subscriptions import SubscriptionStore
from calltech.stores.working_hours import WorkingHoursStore

__all__ = [
    "CalendarConnectionStore",
    "IntentStore",
    "OrganisationStore",
    "PhoneNumberStore",
    "SubscriptionStore",
    "WorkingHoursStore",
]
