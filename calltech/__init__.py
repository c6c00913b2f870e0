"""
CallTech Dashboard API

Multi-tenant backend for businesses running voice assistants on a third-party
voice-AI platform:
- Cookie sessions and an access gate in front of every route
- Organisation (tenant) resolution and membership checks
- Tenant-scoped intents, phone numbers, calendar connections
- Thin adapters for the voice platform, billing, calendar OAuth and messaging
"""

__version__ = "1.0.0"
