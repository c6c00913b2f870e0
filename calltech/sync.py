"""
Assistant synchronisation.

Keeps the voice platform in step with the dashboard: the organisation's
intents are rendered into its assistant's system prompt, and its phone
numbers are pointed at the selected assistant. Both are best effort; a
failed upstream call is logged and never fails the request that caused it.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from calltech.integrations.vapi import VapiClient
from calltech.prompts import build_assistant_system_prompt
from calltech.stores import IntentStore, OrganisationStore, PhoneNumberStore
from calltech.tenancy import TenantKey

logger = logging.getLogger(__name__)

DEFAULT_ORGANISATION_NAME = "Your Business"


async def sync_intents_to_assistant(db: AsyncSession, tenant: TenantKey, vapi: VapiClient) -> bool:
    """
    Rewrite the organisation's assistant prompt from its current intents.

    Returns:
        True if the platform accepted the new prompt; False when there is no
        assistant, the platform is unavailable or the update was rejected
    """
    organisation = await OrganisationStore(db).get(tenant)
    if organisation is None or not organisation.selected_voice_agent_id:
        return False

    assistant_id = organisation.selected_voice_agent_id
    intents = await IntentStore(db).list_for_assistant(tenant)

    # The PATCH replaces the whole model block, so it needs the current one
    config = await vapi.fetch_assistant(assistant_id)
    if config is None:
        logger.warning(f"Skipped intent sync: assistant {assistant_id} could not be fetched")
        return False

    prompt = build_assistant_system_prompt(
        assistant_name=config.name,
        organisation_name=organisation.name or DEFAULT_ORGANISATION_NAME,
        intents=intents,
    )

    synced = await vapi.update_system_prompt(assistant_id, config.model, prompt)
    if synced:
        logger.info(f"Synced {len(intents)} intents to assistant {assistant_id} for organisation {tenant.value}")
    else:
        logger.warning(f"Intent sync to assistant {assistant_id} failed for organisation {tenant.value}")
    return synced


async def bind_phone_numbers(
    db: AsyncSession,
    tenant: TenantKey,
    vapi: VapiClient,
    assistant_id: Optional[str],
) -> int:
    """
    Point every platform-backed number of the organisation at an assistant.

    Returns:
        Number of phone numbers the platform accepted
    """
    bound = 0
    for vapi_phone_number_id in await PhoneNumberStore(db).vapi_ids(tenant):
        if await vapi.set_phone_number_assistant(vapi_phone_number_id, assistant_id):
            bound += 1
        else:
            logger.warning(f"Could not bind phone number {vapi_phone_number_id} to assistant {assistant_id}")
    return bound
