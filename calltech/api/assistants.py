"""
Assistant API routes.

The organisation's selected assistant lives on the voice platform; this
router only reports which one is selected and offers the voice catalogue.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from calltech.database import get_db
from calltech.dependencies import get_vapi_client
from calltech.integrations import VapiClient
from calltech.middleware.auth import get_tenant
from calltech.stores import OrganisationStore
from calltech.tenancy import TenantContext
from calltech.voices import VOICE_OPTIONS, VoiceOption

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assistants", tags=["assistants"])

# Shown when the platform can't tell us the assistant's name
FALLBACK_ASSISTANT_NAME = "Your assistant"


class AssistantSummary(BaseModel):
    id: str
    name: str


class CurrentAssistantResponse(BaseModel):
    assistant: Optional[AssistantSummary] = None


class VoicesResponse(BaseModel):
    voices: List[VoiceOption]


@router.get("/current", response_model=CurrentAssistantResponse)
async def get_current_assistant(
    tenant: TenantContext = Depends(get_tenant),
    db: AsyncSession = Depends(get_db),
    vapi: VapiClient = Depends(get_vapi_client),
):
    """
    The organisation's selected assistant.

    ``{"assistant": null}`` when none is selected. When the platform is
    unreachable the selection is still reported under a generic name.
    """
    organisation = await OrganisationStore(db).get(tenant.organisation_key)
    assistant_id = organisation.selected_voice_agent_id if organisation else None
    if not assistant_id:
        return CurrentAssistantResponse(assistant=None)

    config = await vapi.fetch_assistant(assistant_id)
    if config is None:
        logger.info(f"Assistant {assistant_id} unavailable; reporting fallback name")
        return CurrentAssistantResponse(
            assistant=AssistantSummary(id=assistant_id, name=FALLBACK_ASSISTANT_NAME)
        )

    return CurrentAssistantResponse(assistant=AssistantSummary(id=config.id, name=config.name))


@router.get("/voices", response_model=VoicesResponse)
async def list_voices(tenant: TenantContext = Depends(get_tenant)):
    return VoicesResponse(voices=VOICE_OPTIONS)
