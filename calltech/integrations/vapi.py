"""Voice platform (VAPI) client.

Thin async wrapper around the VAPI REST API:
- fetch an assistant's configuration
- patch an assistant's system prompt
- bind a phone number to an assistant
- list the calls placed through a phone number

Upstream failures never raise. Every method returns None, False or an
empty list when the API key is missing, the call fails or the payload
doesn't validate, and callers fall back to a degraded answer.
"""

import logging
from datetime import datetime
from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "your_vapi_api_key_here"

DEFAULT_ASSISTANT_NAME = "Assistant"
DEFAULT_SYSTEM_PROMPT = "You are a helpful customer support assistant."
DEFAULT_FIRST_MESSAGE = "Hello! How can I help you today?"

MAX_CALLS_PER_NUMBER = 100


class VapiMessage(BaseModel):
    role: Optional[str] = None
    content: Optional[str] = None


class VapiModel(BaseModel):
    provider: Optional[str] = None
    model: Optional[str] = None
    temperature: Optional[float] = None
    messages: Optional[list[VapiMessage]] = None


class VapiVoice(BaseModel):
    provider: Optional[str] = None
    voiceId: Optional[str] = None


class VapiAssistantPayload(BaseModel):
    """Raw shape of GET /assistant/{id}; only the fields we read."""

    id: Optional[str] = None
    name: Optional[str] = None
    firstMessage: Optional[str] = None
    model: Optional[VapiModel] = None
    voice: Optional[VapiVoice] = None


class VapiCustomer(BaseModel):
    number: Optional[str] = None


class VapiCall(BaseModel):
    """One entry of GET /call; only the fields we read."""

    id: str
    status: Optional[str] = None
    recordingUrl: Optional[str] = None
    recording: Optional[Any] = None
    transcript: Optional[Any] = None
    summary: Optional[Any] = None
    analysis: Optional[Any] = None
    startedAt: Optional[datetime] = None
    endedAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None
    duration: Optional[float] = None
    customer: Optional[VapiCustomer] = None


class ModelConfig(BaseModel):
    provider: str = "openai"
    model: str = "gpt-4"
    temperature: float = 0.7


class AssistantConfig(BaseModel):
    """Validated assistant configuration."""

    id: str
    name: str
    system_prompt: str
    first_message: str
    voice_provider: str
    voice_id: str
    model: ModelConfig


def parse_assistant(payload: dict, assistant_id: str) -> Optional[AssistantConfig]:
    """
    Validate an assistant payload.

    Returns:
        AssistantConfig, or None if the payload is malformed or has no voice
    """
    try:
        data = VapiAssistantPayload.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Malformed assistant payload for {assistant_id}: {e}")
        return None

    voice = data.voice
    if voice is None or not voice.provider or not voice.voiceId:
        logger.warning(f"Assistant missing voice: {data.id or assistant_id}")
        return None

    model = data.model or VapiModel()
    system_prompt = DEFAULT_SYSTEM_PROMPT
    if model.messages and model.messages[0].content:
        system_prompt = model.messages[0].content

    defaults = ModelConfig()
    return AssistantConfig(
        id=data.id or assistant_id,
        name=data.name or DEFAULT_ASSISTANT_NAME,
        system_prompt=system_prompt,
        first_message=data.firstMessage or DEFAULT_FIRST_MESSAGE,
        voice_provider=voice.provider,
        voice_id=voice.voiceId,
        model=ModelConfig(
            provider=model.provider or defaults.provider,
            model=model.model or defaults.model,
            temperature=model.temperature if model.temperature is not None else defaults.temperature,
        ),
    )


class VapiClient:
    """Async client for the voice platform REST API."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.vapi.ai",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            api_key: VAPI private key; None or the placeholder disables the client
            base_url: API root
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key) and self.api_key != PLACEHOLDER_API_KEY

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )

    async def fetch_assistant(self, assistant_id: str) -> Optional[AssistantConfig]:
        """
        Fetch an assistant's configuration.

        Args:
            assistant_id: Voice platform assistant id

        Returns:
            AssistantConfig, or None when unavailable
        """
        if not self.configured:
            return None

        try:
            async with self._client() as client:
                response = await client.get(f"/assistant/{quote(assistant_id, safe='')}")
        except httpx.HTTPError as e:
            logger.warning(f"VAPI GET assistant {assistant_id} failed: {e!r}")
            return None

        if response.status_code != 200:
            logger.warning(f"VAPI GET assistant {assistant_id} returned {response.status_code}: {response.text}")
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.warning(f"VAPI GET assistant {assistant_id} returned non-JSON body")
            return None

        if not isinstance(payload, dict):
            logger.warning(f"VAPI GET assistant {assistant_id} returned unexpected payload")
            return None

        return parse_assistant(payload, assistant_id)

    async def update_system_prompt(
        self,
        assistant_id: str,
        model: ModelConfig,
        system_prompt: str,
    ) -> bool:
        """
        Replace an assistant's system prompt, keeping its model settings.

        Returns:
            True if the platform accepted the update
        """
        if not self.configured:
            return False

        body = {
            "model": {
                "provider": model.provider,
                "model": model.model,
                "temperature": model.temperature,
                "messages": [{"role": "system", "content": system_prompt}],
            }
        }

        try:
            async with self._client() as client:
                response = await client.patch(f"/assistant/{quote(assistant_id, safe='')}", json=body)
        except httpx.HTTPError as e:
            logger.warning(f"VAPI PATCH assistant {assistant_id} failed: {e!r}")
            return False

        if not response.is_success:
            logger.error(f"VAPI PATCH assistant {assistant_id} returned {response.status_code}: {response.text}")
            return False
        return True

    async def set_phone_number_assistant(
        self,
        vapi_phone_number_id: str,
        assistant_id: Optional[str],
    ) -> bool:
        """
        Point a platform phone number at an assistant (None unbinds it).

        Returns:
            True if the platform accepted the update
        """
        if not self.configured:
            return False

        try:
            async with self._client() as client:
                response = await client.patch(
                    f"/phone-number/{quote(vapi_phone_number_id, safe='')}",
                    json={"assistantId": assistant_id},
                )
        except httpx.HTTPError as e:
            logger.warning(f"VAPI PATCH phone-number {vapi_phone_number_id} failed: {e!r}")
            return False

        if not response.is_success:
            logger.error(
                f"VAPI PATCH phone-number {vapi_phone_number_id} returned "
                f"{response.status_code}: {response.text}"
            )
            return False
        return True

    async def list_calls(self, vapi_phone_number_id: str, limit: int = MAX_CALLS_PER_NUMBER) -> list[VapiCall]:
        """
        List recent calls placed through a platform phone number.

        Returns:
            Calls as the platform reports them; empty when unavailable.
            Entries that don't validate are skipped.
        """
        if not self.configured:
            return []

        try:
            async with self._client() as client:
                response = await client.get(
                    "/call", params={"phoneNumberId": vapi_phone_number_id, "limit": limit}
                )
        except httpx.HTTPError as e:
            logger.warning(f"VAPI GET calls for {vapi_phone_number_id} failed: {e!r}")
            return []

        if response.status_code != 200:
            logger.warning(
                f"VAPI GET calls for {vapi_phone_number_id} returned {response.status_code}: {response.text}"
            )
            return []

        try:
            payload = response.json()
        except ValueError:
            logger.warning(f"VAPI GET calls for {vapi_phone_number_id} returned non-JSON body")
            return []

        # The list comes bare or wrapped, depending on API version
        if isinstance(payload, dict):
            payload = payload.get("calls", payload.get("data"))
        if not isinstance(payload, list):
            logger.warning(f"VAPI GET calls for {vapi_phone_number_id} returned unexpected payload")
            return []

        calls = []
        for item in payload:
            try:
                calls.append(VapiCall.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed call for {vapi_phone_number_id}: {e}")
        return calls
