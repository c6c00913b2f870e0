"""Voices offered when configuring an assistant."""

from pydantic import BaseModel


class VoiceOption(BaseModel):
    id: str
    name: str
    provider: str
    description: str | None = None


VOICE_OPTIONS: list[VoiceOption] = [
    VoiceOption(id="pNInz6obpgDQGcFmaJgB", name="Kylie", provider="11labs", description="Friendly, warm"),
    VoiceOption(id="EXAVITQu4vr4xnSDxMaL", name="Savannah", provider="11labs", description="Clear, professional"),
    VoiceOption(id="VR6AewLTigWG4xSOukaG", name="Arnold", provider="11labs", description="Deep, authoritative"),
    VoiceOption(id="TxGEqnHWrfWFTfGW9XjX", name="Josh", provider="11labs", description="Friendly, casual"),
    VoiceOption(id="XB0fDUnXU5powFXDhCwa", name="Charlotte", provider="11labs", description="Warm, articulate"),
    VoiceOption(id="onwK4e9ZLuTAKqWW03F9", name="Daniel", provider="11labs", description="Calm, British"),
    VoiceOption(id="ErXwobaYiN019PkySvjV", name="Antoni", provider="11labs", description="Friendly, warm"),
    VoiceOption(id="MF3mGyEYCl7XYWbV9V6O", name="Elli", provider="11labs", description="Friendly, American"),
    VoiceOption(id="21m00Tcm4TlvDq8ikWAM", name="Rachel", provider="11labs", description="Calm, clear"),
    VoiceOption(id="AZnzlk1XvdvUeBnXmlld", name="Domi", provider="11labs", description="Strong, confident"),
    VoiceOption(id="CYw3kZ02Hs0563khs1Fj", name="Dave", provider="11labs", description="Conversational"),
    VoiceOption(id="GBv7mTt0atIp3Br8iCZE", name="Thomas", provider="11labs", description="Calm, steady"),
    VoiceOption(id="IKne3meq5aSn9XLyUdCD", name="Charlie", provider="11labs", description="Friendly, upbeat"),
    VoiceOption(id="g5CIjZEefAph4nQFvHAz", name="Emily", provider="11labs", description="Friendly, American"),
    VoiceOption(id="oWAxZDx7w5VEj9dCyTzz", name="George", provider="11labs", description="Warm, British"),
]
