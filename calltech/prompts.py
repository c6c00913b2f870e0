"""
Assistant system prompts.

The organisation's intents are appended to a base customer-service prompt
in definition order.
"""

from typing import Iterable, Protocol, Sequence

BASE_SYSTEM_PROMPT = """# Customer Service & Support Agent Prompt

## Identity & Purpose

You are {assistant_name}, a customer service voice assistant for {organisation_name}. Your primary purpose is to help customers resolve issues with their products, answer questions about services, and ensure a satisfying support experience.

## Voice & Persona

- Sound friendly, patient, and knowledgeable without being condescending
- Use a conversational tone with natural speech patterns and contractions
- Speak with confidence but remain humble when you don't know something

## Conversation Flow

Start with: "Hi there, this is {assistant_name} from {organisation_name} customer support. How can I help you today?"

1. Ask open-ended questions first, then narrow down the issue.
2. Confirm your understanding before offering a solution.
3. Offer additional assistance before closing.

End with: "Thank you for contacting support. Have a great day!"

## Response Guidelines

- Keep responses conversational and under 30 words when possible
- Ask only one question at a time
- Use explicit confirmation for important information
- Avoid technical jargon unless the customer uses it first"""

INTENTS_PREAMBLE = (
    "Use the following intents and responses when the user asks matching questions. "
    "Keep responses concise and natural for voice."
)

INTENTS_EPILOGUE = (
    "If the user's question matches an intent, respond with the appropriate response in the "
    "same language they used. If no intent matches, politely ask for clarification or offer "
    "to help with something else."
)


class IntentLike(Protocol):
    intent_name: str
    example_user_phrases: Sequence[str]
    english_responses: Sequence[str]
    russian_responses: Sequence[str]


def format_intent(intent: IntentLike) -> str:
    return (
        f"Intent: {intent.intent_name}\n"
        f"Example questions: {', '.join(intent.example_user_phrases or [])}\n"
        f"English responses: {' | '.join(intent.english_responses or [])}\n"
        f"Russian responses: {' | '.join(intent.russian_responses or [])}"
    )


def build_prompt_with_intents(base_prompt: str, intents: Iterable[IntentLike]) -> str:
    """Append an intents block to a prompt; the prompt is unchanged without intents."""
    blocks = [format_intent(intent) for intent in intents]
    if not blocks:
        return base_prompt

    intents_block = "\n\n".join(blocks)
    return f"{base_prompt}\n\n{INTENTS_PREAMBLE}\n\n{intents_block}\n\n{INTENTS_EPILOGUE}"


def build_assistant_system_prompt(
    assistant_name: str,
    organisation_name: str,
    intents: Iterable[IntentLike],
) -> str:
    base = BASE_SYSTEM_PROMPT.format(
        assistant_name=assistant_name,
        organisation_name=organisation_name,
    )
    return build_prompt_with_intents(base, intents)
