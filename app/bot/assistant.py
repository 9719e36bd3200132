"""
BotLab v1.0 - Voice Assistant Webhook Format
Reads a conversation-webhook request (inputs[0].rawInputs[0].query) and
writes the matching simpleResponse payload. The reply itself comes from
the learner's bot via the matcher.
"""

from dataclasses import dataclass
from typing import Optional

MAIN_INTENT = "actions.intent.MAIN"
TEXT_INTENT = "actions.intent.TEXT"

WELCOME_TEXT = "Welcome to your AI assistant! What would you like to know?"
ERROR_TEXT = "Sorry, I encountered an error. Please try again later."


@dataclass
class AssistantQuery:
    query: str
    intent: str
    conversation_token: str


def parse_request(body: Optional[dict]) -> AssistantQuery:
    """Pull the spoken query out of a webhook body. Missing pieces become ''."""
    body = body or {}
    inputs = body.get("inputs") or [{}]
    first = inputs[0] if isinstance(inputs[0], dict) else {}
    raw_inputs = first.get("rawInputs") or [{}]
    raw = raw_inputs[0] if isinstance(raw_inputs[0], dict) else {}
    return AssistantQuery(
        query=str(raw.get("query") or ""),
        intent=str(first.get("intent") or ""),
        conversation_token=str(body.get("conversationToken") or ""),
    )


def _simple_response(text: str) -> dict:
    return {"simpleResponse": {"textToSpeech": text, "displayText": text}}


def build_response(text: str, conversation_token: str = "") -> dict:
    return {
        "conversationToken": conversation_token,
        "expectUserResponse": True,
        "expectedInputs": [{
            "inputPrompt": {
                "richInitialPrompt": {"items": [_simple_response(text)]},
            },
            "possibleIntents": [{"intent": TEXT_INTENT}],
        }],
    }


def build_error_response() -> dict:
    return {
        "conversationToken": "",
        "expectUserResponse": False,
        "finalResponse": {
            "richResponse": {"items": [_simple_response(ERROR_TEXT)]},
        },
    }
