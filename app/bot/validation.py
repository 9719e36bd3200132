"""
BotLab v1.0 - Builder Input Validation
Checks bot names, training phrases, responses, chat messages and whole
bot configurations before they are saved or run.

Errors block a save. Warnings are returned to the builder as nudges.
"""

import re
from dataclasses import dataclass, field

from app.bot.schema import BotConfiguration
from app.config import (
    BOT_NAME_MIN, BOT_NAME_MAX, TRAINING_PHRASE_MIN, TRAINING_PHRASE_MAX,
    RESPONSE_MAX, CHAT_MESSAGE_MAX,
    VOICE_SPEED_RANGE, VOICE_PITCH_RANGE, VOICE_VOLUME_RANGE,
)


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


_BOT_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\s\-_]+$")
_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE)


def sanitize_input(text: str) -> str:
    """Strip markup that could turn into script when a client renders it."""
    text = text.replace("<", "").replace(">", "")
    text = _JS_PROTOCOL.sub("", text)
    text = _EVENT_HANDLER.sub("", text)
    return text.strip()


def validate_bot_name(name: str) -> ValidationResult:
    result = ValidationResult()
    if not name or not name.strip():
        result.errors.append("Bot name is required")
    elif len(name.strip()) < BOT_NAME_MIN:
        result.errors.append(f"Bot name must be at least {BOT_NAME_MIN} characters long")
    elif len(name) > BOT_NAME_MAX:
        result.errors.append(f"Bot name must be less than {BOT_NAME_MAX} characters")
    elif not _BOT_NAME_PATTERN.match(name):
        result.errors.append(
            "Bot name can only contain letters, numbers, spaces, hyphens, and underscores"
        )
    return result


def validate_training_phrase(phrase: str) -> ValidationResult:
    result = ValidationResult()
    if not phrase or not phrase.strip():
        result.errors.append("Training phrase cannot be empty")
    elif len(phrase.strip()) < TRAINING_PHRASE_MIN:
        result.errors.append(
            f"Training phrase must be at least {TRAINING_PHRASE_MIN} characters long"
        )
    elif len(phrase) > TRAINING_PHRASE_MAX:
        result.errors.append(f"Training phrase must be less than {TRAINING_PHRASE_MAX} characters")
    return result


def validate_response(response: str) -> ValidationResult:
    result = ValidationResult()
    if not response or not response.strip():
        result.errors.append("Response cannot be empty")
    elif len(response) > RESPONSE_MAX:
        result.errors.append(f"Response must be less than {RESPONSE_MAX} characters")
    return result


def validate_chat_message(message: str) -> ValidationResult:
    result = ValidationResult()
    if not message or not message.strip():
        result.errors.append("Message cannot be empty")
    elif len(message.strip()) > CHAT_MESSAGE_MAX:
        result.errors.append(f"Message must be less than {CHAT_MESSAGE_MAX} characters")
    return result


def _check_range(result: ValidationResult, label: str, value: float, bounds: tuple) -> None:
    low, high = bounds
    if value < low or value > high:
        result.errors.append(f"Voice {label} must be between {low} and {high}")


def validate_bot_configuration(config: BotConfiguration) -> ValidationResult:
    result = validate_bot_name(config.name)

    if not config.avatar:
        result.warnings.append("No avatar selected - using default")

    intent_nodes = [n for n in config.nodes if n.type == "intent"]
    if not config.nodes:
        result.errors.append("At least one intent is required")
    elif not intent_nodes:
        result.errors.append("At least one intent node is required")

    for index, node in enumerate(intent_nodes, start=1):
        label = node.data.label.strip()
        if not label:
            result.errors.append(f"Intent {index} must have a label")
        if not node.data.training_phrases:
            result.warnings.append(f'Intent "{label}" has no training phrases')
        if not node.data.responses:
            result.warnings.append(f'Intent "{label}" has no responses')

        for phrase in node.data.training_phrases:
            for error in validate_training_phrase(phrase).errors:
                result.errors.append(f'Intent "{label}": {error}')
        for response in node.data.responses:
            for error in validate_response(response).errors:
                result.errors.append(f'Intent "{label}": {error}')

    node_ids = {n.id for n in config.nodes}
    for edge in config.edges:
        if edge.source not in node_ids or edge.target not in node_ids:
            result.warnings.append(f"Connection {edge.id} points to a missing intent")

    voice = config.voice_settings
    _check_range(result, "speed", voice.speed, VOICE_SPEED_RANGE)
    _check_range(result, "pitch", voice.pitch, VOICE_PITCH_RANGE)
    _check_range(result, "volume", voice.volume, VOICE_VOLUME_RANGE)

    return result
