"""
BotLab v1.0 - Conversation Engine
Flow-aware wrapper around the matcher. Remembers which intent the bot is
"standing on" and prefers intents connected to it by an edge, so a
builder's flow graph shapes the conversation.

Engine state is a plain dict so the chat tester can persist it per bot.
"""

import logging
import random
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Optional

from app.bot.matcher import BotReply, find_best_match, fallback_reply, pick_response
from app.bot.schema import BotConfiguration
from app.bot.validation import sanitize_input
from app.config import (
    MATCH_THRESHOLD, CONNECTED_MATCH_THRESHOLD, PERSONALITY_PREFIX_RATE,
    MAX_ENGINE_HISTORY,
)

logger = logging.getLogger(__name__)

PERSONALITY_PREFIXES = [
    "As a {p} assistant, ",
    "With my {p} approach, ",
    "Being {p}, ",
]


@dataclass
class Exchange:
    user_input: str
    matched_intent: Optional[str]
    bot_response: str
    confidence: float
    timestamp: str


class ConversationEngine:
    def __init__(
        self,
        bot: BotConfiguration,
        personality: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ):
        self.bot = bot
        self.personality = personality
        self.rng = rng or random.Random()
        self.current_node_id: Optional[str] = None
        self.history: list[Exchange] = []

    # ─── State ───────────────────────────────────────────────────────────────

    def reset(self) -> None:
        self.current_node_id = None
        self.history = []

    def to_state(self) -> dict:
        return {
            "current_node_id": self.current_node_id,
            "history": [asdict(e) for e in self.history[-MAX_ENGINE_HISTORY:]],
        }

    @classmethod
    def from_state(
        cls,
        bot: BotConfiguration,
        state: Optional[dict],
        personality: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ) -> "ConversationEngine":
        engine = cls(bot, personality=personality, rng=rng)
        if state:
            node_id = state.get("current_node_id")
            # A node deleted since the last chat turn means starting over
            if node_id and any(n.id == node_id for n in bot.nodes):
                engine.current_node_id = node_id
            engine.history = [Exchange(**e) for e in state.get("history", [])]
        return engine

    # ─── Turn ────────────────────────────────────────────────────────────────

    def process(self, text: str) -> BotReply:
        intents = self.bot.intents()

        match = None
        if self.current_node_id:
            connected = self.bot.connected_intents(self.current_node_id)
            if connected:
                match = find_best_match(text, connected, threshold=MATCH_THRESHOLD)

        if match is None or match.confidence < CONNECTED_MATCH_THRESHOLD:
            global_match = find_best_match(text, intents, threshold=MATCH_THRESHOLD)
            if global_match is not None:
                match = global_match

        if match is None:
            result = fallback_reply(intents, self.rng)
        else:
            if any(r for r in match.intent.responses):
                response = pick_response(match.intent, self.rng)
                if self.personality and self.rng.random() < PERSONALITY_PREFIX_RATE:
                    prefix = self.rng.choice(PERSONALITY_PREFIXES).format(p=self.personality)
                    response = prefix + response.lower()
            else:
                response = fallback_reply(intents, self.rng).text

            result = BotReply(
                text=response,
                intent_name=match.intent.name,
                confidence=match.confidence,
                matched=True,
                phrase=match.phrase,
                node_id=match.intent.node_id,
            )
            self.current_node_id = match.intent.node_id

        logger.debug(
            f"Engine turn: '{text[:40]}' -> {result.intent_name} ({result.confidence:.2f})"
        )
        self.history.append(Exchange(
            user_input=sanitize_input(text),
            matched_intent=result.intent_name if result.matched else None,
            bot_response=result.text,
            confidence=result.confidence,
            timestamp=datetime.now(timezone.utc).isoformat(),
        ))
        return result
