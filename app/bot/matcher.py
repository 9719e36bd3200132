"""
BotLab v1.0 - Intent Matcher
Scores a learner's message against every intent's training phrases and
picks the best one. Used by the chat tester, the flow engine and the
voice-assistant webhook.

This is a PURE MODULE: no I/O, no database. Randomness only enters through
response selection, via an injectable random.Random.

Scoring:
    words(s)  = set of whitespace-separated tokens of s.lower()
    score     = |words(U) ∩ words(P)| / max(|words(U)|, |words(P)|)
    match     = highest-scoring (intent, phrase) pair, if score > 0.3
"""

import random
from dataclasses import dataclass, field
from typing import Iterable, Optional

from app.config import MATCH_THRESHOLD

NO_RESPONSE_TEXT = (
    "I understand you're asking about that, but I don't have a specific response ready yet."
)
FALLBACK_TEXT = "I didn't understand that. Could you try rephrasing?"
FALLBACK_INTENT_NAME = "Fallback"


@dataclass
class Intent:
    """One intent as the matcher sees it. Built from a builder node."""
    name: str
    training_phrases: list[str] = field(default_factory=list)
    responses: list[str] = field(default_factory=list)
    is_fallback: bool = False
    node_id: Optional[str] = None


@dataclass
class IntentMatch:
    intent: Intent
    confidence: float
    phrase: str  # Training phrase that produced the best score


@dataclass
class BotReply:
    text: str
    intent_name: Optional[str]
    confidence: float
    matched: bool
    phrase: Optional[str] = None
    node_id: Optional[str] = None


# ─── Scoring ─────────────────────────────────────────────────────────────────

def _words(text: str) -> set[str]:
    return set(str(text).lower().split())


def similarity(utterance: str, phrase: str) -> float:
    """Word-overlap ratio between two strings, in [0, 1]."""
    a = _words(utterance)
    b = _words(phrase)
    longest = max(len(a), len(b))
    if longest == 0:
        return 0.0
    return len(a & b) / longest


def is_fallback_intent(intent: Intent) -> bool:
    return intent.is_fallback or intent.name.strip().lower() == "fallback"


# ─── Matching ────────────────────────────────────────────────────────────────

def find_best_match(
    utterance: str,
    intents: Iterable[Intent],
    threshold: float = MATCH_THRESHOLD,
) -> Optional[IntentMatch]:
    """Return the best (intent, phrase) pair scoring above `threshold`, else None.

    Ties keep the first pair seen, so the winner depends only on the order
    of intents and phrases, never on randomness. Fallback intents are skipped.
    """
    best: Optional[IntentMatch] = None
    highest = 0.0

    for intent in intents:
        if is_fallback_intent(intent):
            continue
        for phrase in intent.training_phrases:
            score = similarity(utterance, phrase)
            if score > highest and score > threshold:
                highest = score
                best = IntentMatch(intent=intent, confidence=score, phrase=phrase)

    return best


def find_fallback(intents: Iterable[Intent]) -> Optional[Intent]:
    for intent in intents:
        if is_fallback_intent(intent):
            return intent
    return None


# ─── Responses ───────────────────────────────────────────────────────────────

def pick_response(intent: Intent, rng: Optional[random.Random] = None) -> str:
    """Uniform random choice among the intent's responses."""
    responses = [r for r in intent.responses if r]
    if not responses:
        return NO_RESPONSE_TEXT
    return (rng or random).choice(responses)


def fallback_reply(intents: Iterable[Intent], rng: Optional[random.Random] = None) -> BotReply:
    fallback = find_fallback(intents)
    text = FALLBACK_TEXT
    node_id = None
    if fallback is not None:
        node_id = fallback.node_id
        responses = [r for r in fallback.responses if r]
        if responses:
            text = (rng or random).choice(responses)
    return BotReply(
        text=text,
        intent_name=FALLBACK_INTENT_NAME,
        confidence=0.0,
        matched=False,
        node_id=node_id,
    )


def reply(
    utterance: str,
    intents: list[Intent],
    rng: Optional[random.Random] = None,
    threshold: float = MATCH_THRESHOLD,
) -> BotReply:
    """Match the utterance and produce the bot's answer."""
    match = find_best_match(utterance, intents, threshold=threshold)
    if match is None:
        return fallback_reply(intents, rng)

    return BotReply(
        text=pick_response(match.intent, rng),
        intent_name=match.intent.name,
        confidence=match.confidence,
        matched=True,
        phrase=match.phrase,
        node_id=match.intent.node_id,
    )
