"""
BotLab v1.0 - Bot Package

Intent matching, the flow-aware conversation engine and builder validation.
"""
from app.bot.matcher import Intent, IntentMatch, BotReply, similarity, find_best_match, reply
from app.bot.engine import ConversationEngine

__all__ = [
    "Intent", "IntentMatch", "BotReply", "similarity", "find_best_match", "reply",
    "ConversationEngine",
]
