"""
BotLab v1.0 - Voice Assistant Webhook Router
Lets a smart-speaker action talk to a learner's saved bot.
Always answers 200: failures become the spoken apology payload.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session as DBSession

from app.bot import assistant
from app.bot.matcher import reply
from app.bot.schema import BotConfiguration
from app.config import ENABLE_ASSISTANT_WEBHOOK
from app.database import get_db
from app.models import SavedBot

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/assistant", tags=["assistant"])


@router.post("/{bot_id}/webhook")
async def assistant_webhook(bot_id: str, request: Request, db: DBSession = Depends(get_db)):
    if not ENABLE_ASSISTANT_WEBHOOK:
        raise HTTPException(404, "Assistant webhook disabled")

    try:
        body = await request.json()
        query = assistant.parse_request(body)
        logger.info(f"Assistant webhook for bot {bot_id}: intent={query.intent!r}")

        if query.intent == assistant.MAIN_INTENT or not query.query.strip():
            text = assistant.WELCOME_TEXT
        else:
            bot = db.query(SavedBot).filter(SavedBot.id == bot_id).first()
            if not bot:
                raise LookupError(f"Bot {bot_id} not found")
            config = BotConfiguration.model_validate(bot.project_data or {})
            text = reply(query.query, config.intents()).text

        return assistant.build_response(text, query.conversation_token)
    except Exception as e:
        logger.error(f"Assistant webhook error for bot {bot_id}: {e}")
        return assistant.build_error_response()
