"""
BotLab v1.0 - Bot Builder Router
Saved bot projects, the chat tester and starter templates.

The chat tester runs the flow-aware ConversationEngine and stores its
state on the bot row, so each request continues the same conversation.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session as DBSession

from app.bot.engine import ConversationEngine
from app.bot.matcher import reply
from app.bot.schema import BotConfiguration
from app.bot.validation import validate_bot_configuration, validate_chat_message
from app.content.templates import get_template, list_templates, template_to_configuration
from app.database import get_db
from app.models import Learner, SavedBot
from app.routers.auth import get_current_learner

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["bots"])


# ─── Request/Response Models ─────────────────────────────────────────────────

class BotSummary(BaseModel):
    id: str
    name: str
    template_id: Optional[str] = None
    intent_count: int
    updated_at: str

class BotDetail(BaseModel):
    id: str
    name: str
    configuration: BotConfiguration
    warnings: list[str] = []

class ChatRequest(BaseModel):
    message: str

class ChatResponse(BaseModel):
    response: str
    matched_intent: Optional[str] = None
    confidence: float
    matched: bool

class MatchRequest(BaseModel):
    message: str
    configuration: BotConfiguration

class UseTemplateRequest(BaseModel):
    name: Optional[str] = None


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _owned_bot(db: DBSession, learner: Learner, bot_id: str) -> SavedBot:
    bot = db.query(SavedBot).filter(SavedBot.id == bot_id).first()
    if not bot:
        raise HTTPException(404, "Bot not found")
    if bot.learner_id != learner.id:
        raise HTTPException(403, "Not your bot")
    return bot


def load_configuration(bot: SavedBot) -> BotConfiguration:
    try:
        return BotConfiguration.model_validate(bot.project_data or {})
    except ValidationError as e:
        logger.error(f"Stored bot {bot.id} has an invalid configuration: {e}")
        raise HTTPException(500, "Stored bot configuration is corrupt")


def _validate_or_422(config: BotConfiguration) -> list[str]:
    result = validate_bot_configuration(config)
    if not result.is_valid:
        raise HTTPException(
            status_code=422,
            detail={"errors": result.errors, "warnings": result.warnings},
        )
    return result.warnings


def _checked_message(message: str) -> str:
    """Matching runs on the raw text. Only the stored history is sanitized."""
    check = validate_chat_message(message)
    if not check.is_valid:
        raise HTTPException(422, check.errors[0])
    return message


def _detail(bot: SavedBot, warnings: Optional[list[str]] = None) -> BotDetail:
    return BotDetail(
        id=bot.id,
        name=bot.name,
        configuration=load_configuration(bot),
        warnings=warnings or [],
    )


# ─── Saved Bots ──────────────────────────────────────────────────────────────

@router.get("/bots", response_model=list[BotSummary])
def list_bots(
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    bots = (
        db.query(SavedBot)
        .filter(SavedBot.learner_id == learner.id)
        .order_by(SavedBot.updated_at.desc())
        .all()
    )
    return [
        BotSummary(
            id=b.id,
            name=b.name,
            template_id=b.template_id,
            intent_count=len(load_configuration(b).intent_nodes()),
            updated_at=b.updated_at.isoformat(),
        )
        for b in bots
    ]


@router.post("/bots", response_model=BotDetail, status_code=201)
def create_bot(
    config: BotConfiguration,
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    warnings = _validate_or_422(config)
    bot = SavedBot(
        learner_id=learner.id,
        name=config.name.strip(),
        project_data=config.model_dump(),
    )
    db.add(bot)
    db.commit()
    db.refresh(bot)
    logger.info(f"Bot '{bot.name}' created by {learner.id}")
    return _detail(bot, warnings)


@router.get("/bots/{bot_id}", response_model=BotDetail)
def get_bot(
    bot_id: str,
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    return _detail(_owned_bot(db, learner, bot_id))


@router.put("/bots/{bot_id}", response_model=BotDetail)
def update_bot(
    bot_id: str,
    config: BotConfiguration,
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    bot = _owned_bot(db, learner, bot_id)
    warnings = _validate_or_422(config)
    bot.name = config.name.strip()
    bot.project_data = config.model_dump()
    db.commit()
    db.refresh(bot)
    logger.info(f"Bot {bot.id} updated")
    return _detail(bot, warnings)


@router.delete("/bots/{bot_id}", status_code=204)
def delete_bot(
    bot_id: str,
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    bot = _owned_bot(db, learner, bot_id)
    db.delete(bot)
    db.commit()
    logger.info(f"Bot {bot_id} deleted")


# ─── Chat Tester ─────────────────────────────────────────────────────────────

@router.post("/bots/match", response_model=ChatResponse)
def match_message(req: MatchRequest):
    """Stateless match against an unsaved configuration (builder preview)."""
    message = _checked_message(req.message)
    result = reply(message, req.configuration.intents())
    return ChatResponse(
        response=result.text,
        matched_intent=result.intent_name,
        confidence=result.confidence,
        matched=result.matched,
    )


@router.post("/bots/{bot_id}/chat", response_model=ChatResponse)
def chat_with_bot(
    bot_id: str,
    req: ChatRequest,
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    bot = _owned_bot(db, learner, bot_id)
    message = _checked_message(req.message)
    config = load_configuration(bot)

    engine = ConversationEngine.from_state(
        config, bot.engine_state, personality=config.personality
    )
    result = engine.process(message)

    bot.engine_state = engine.to_state()
    db.commit()

    return ChatResponse(
        response=result.text,
        matched_intent=result.intent_name,
        confidence=result.confidence,
        matched=result.matched,
    )


@router.post("/bots/{bot_id}/chat/reset", status_code=204)
def reset_chat(
    bot_id: str,
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    bot = _owned_bot(db, learner, bot_id)
    bot.engine_state = None
    db.commit()


@router.get("/bots/{bot_id}/chat/history")
def chat_history(
    bot_id: str,
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    bot = _owned_bot(db, learner, bot_id)
    state = bot.engine_state or {}
    return {"history": state.get("history", [])}


# ─── Templates ───────────────────────────────────────────────────────────────

@router.get("/templates")
def get_templates(category: Optional[str] = None):
    return {"templates": list_templates(category)}


@router.post("/templates/{template_id}/use", response_model=BotDetail, status_code=201)
def use_template(
    template_id: str,
    req: Optional[UseTemplateRequest] = None,
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    template = get_template(template_id)
    if not template:
        raise HTTPException(404, "Template not found")

    config = template_to_configuration(template, name=req.name if req else None)
    warnings = _validate_or_422(config)
    bot = SavedBot(
        learner_id=learner.id,
        name=config.name,
        project_data=config.model_dump(),
        template_id=template_id,
    )
    db.add(bot)
    db.commit()
    db.refresh(bot)
    logger.info(f"Bot '{bot.name}' created from template {template_id}")
    return _detail(bot, warnings)
