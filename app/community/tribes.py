"""
BotLab v1.0 - Tribes
Community groups: joining, tribe chat, XP and the leaderboard.
A learner belongs to at most one tribe.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session as DBSession

from app.bot.validation import sanitize_input, validate_chat_message
from app.config import XP_PER_LEVEL, CHAT_HISTORY_LIMIT, LEADERBOARD_SIZE
from app.models import Learner, Tribe, TribeChatMessage, TribeMembership

logger = logging.getLogger(__name__)


class TribeError(Exception):
    """Base class for tribe rule violations."""


class TribeNotFound(TribeError):
    pass


class AlreadyInTribe(TribeError):
    pass


class NotATribeMember(TribeError):
    pass


class InvalidMessage(TribeError):
    pass


# ─── Seed Data ───────────────────────────────────────────────────────────────

DEFAULT_TRIBES = [
    {"name": "Code Lions", "emoji": "lion", "color": "amber",
     "description": "Brave builders who love making bots that talk."},
    {"name": "Data Dolphins", "emoji": "dolphin", "color": "sky",
     "description": "Curious explorers of data, patterns and predictions."},
    {"name": "Robot Rhinos", "emoji": "rhino", "color": "slate",
     "description": "Tinkerers who teach machines new tricks."},
    {"name": "Wise Owls", "emoji": "owl", "color": "violet",
     "description": "Thinkers who ask how AI should be fair and kind."},
]


def seed_tribes(db: DBSession) -> int:
    """Create the default tribes if the table is empty. Returns rows added."""
    if db.query(Tribe).count() > 0:
        return 0
    for data in DEFAULT_TRIBES:
        db.add(Tribe(**data))
    db.commit()
    return len(DEFAULT_TRIBES)


# ─── XP ──────────────────────────────────────────────────────────────────────

def level_for_xp(xp: int) -> int:
    return max(xp, 0) // XP_PER_LEVEL + 1


def award_xp(db: DBSession, learner_id: str, points: int) -> Optional[TribeMembership]:
    """Add XP to the learner's membership. No-op for learners without a tribe."""
    membership = get_membership(db, learner_id)
    if membership is None:
        return None
    membership.xp_points += points
    new_level = level_for_xp(membership.xp_points)
    if new_level > membership.level:
        logger.info(f"Learner {learner_id} reached level {new_level}")
    membership.level = new_level
    db.commit()
    return membership


# ─── Read ────────────────────────────────────────────────────────────────────

def list_tribes(db: DBSession) -> list[Tribe]:
    return db.query(Tribe).order_by(Tribe.name.asc()).all()


def get_tribe(db: DBSession, tribe_id: str) -> Tribe:
    tribe = db.query(Tribe).filter(Tribe.id == tribe_id).first()
    if not tribe:
        raise TribeNotFound(f"Tribe {tribe_id} not found")
    return tribe


def get_membership(db: DBSession, learner_id: str) -> Optional[TribeMembership]:
    return (
        db.query(TribeMembership)
        .filter(TribeMembership.learner_id == learner_id)
        .first()
    )


def leaderboard(db: DBSession, tribe_id: str, limit: int = LEADERBOARD_SIZE) -> list[dict]:
    get_tribe(db, tribe_id)
    rows = (
        db.query(TribeMembership, Learner)
        .join(Learner, TribeMembership.learner_id == Learner.id)
        .filter(TribeMembership.tribe_id == tribe_id)
        .order_by(TribeMembership.xp_points.desc(), TribeMembership.joined_at.asc())
        .limit(limit)
        .all()
    )
    return [
        {
            "rank": rank,
            "learner_id": learner.id,
            "name": learner.name,
            "avatar": learner.avatar,
            "xp_points": membership.xp_points,
            "level": membership.level,
        }
        for rank, (membership, learner) in enumerate(rows, start=1)
    ]


def recent_messages(db: DBSession, tribe_id: str, limit: int = CHAT_HISTORY_LIMIT) -> list[dict]:
    """Latest `limit` messages, oldest first."""
    get_tribe(db, tribe_id)
    rows = (
        db.query(TribeChatMessage)
        .filter(TribeChatMessage.tribe_id == tribe_id)
        .order_by(TribeChatMessage.created_at.desc())
        .limit(limit)
        .all()
    )
    rows.reverse()
    return [
        {
            "id": m.id,
            "learner_id": m.learner_id,
            "author": m.learner.name if m.learner else None,
            "content": m.content,
            "created_at": m.created_at.isoformat(),
        }
        for m in rows
    ]


# ─── Write ───────────────────────────────────────────────────────────────────

def join_tribe(db: DBSession, learner_id: str, tribe_id: str) -> TribeMembership:
    tribe = get_tribe(db, tribe_id)
    if get_membership(db, learner_id) is not None:
        raise AlreadyInTribe("You are already in a tribe")

    membership = TribeMembership(
        learner_id=learner_id,
        tribe_id=tribe.id,
        xp_points=0,
        level=1,
        badges=[],
    )
    db.add(membership)
    tribe.member_count += 1
    db.commit()
    db.refresh(membership)

    logger.info(f"Learner {learner_id} joined tribe '{tribe.name}'")
    return membership


def post_message(db: DBSession, learner_id: str, tribe_id: str, content: str) -> TribeChatMessage:
    tribe = get_tribe(db, tribe_id)
    membership = get_membership(db, learner_id)
    if membership is None or membership.tribe_id != tribe.id:
        raise NotATribeMember("Join this tribe to chat with its members")

    check = validate_chat_message(content)
    cleaned = sanitize_input(content) if check.is_valid else ""
    if not check.is_valid or not cleaned:
        raise InvalidMessage(check.errors[0] if check.errors else "Message cannot be empty")

    message = TribeChatMessage(tribe_id=tribe.id, learner_id=learner_id, content=cleaned)
    db.add(message)
    db.commit()
    db.refresh(message)
    return message
