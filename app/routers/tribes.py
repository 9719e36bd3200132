"""
BotLab v1.0 - Tribes Router
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session as DBSession

from app.community import tribes as svc
from app.database import get_db
from app.models import Learner
from app.routers.auth import get_current_learner

router = APIRouter(prefix="/api/tribes", tags=["tribes"])


class MessageRequest(BaseModel):
    content: str


def _raise_http(e: svc.TribeError):
    if isinstance(e, svc.TribeNotFound):
        raise HTTPException(404, str(e))
    if isinstance(e, svc.AlreadyInTribe):
        raise HTTPException(409, str(e))
    if isinstance(e, svc.NotATribeMember):
        raise HTTPException(403, str(e))
    raise HTTPException(422, str(e))


@router.get("")
def list_tribes(db: DBSession = Depends(get_db)):
    return {
        "tribes": [
            {
                "id": t.id,
                "name": t.name,
                "description": t.description,
                "emoji": t.emoji,
                "color": t.color,
                "member_count": t.member_count,
            }
            for t in svc.list_tribes(db)
        ]
    }


@router.get("/me")
def my_membership(
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    membership = svc.get_membership(db, learner.id)
    if membership is None:
        return {"membership": None}
    return {
        "membership": {
            "tribe_id": membership.tribe_id,
            "tribe_name": membership.tribe.name,
            "xp_points": membership.xp_points,
            "level": membership.level,
            "badges": membership.badges or [],
        }
    }


@router.post("/{tribe_id}/join", status_code=201)
def join(
    tribe_id: str,
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    try:
        membership = svc.join_tribe(db, learner.id, tribe_id)
    except svc.TribeError as e:
        _raise_http(e)
    return {
        "tribe_id": membership.tribe_id,
        "xp_points": membership.xp_points,
        "level": membership.level,
        "member_count": membership.tribe.member_count,
    }


@router.get("/{tribe_id}/messages")
def messages(
    tribe_id: str,
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    try:
        return {"messages": svc.recent_messages(db, tribe_id)}
    except svc.TribeError as e:
        _raise_http(e)


@router.post("/{tribe_id}/messages", status_code=201)
def send_message(
    tribe_id: str,
    req: MessageRequest,
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    try:
        message = svc.post_message(db, learner.id, tribe_id, req.content)
    except svc.TribeError as e:
        _raise_http(e)
    return {
        "id": message.id,
        "author": learner.name,
        "content": message.content,
        "created_at": message.created_at.isoformat(),
    }


@router.get("/{tribe_id}/leaderboard")
def tribe_leaderboard(tribe_id: str, limit: int = 10, db: DBSession = Depends(get_db)):
    try:
        return {"leaderboard": svc.leaderboard(db, tribe_id, limit=max(1, min(limit, 100)))}
    except svc.TribeError as e:
        _raise_http(e)
