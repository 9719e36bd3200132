"""
BotLab v1.0 - Learning Router
Flashcard reviews (SM-2), lesson progress, learning paths and daily streaks.
"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session as DBSession

from app.community.tribes import award_xp
from app.config import ACTIVITY_XP
from app.database import get_db
from app.learning import lessons, records
from app.learning.spaced_repetition import quality_for_rating
from app.learning.streaks import Activity, ActivityRejected, FreezeNotAllowed
from app.models import Learner
from app.routers.auth import get_current_learner

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["learning"])


# ─── Request/Response Models ─────────────────────────────────────────────────

class ReviewRequest(BaseModel):
    rating: Optional[Literal["hard", "medium", "easy"]] = None
    quality: Optional[int] = Field(default=None, ge=0, le=5)

class ActivityRequest(BaseModel):
    activity_type: str
    time_spent: int = Field(ge=0)
    score: Optional[int] = Field(default=None, ge=0, le=100)
    lesson_id: Optional[str] = None
    category: Optional[str] = None

class ActivityResponse(BaseModel):
    streak: dict
    broken: bool
    notices: list[str]
    xp_awarded: int

class LessonProgressRequest(BaseModel):
    current_panel: Optional[int] = Field(default=None, ge=0)
    time_spent: int = Field(default=0, ge=0)
    bookmarked: Optional[bool] = None
    score: Optional[int] = Field(default=None, ge=0, le=100)  # set when the lesson is finished


# ─── Flashcards ──────────────────────────────────────────────────────────────

@router.get("/flashcards/{lesson_id}")
def lesson_flashcards(
    lesson_id: str,
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    return {"lesson_id": lesson_id, "progress": records.get_flashcard_progress(db, learner.id, lesson_id)}


@router.post("/flashcards/{lesson_id}/{flashcard_id}/review")
def review_card(
    lesson_id: str,
    flashcard_id: int,
    req: ReviewRequest,
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    if req.quality is not None:
        quality = req.quality
    elif req.rating is not None:
        quality = quality_for_rating(req.rating)
    else:
        raise HTTPException(422, "Provide a rating or a quality")

    return records.review_flashcard(db, learner.id, lesson_id, flashcard_id, quality)


# ─── Streaks ─────────────────────────────────────────────────────────────────

@router.get("/streak")
def get_streak(
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    return records.streak_dict(records.get_or_create_streak(db, learner.id))


@router.post("/streak/activity", response_model=ActivityResponse)
def record_activity(
    req: ActivityRequest,
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    activity = Activity(
        activity_type=req.activity_type,
        time_spent=req.time_spent,
        score=req.score,
        lesson_id=req.lesson_id,
        category=req.category,
    )
    try:
        update = records.record_activity(db, learner.id, activity)
    except ActivityRejected as e:
        logger.warning(f"Activity rejected for {learner.id}: {e}")
        raise HTTPException(422, str(e))

    membership = award_xp(db, learner.id, ACTIVITY_XP)
    row = records.get_or_create_streak(db, learner.id)
    return ActivityResponse(
        streak=records.streak_dict(row),
        broken=update.broken,
        notices=update.notices,
        xp_awarded=ACTIVITY_XP if membership else 0,
    )


@router.post("/streak/freeze")
def freeze_day(
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    try:
        row = records.spend_freeze_day(db, learner.id)
    except FreezeNotAllowed as e:
        logger.warning(f"Freeze refused for {learner.id}: {e}")
        raise HTTPException(409, str(e))
    return records.streak_dict(row)


# ─── Lessons ─────────────────────────────────────────────────────────────────

@router.get("/lessons/{lesson_id}/progress")
def lesson_progress(
    lesson_id: str,
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    return records.lesson_dict(records.get_lesson_state(db, learner.id, lesson_id))


@router.post("/lessons/{lesson_id}/progress")
def save_lesson_progress(
    lesson_id: str,
    req: LessonProgressRequest,
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    try:
        state = records.save_lesson_progress(
            db, learner.id, lesson_id,
            current_panel=req.current_panel,
            time_spent=req.time_spent,
            bookmarked=req.bookmarked,
            score=req.score,
        )
    except ValueError as e:
        raise HTTPException(422, str(e))
    return records.lesson_dict(state)


@router.get("/learning-paths")
def learning_paths(
    learner: Learner = Depends(get_current_learner),
    db: DBSession = Depends(get_db),
):
    progress = records.all_lesson_states(db, learner.id)
    return {
        "paths": lessons.learning_path_progress(progress),
        "summary": lessons.progress_summary(progress),
    }
