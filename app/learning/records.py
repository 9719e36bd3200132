"""
BotLab v1.0 - Learning Records (Flashcard, Streak and Lesson Read/Write)
Bridges the pure SM-2, streak and lesson rules to the database.
All calendar days come from UTC so every streak date uses one clock.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session as DBSession

from app.learning import lessons, spaced_repetition as srs
from app.learning.streaks import (
    Activity, StreakState, StreakUpdate,
    advance_streak, refresh_monthly_freezes, use_freeze_day, validate_activity,
)
from app.config import FREEZE_DAYS_PER_MONTH
from app.models import ActivityLog, FlashcardProgress, LessonProgress, UserStreak

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _utc_today() -> date:
    """Calendar day for streaks and reviews. One clock, whatever the host timezone."""
    return _utcnow().date()


def _naive(dt: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; compare everything as naive UTC."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


# ─── Flashcards ──────────────────────────────────────────────────────────────

def _progress_dict(row: FlashcardProgress, today: date) -> dict:
    return {
        "flashcard_id": row.flashcard_id,
        "ease_factor": row.ease_factor,
        "interval_days": row.interval_days,
        "repetitions": row.repetitions,
        "next_review_date": row.next_review_date.isoformat(),
        "mastery_level": row.mastery_level,
        "mastery_label": srs.mastery_label(row.mastery_level),
        "review_hint": srs.review_hint(row.next_review_date, today),
        "due": row.next_review_date <= today,
    }


def get_flashcard_progress(
    db: DBSession, learner_id: str, lesson_id: str, today: Optional[date] = None
) -> list[dict]:
    today = today or _utc_today()
    rows = (
        db.query(FlashcardProgress)
        .filter(
            FlashcardProgress.learner_id == learner_id,
            FlashcardProgress.lesson_id == lesson_id,
        )
        .order_by(FlashcardProgress.flashcard_id.asc())
        .all()
    )
    return [_progress_dict(r, today) for r in rows]


def review_flashcard(
    db: DBSession,
    learner_id: str,
    lesson_id: str,
    flashcard_id: int,
    quality: int,
    today: Optional[date] = None,
) -> dict:
    """Apply one review and upsert the learner's row for this card."""
    today = today or _utc_today()
    row = (
        db.query(FlashcardProgress)
        .filter(
            FlashcardProgress.learner_id == learner_id,
            FlashcardProgress.lesson_id == lesson_id,
            FlashcardProgress.flashcard_id == flashcard_id,
        )
        .first()
    )

    current = None
    if row:
        current = srs.CardProgress(
            ease_factor=row.ease_factor,
            interval_days=row.interval_days,
            repetitions=row.repetitions,
            next_review_date=row.next_review_date,
            mastery_level=row.mastery_level,
        )

    updated = srs.next_review(quality, current, today=today)

    if not row:
        row = FlashcardProgress(
            learner_id=learner_id,
            lesson_id=lesson_id,
            flashcard_id=flashcard_id,
        )
        db.add(row)

    row.ease_factor = updated.ease_factor
    row.interval_days = updated.interval_days
    row.repetitions = updated.repetitions
    row.next_review_date = updated.next_review_date
    row.mastery_level = updated.mastery_level
    row.last_reviewed_at = _utcnow()
    db.commit()

    logger.info(
        f"Flashcard {lesson_id}#{flashcard_id} q={quality}: "
        f"interval={updated.interval_days}d mastery={updated.mastery_level}"
    )
    return _progress_dict(row, today)


# ─── Streaks ─────────────────────────────────────────────────────────────────

def _to_state(row: UserStreak) -> StreakState:
    return StreakState(
        last_activity_date=row.last_activity_date,
        current_streak=row.current_streak,
        longest_streak=row.longest_streak,
        last_activity_at=_naive(row.last_activity_at),
        freeze_days_remaining=row.freeze_days_remaining,
        freeze_days_used_this_month=row.freeze_days_used_this_month,
        freeze_month=row.freeze_month,
        total_activities=row.total_activities,
        history=list(row.streak_history or []),
    )


def _apply_state(row: UserStreak, state: StreakState) -> None:
    row.current_streak = state.current_streak
    row.longest_streak = state.longest_streak
    row.last_activity_date = state.last_activity_date
    row.last_activity_at = state.last_activity_at
    row.freeze_days_remaining = state.freeze_days_remaining
    row.freeze_days_used_this_month = state.freeze_days_used_this_month
    row.freeze_month = state.freeze_month
    row.total_activities = state.total_activities
    # New list object so SQLAlchemy sees the JSON column change
    row.streak_history = list(state.history)


def get_or_create_streak(db: DBSession, learner_id: str, today: Optional[date] = None) -> UserStreak:
    today = today or _utc_today()
    row = db.query(UserStreak).filter(UserStreak.learner_id == learner_id).first()
    if not row:
        row = UserStreak(
            learner_id=learner_id,
            current_streak=0,
            longest_streak=0,
            last_activity_date=today,
            freeze_days_remaining=FREEZE_DAYS_PER_MONTH,
            freeze_days_used_this_month=0,
            freeze_month=today.strftime("%Y-%m"),
            total_activities=0,
            streak_history=[],
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        logger.info(f"Initialized streak for learner {learner_id}")
        return row

    state = _to_state(row)
    if refresh_monthly_freezes(state, today):
        _apply_state(row, state)
        db.commit()
        logger.info(f"Freeze days refreshed for learner {learner_id}")
    return row


def streak_dict(row: UserStreak) -> dict:
    return {
        "current_streak": row.current_streak,
        "longest_streak": row.longest_streak,
        "last_activity_date": row.last_activity_date.isoformat(),
        "freeze_days_remaining": row.freeze_days_remaining,
        "freeze_days_used_this_month": row.freeze_days_used_this_month,
        "total_activities": row.total_activities,
        "streak_history": list(row.streak_history or []),
    }


def record_activity(
    db: DBSession,
    learner_id: str,
    activity: Activity,
    now: Optional[datetime] = None,
) -> StreakUpdate:
    """Validate, log and count an activity. Raises ActivityRejected."""
    now = _naive(now or _utcnow())
    today = now.date()
    row = get_or_create_streak(db, learner_id, today)
    state = _to_state(row)

    validate_activity(activity, state.last_activity_at, now)

    db.add(ActivityLog(
        learner_id=learner_id,
        activity_type=activity.activity_type,
        activity_date=today,
        time_spent=activity.time_spent,
        score=activity.score,
        lesson_id=activity.lesson_id,
        category=activity.category,
    ))

    update = advance_streak(state, today)
    update.state.last_activity_at = now
    _apply_state(row, update.state)
    db.commit()

    logger.info(
        f"Activity '{activity.activity_type}' for {learner_id}: "
        f"streak={update.state.current_streak} broken={update.broken}"
    )
    return update


def spend_freeze_day(db: DBSession, learner_id: str, today: Optional[date] = None) -> UserStreak:
    """Raises FreezeNotAllowed."""
    today = today or _utc_today()
    row = get_or_create_streak(db, learner_id, today)
    state = use_freeze_day(_to_state(row), today)
    _apply_state(row, state)
    db.commit()
    logger.info(f"Freeze day used by {learner_id}: {state.freeze_days_remaining} left")
    return row


# ─── Lesson Progress ─────────────────────────────────────────────────────────

def _lesson_state(row: LessonProgress) -> lessons.LessonState:
    return lessons.LessonState(
        lesson_id=row.lesson_id,
        completed=row.completed,
        score=row.score,
        current_panel=row.current_panel,
        time_spent=row.time_spent,
        attempts=row.attempts,
        bookmarked=row.bookmarked,
        completed_at=row.completed_at,
        last_visited_at=row.last_visited_at,
    )


def lesson_dict(state: lessons.LessonState) -> dict:
    return {
        "lesson_id": state.lesson_id,
        "completed": state.completed,
        "score": state.score,
        "current_panel": state.current_panel,
        "time_spent": state.time_spent,
        "attempts": state.attempts,
        "bookmarked": state.bookmarked,
        "completed_at": state.completed_at.isoformat() if state.completed_at else None,
        "last_visited_at": state.last_visited_at.isoformat() if state.last_visited_at else None,
    }


def all_lesson_states(db: DBSession, learner_id: str) -> dict[str, lessons.LessonState]:
    rows = db.query(LessonProgress).filter(LessonProgress.learner_id == learner_id).all()
    return {r.lesson_id: _lesson_state(r) for r in rows}


def get_lesson_state(db: DBSession, learner_id: str, lesson_id: str) -> lessons.LessonState:
    """Stored progress, or a blank state for a lesson never opened."""
    row = (
        db.query(LessonProgress)
        .filter(LessonProgress.learner_id == learner_id, LessonProgress.lesson_id == lesson_id)
        .first()
    )
    return _lesson_state(row) if row else lessons.LessonState(lesson_id=lesson_id)


def save_lesson_progress(
    db: DBSession,
    learner_id: str,
    lesson_id: str,
    current_panel: Optional[int] = None,
    time_spent: int = 0,
    bookmarked: Optional[bool] = None,
    score: Optional[int] = None,
    now: Optional[datetime] = None,
) -> lessons.LessonState:
    """Apply a visit, and a completion when `score` is given. Raises ValueError."""
    now = _naive(now or _utcnow())
    row = (
        db.query(LessonProgress)
        .filter(LessonProgress.learner_id == learner_id, LessonProgress.lesson_id == lesson_id)
        .first()
    )
    current = _lesson_state(row) if row else None

    state = lessons.update_progress(
        current, lesson_id, now,
        current_panel=current_panel, time_spent=time_spent, bookmarked=bookmarked,
    )
    if score is not None:
        state = lessons.complete_lesson(state, lesson_id, score, now)

    if not row:
        row = LessonProgress(learner_id=learner_id, lesson_id=lesson_id)
        db.add(row)

    row.completed = state.completed
    row.score = state.score
    row.current_panel = state.current_panel
    row.time_spent = state.time_spent
    row.attempts = state.attempts
    row.bookmarked = state.bookmarked
    row.completed_at = state.completed_at
    row.last_visited_at = state.last_visited_at
    db.commit()

    if score is not None:
        logger.info(f"Lesson {lesson_id} completed by {learner_id}: score={score} attempts={state.attempts}")
    return state
