"""
BotLab v1.0 - ORM Models
Learners, saved bots, flashcard and lesson progress, streaks, tribes. UUID primary keys.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import (
    String, Integer, Float, Boolean, Text, Date, DateTime, JSON,
    ForeignKey, Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _uuid() -> str:
    return str(uuid.uuid4())

def _now() -> datetime:
    return datetime.now(timezone.utc)


# ─── Learners ────────────────────────────────────────────────────────────────

class Learner(Base):
    __tablename__ = "learners"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(100))
    pin: Mapped[str] = mapped_column(String(4), unique=True, index=True)
    age_group: Mapped[str] = mapped_column(String(10), default="8-10")
    avatar: Mapped[str] = mapped_column(String(20), default="robot")
    preferred_language: Mapped[str] = mapped_column(String(10), default="en")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now)

    # Relationships
    bots: Mapped[list["SavedBot"]] = relationship(back_populates="learner")
    streak: Mapped[Optional["UserStreak"]] = relationship(back_populates="learner", uselist=False)
    membership: Mapped[Optional["TribeMembership"]] = relationship(
        back_populates="learner", uselist=False
    )


# ─── Login Attempts (Rate Limiting) ──────────────────────────────────────────

class LoginAttempt(Base):
    __tablename__ = "login_attempts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    pin: Mapped[str] = mapped_column(String(4), index=True)
    success: Mapped[bool] = mapped_column(Boolean)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    attempted_at: Mapped[datetime] = mapped_column(DateTime, default=_now)


# ─── Saved Bots ──────────────────────────────────────────────────────────────

class SavedBot(Base):
    """A learner's bot project. The builder graph lives in `project_data`."""
    __tablename__ = "saved_bots"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    learner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("learners.id"), index=True
    )
    name: Mapped[str] = mapped_column(String(50))
    project_data: Mapped[dict] = mapped_column(JSON, default=dict)  # BotConfiguration dump
    engine_state: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)  # Chat tester state
    template_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now)

    # Relationships
    learner: Mapped["Learner"] = relationship(back_populates="bots")


# ─── Flashcard Progress ──────────────────────────────────────────────────────

class FlashcardProgress(Base):
    __tablename__ = "flashcard_progress"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    learner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("learners.id"), index=True
    )
    lesson_id: Mapped[str] = mapped_column(String(50))
    flashcard_id: Mapped[int] = mapped_column(Integer)
    ease_factor: Mapped[float] = mapped_column(Float, default=2.5)
    interval_days: Mapped[int] = mapped_column(Integer, default=0)
    repetitions: Mapped[int] = mapped_column(Integer, default=0)
    next_review_date: Mapped[date] = mapped_column(Date)
    mastery_level: Mapped[int] = mapped_column(Integer, default=0)
    last_reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now)

    # One row per learner per card
    __table_args__ = (
        Index(
            "ix_flashcard_learner_lesson_card",
            "learner_id", "lesson_id", "flashcard_id",
            unique=True,
        ),
    )


# ─── Lesson Progress ─────────────────────────────────────────────────────────

class LessonProgress(Base):
    __tablename__ = "lesson_progress"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    learner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("learners.id"), index=True
    )
    lesson_id: Mapped[str] = mapped_column(String(50))
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    score: Mapped[int] = mapped_column(Integer, default=0)  # 0-100, latest completed attempt
    current_panel: Mapped[int] = mapped_column(Integer, default=0)
    time_spent: Mapped[int] = mapped_column(Integer, default=0)  # seconds, cumulative
    attempts: Mapped[int] = mapped_column(Integer, default=0)
    bookmarked: Mapped[bool] = mapped_column(Boolean, default=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    last_visited_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_now, onupdate=_now)

    __table_args__ = (
        Index("ix_lesson_progress_learner_lesson", "learner_id", "lesson_id", unique=True),
    )


# ─── Streaks ─────────────────────────────────────────────────────────────────

class UserStreak(Base):
    __tablename__ = "user_streaks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    learner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("learners.id"), unique=True
    )
    current_streak: Mapped[int] = mapped_column(Integer, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, default=0)
    last_activity_date: Mapped[date] = mapped_column(Date)
    last_activity_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    freeze_days_remaining: Mapped[int] = mapped_column(Integer, default=3)
    freeze_days_used_this_month: Mapped[int] = mapped_column(Integer, default=0)
    freeze_month: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)  # "YYYY-MM"
    total_activities: Mapped[int] = mapped_column(Integer, default=0)
    streak_history: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)  # [{"date", "maintained"}]

    # Relationships
    learner: Mapped["Learner"] = relationship(back_populates="streak")


class ActivityLog(Base):
    __tablename__ = "activity_log"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    learner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("learners.id"), index=True
    )
    activity_type: Mapped[str] = mapped_column(String(30))  # lesson | quiz | flashcards | bot_builder
    activity_date: Mapped[date] = mapped_column(Date)
    time_spent: Mapped[int] = mapped_column(Integer)  # seconds
    score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    lesson_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)

    __table_args__ = (
        Index("ix_activity_learner_date", "learner_id", "activity_date"),
    )


# ─── Tribes ──────────────────────────────────────────────────────────────────

class Tribe(Base):
    __tablename__ = "tribes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(50), unique=True)
    description: Mapped[str] = mapped_column(Text, default="")
    emoji: Mapped[str] = mapped_column(String(10), default="")
    color: Mapped[str] = mapped_column(String(20), default="")
    member_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)

    # Relationships
    memberships: Mapped[list["TribeMembership"]] = relationship(back_populates="tribe")


class TribeMembership(Base):
    __tablename__ = "tribe_memberships"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    learner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("learners.id"), unique=True
    )
    tribe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tribes.id"), index=True
    )
    xp_points: Mapped[int] = mapped_column(Integer, default=0)
    level: Mapped[int] = mapped_column(Integer, default=1)
    badges: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime, default=_now)

    # Relationships
    learner: Mapped["Learner"] = relationship(back_populates="membership")
    tribe: Mapped["Tribe"] = relationship(back_populates="memberships")


class TribeChatMessage(Base):
    __tablename__ = "tribe_chat_messages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    tribe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tribes.id"), index=True
    )
    learner_id: Mapped[str] = mapped_column(String(36), ForeignKey("learners.id"))
    content: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_now)

    # Relationships
    learner: Mapped["Learner"] = relationship()

    __table_args__ = (
        Index("ix_tribe_chat_tribe_created", "tribe_id", "created_at"),
    )
