"""
BotLab v1.0 - Daily Learning Streaks
Pure streak rules. The database layer (app.learning.records) loads a
StreakState, calls these functions, and writes the result back.

Rules:
- An activity counts only if it lasted MIN_ACTIVITY_SECONDS, lessons with
  a score reach MIN_LESSON_SCORE, and ACTIVITY_COOLDOWN_MINUTES have passed.
- Same day: streak unchanged. Next day: +1. Gap of 2+ days: back to 1.
- A freeze day bridges a gap; FREEZE_DAYS_PER_MONTH, refreshed monthly.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional

from app.config import (
    MIN_ACTIVITY_SECONDS, MIN_LESSON_SCORE, ACTIVITY_COOLDOWN_MINUTES,
    FREEZE_DAYS_PER_MONTH, STREAK_MILESTONE_DAYS,
)


class StreakError(Exception):
    """Base class for streak rule violations."""


class ActivityRejected(StreakError):
    pass


class FreezeNotAllowed(StreakError):
    pass


@dataclass
class Activity:
    activity_type: str
    time_spent: int  # seconds
    score: Optional[int] = None
    lesson_id: Optional[str] = None
    category: Optional[str] = None


@dataclass
class StreakState:
    last_activity_date: date
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_at: Optional[datetime] = None
    freeze_days_remaining: int = FREEZE_DAYS_PER_MONTH
    freeze_days_used_this_month: int = 0
    freeze_month: Optional[str] = None  # "YYYY-MM" the freeze counters belong to
    total_activities: int = 0
    history: list = field(default_factory=list)


@dataclass
class StreakUpdate:
    state: StreakState
    broken: bool
    notices: list[str]


# ─── Validation ──────────────────────────────────────────────────────────────

def validate_activity(
    activity: Activity,
    last_activity_at: Optional[datetime],
    now: datetime,
) -> None:
    """Raise ActivityRejected if the activity should not count."""
    if activity.time_spent < MIN_ACTIVITY_SECONDS:
        raise ActivityRejected(
            f"Activity must last at least {MIN_ACTIVITY_SECONDS // 60} minutes"
        )

    if activity.activity_type == "lesson" and activity.score is not None:
        if activity.score < MIN_LESSON_SCORE:
            raise ActivityRejected(f"Score must be at least {MIN_LESSON_SCORE}%")

    if last_activity_at is not None:
        cooldown = timedelta(minutes=ACTIVITY_COOLDOWN_MINUTES)
        elapsed = now - last_activity_at
        if elapsed < cooldown:
            remaining = cooldown - elapsed
            minutes = -(-int(remaining.total_seconds()) // 60)  # ceil
            raise ActivityRejected(f"Please wait {minutes} minutes before next activity")


# ─── Streak Progression ──────────────────────────────────────────────────────

def advance_streak(state: StreakState, activity_date: date) -> StreakUpdate:
    """Count one valid activity on `activity_date`. Mutates and returns state."""
    days = (activity_date - state.last_activity_date).days
    previous = state.current_streak
    broken = False
    notices: list[str] = []

    state.total_activities += 1

    if days <= 0:
        # A brand-new streak row starts at 0 on the day it is created
        if state.current_streak == 0:
            state.current_streak = 1
        else:
            state.longest_streak = max(state.longest_streak, state.current_streak)
            return StreakUpdate(state=state, broken=False, notices=notices)
    elif days == 1:
        state.current_streak += 1
    else:
        state.current_streak = 1
        broken = True

    state.longest_streak = max(state.longest_streak, state.current_streak)
    state.last_activity_date = activity_date
    state.history = list(state.history or []) + [
        {"date": activity_date.isoformat(), "maintained": not broken}
    ]

    streak = state.current_streak
    if streak > 0 and streak % STREAK_MILESTONE_DAYS == 0:
        notices.append(f"{streak} day streak! Amazing consistency!")
    elif streak == state.longest_streak and streak > 3 and streak > previous:
        notices.append(f"New record! {streak} days is your longest streak!")

    if broken and previous > 3:
        notices.append(
            f"Streak broken! But you can start fresh. Your best was {state.longest_streak} days."
        )

    return StreakUpdate(state=state, broken=broken, notices=notices)


# ─── Freeze Days ─────────────────────────────────────────────────────────────

def _month_key(day: date) -> str:
    return day.strftime("%Y-%m")


def refresh_monthly_freezes(state: StreakState, today: date) -> bool:
    """Reset freeze counters when a new month starts. Returns True if reset."""
    key = _month_key(today)
    if state.freeze_month == key:
        return False
    state.freeze_days_remaining = FREEZE_DAYS_PER_MONTH
    state.freeze_days_used_this_month = 0
    state.freeze_month = key
    return True


def use_freeze_day(state: StreakState, today: date) -> StreakState:
    """Spend a freeze day to keep the streak alive across a missed day."""
    if state.freeze_days_remaining <= 0:
        raise FreezeNotAllowed("No freeze days remaining")

    days = (today - state.last_activity_date).days
    if days <= 1:
        raise FreezeNotAllowed("Freeze day can only be used when you miss a day")

    state.freeze_days_remaining -= 1
    state.freeze_days_used_this_month += 1
    # Yesterday counts as active, so today's activity continues the streak
    state.last_activity_date = today - timedelta(days=1)
    state.history = list(state.history or []) + [
        {"date": state.last_activity_date.isoformat(), "maintained": True, "freeze": True}
    ]
    return state
