"""
BotLab v1.0 - Lesson Progress and Learning Paths
Per-lesson progress (panel, time, attempts, score, bookmark) and the
learning paths built on top of it. PURE FUNCTIONS: callers pass `now`.
"""

import math
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, Optional


@dataclass
class LessonState:
    lesson_id: str
    completed: bool = False
    score: int = 0
    current_panel: int = 0
    time_spent: int = 0  # seconds
    attempts: int = 0
    bookmarked: bool = False
    completed_at: Optional[datetime] = None
    last_visited_at: Optional[datetime] = None


LEARNING_PATHS = [
    {
        "id": "fundamentals",
        "name": "AI Fundamentals",
        "description": "Learn the basics of artificial intelligence",
        "lessons": ["what-is-ai", "machine-learning", "neural-networks"],
    },
    {
        "id": "applications",
        "name": "AI Applications",
        "description": "Explore real-world AI applications",
        "lessons": ["computer-vision", "deep-learning"],
    },
]


# ─── Progress Updates ────────────────────────────────────────────────────────

def update_progress(
    state: Optional[LessonState],
    lesson_id: str,
    now: datetime,
    current_panel: Optional[int] = None,
    time_spent: int = 0,
    bookmarked: Optional[bool] = None,
) -> LessonState:
    """Record a visit. `time_spent` is added to the running total."""
    if time_spent < 0:
        raise ValueError("time_spent cannot be negative")
    if current_panel is not None and current_panel < 0:
        raise ValueError("current_panel cannot be negative")

    state = replace(state) if state else LessonState(lesson_id=lesson_id)
    if current_panel is not None:
        state.current_panel = current_panel
    if bookmarked is not None:
        state.bookmarked = bookmarked
    state.time_spent += time_spent
    state.last_visited_at = now
    return state


def complete_lesson(state: Optional[LessonState], lesson_id: str, score: int, now: datetime) -> LessonState:
    """Finish an attempt. Every completion counts as an attempt; the latest score is kept."""
    if not 0 <= score <= 100:
        raise ValueError(f"score must be between 0 and 100, got {score}")

    state = replace(state) if state else LessonState(lesson_id=lesson_id)
    state.completed = True
    state.score = score
    state.attempts += 1
    state.completed_at = now
    state.last_visited_at = now
    return state


def is_lesson_unlocked(progress: dict[str, LessonState], prerequisites: Optional[Iterable[str]] = None) -> bool:
    if not prerequisites:
        return True
    return all(p in progress and progress[p].completed for p in prerequisites)


# ─── Paths and Totals ────────────────────────────────────────────────────────

def learning_path_progress(progress: dict[str, LessonState]) -> list[dict]:
    paths = []
    for path in LEARNING_PATHS:
        total = len(path["lessons"])
        done = sum(1 for lesson_id in path["lessons"]
                   if lesson_id in progress and progress[lesson_id].completed)
        paths.append({
            "id": path["id"],
            "name": path["name"],
            "description": path["description"],
            "total_lessons": total,
            "completed_lessons": done,
            "progress": done / total * 100 if total else 0.0,
        })
    return paths


def progress_summary(progress: dict[str, LessonState]) -> dict:
    """Overall completion over started lessons, and the average score of completed ones."""
    states = list(progress.values())
    completed = [s for s in states if s.completed]
    return {
        "lessons_started": len(states),
        "lessons_completed": len(completed),
        "total_progress": len(completed) / len(states) * 100 if states else 0.0,
        "average_score": (
            math.floor(sum(s.score for s in completed) / len(completed) + 0.5) if completed else 0
        ),
        "total_time_spent": sum(s.time_spent for s in states),
    }
