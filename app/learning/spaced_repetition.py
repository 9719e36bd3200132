"""
BotLab v1.0 - Spaced Repetition (SM-2)
Schedules flashcard reviews. PURE FUNCTIONS: callers pass `today`.

Quality scale 0-5 (0 = blackout, 5 = perfect). The study screen offers
three buttons mapped through RATING_QUALITY.
"""

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from app.config import DEFAULT_EASE_FACTOR, MIN_EASE_FACTOR, MASTERY_REPETITIONS

RATING_QUALITY = {
    "hard": 2,
    "medium": 3,
    "easy": 5,
}


@dataclass
class CardProgress:
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval_days: int = 0
    repetitions: int = 0
    next_review_date: Optional[date] = None
    mastery_level: int = 0  # 0-100


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def next_review(
    quality: int,
    progress: Optional[CardProgress] = None,
    today: Optional[date] = None,
) -> CardProgress:
    """Apply one SM-2 review and return the new schedule."""
    if not 0 <= quality <= 5:
        raise ValueError(f"quality must be between 0 and 5, got {quality}")

    progress = progress or CardProgress()
    today = today or date.today()

    miss = 5 - quality
    ease = progress.ease_factor + (0.1 - miss * (0.08 + miss * 0.02))
    ease = max(ease, MIN_EASE_FACTOR)

    if quality < 3:
        # Failed recall restarts the ladder
        interval = 1
        repetitions = 0
    else:
        if progress.repetitions == 0:
            interval = 1
        elif progress.repetitions == 1:
            interval = 6
        else:
            interval = _round_half_up(progress.interval_days * ease)
        repetitions = progress.repetitions + 1

    mastery = min(100, _round_half_up(repetitions / MASTERY_REPETITIONS * 100))

    return CardProgress(
        ease_factor=ease,
        interval_days=interval,
        repetitions=repetitions,
        next_review_date=today + timedelta(days=interval),
        mastery_level=mastery,
    )


def quality_for_rating(rating: str) -> int:
    try:
        return RATING_QUALITY[rating]
    except KeyError:
        raise ValueError(f"Unknown rating '{rating}'. Use one of: {', '.join(RATING_QUALITY)}")


def mastery_label(level: int) -> str:
    if level >= 80:
        return "Mastered"
    if level >= 60:
        return "Learning"
    if level >= 40:
        return "Familiar"
    return "New"


def review_hint(next_review_date: Optional[date], today: Optional[date] = None) -> str:
    """Human-friendly 'when do I see this card again' text."""
    if next_review_date is None:
        return "Not reviewed yet"
    today = today or date.today()
    days = (next_review_date - today).days

    if days <= 0:
        return "Due for review"
    if days == 1:
        return "Review tomorrow"
    if days < 7:
        return f"Review in {days} days"
    if days < 30:
        return f"Review in {math.ceil(days / 7)} weeks"
    return f"Review in {math.ceil(days / 30)} months"


def is_due(progress: Optional[CardProgress], today: Optional[date] = None) -> bool:
    if progress is None or progress.next_review_date is None:
        return True
    return progress.next_review_date <= (today or date.today())
