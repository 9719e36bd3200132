"""
Tests for app/learning/spaced_repetition.py (SM-2 scheduling).
"""

from datetime import date, timedelta

import pytest

from app.learning.spaced_repetition import (
    CardProgress, is_due, mastery_label, next_review, quality_for_rating, review_hint,
)

TODAY = date(2026, 3, 10)


# ─── SM-2 Steps ──────────────────────────────────────────────────────────────

class TestNextReview:
    def test_first_perfect_review(self):
        p = next_review(5, today=TODAY)
        assert p.ease_factor == pytest.approx(2.6)
        assert p.interval_days == 1
        assert p.repetitions == 1
        assert p.next_review_date == TODAY + timedelta(days=1)
        assert p.mastery_level == 10

    def test_second_success_jumps_to_six_days(self):
        p = next_review(5, next_review(5, today=TODAY), today=TODAY)
        assert p.interval_days == 6
        assert p.repetitions == 2
        assert p.ease_factor == pytest.approx(2.7)

    def test_later_intervals_grow_by_ease(self):
        p = CardProgress(ease_factor=2.7, interval_days=6, repetitions=2)
        nxt = next_review(5, p, today=TODAY)
        assert nxt.ease_factor == pytest.approx(2.8)
        assert nxt.interval_days == 17  # 6 * 2.8 = 16.8

    def test_barely_correct_lowers_ease(self):
        p = next_review(3, today=TODAY)
        assert p.ease_factor == pytest.approx(2.36)
        assert p.repetitions == 1

    def test_failure_restarts(self):
        p = CardProgress(ease_factor=2.5, interval_days=17, repetitions=4, mastery_level=40)
        nxt = next_review(2, p, today=TODAY)
        assert nxt.interval_days == 1
        assert nxt.repetitions == 0
        assert nxt.mastery_level == 0
        assert nxt.ease_factor == pytest.approx(2.18)

    def test_ease_never_below_floor(self):
        p = CardProgress()
        for _ in range(5):
            p = next_review(0, p, today=TODAY)
        assert p.ease_factor == pytest.approx(1.3)

    def test_mastery_caps_at_100(self):
        p = CardProgress(repetitions=12, interval_days=30)
        assert next_review(4, p, today=TODAY).mastery_level == 100

    @pytest.mark.parametrize("quality", [-1, 6])
    def test_quality_out_of_range(self, quality):
        with pytest.raises(ValueError):
            next_review(quality, today=TODAY)


# ─── Ratings and Labels ──────────────────────────────────────────────────────

def test_quality_for_rating():
    assert quality_for_rating("hard") == 2
    assert quality_for_rating("medium") == 3
    assert quality_for_rating("easy") == 5
    with pytest.raises(ValueError):
        quality_for_rating("impossible")


def test_mastery_label():
    assert mastery_label(95) == "Mastered"
    assert mastery_label(80) == "Mastered"
    assert mastery_label(60) == "Learning"
    assert mastery_label(45) == "Familiar"
    assert mastery_label(10) == "New"


def test_review_hint():
    assert review_hint(None, TODAY) == "Not reviewed yet"
    assert review_hint(TODAY - timedelta(days=2), TODAY) == "Due for review"
    assert review_hint(TODAY, TODAY) == "Due for review"
    assert review_hint(TODAY + timedelta(days=1), TODAY) == "Review tomorrow"
    assert review_hint(TODAY + timedelta(days=3), TODAY) == "Review in 3 days"
    assert review_hint(TODAY + timedelta(days=10), TODAY) == "Review in 2 weeks"
    assert review_hint(TODAY + timedelta(days=45), TODAY) == "Review in 2 months"


def test_is_due():
    assert is_due(None, TODAY)
    assert is_due(CardProgress(), TODAY)
    assert is_due(CardProgress(next_review_date=TODAY), TODAY)
    assert not is_due(CardProgress(next_review_date=TODAY + timedelta(days=1)), TODAY)
