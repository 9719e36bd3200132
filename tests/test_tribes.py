"""
Tests for app/community/tribes.py: levels, XP awards, membership and chat history.
"""

from datetime import datetime, timedelta

import pytest

from app.community.tribes import (
    AlreadyInTribe, InvalidMessage, NotATribeMember,
    award_xp, join_tribe, level_for_xp, post_message, recent_messages, seed_tribes,
)
from app.models import Tribe, TribeChatMessage


@pytest.fixture
def tribe(db):
    seed_tribes(db)
    return db.query(Tribe).filter(Tribe.name == "Code Lions").first()


# ─── Levels and XP ───────────────────────────────────────────────────────────

def test_level_boundaries():
    assert level_for_xp(0) == 1
    assert level_for_xp(999) == 1
    assert level_for_xp(1000) == 2
    assert level_for_xp(1999) == 2
    assert level_for_xp(2000) == 3
    assert level_for_xp(-50) == 1


def test_award_xp_crosses_level(db, learner, tribe):
    join_tribe(db, learner.id, tribe.id)
    membership = award_xp(db, learner.id, 990)
    assert membership.level == 1

    membership = award_xp(db, learner.id, 10)
    assert membership.xp_points == 1000
    assert membership.level == 2


def test_award_xp_without_tribe(db, learner):
    assert award_xp(db, learner.id, 10) is None


# ─── Membership ──────────────────────────────────────────────────────────────

def test_join_once(db, learner, tribe):
    membership = join_tribe(db, learner.id, tribe.id)
    assert membership.level == 1
    assert membership.xp_points == 0
    assert tribe.member_count == 1

    with pytest.raises(AlreadyInTribe):
        join_tribe(db, learner.id, tribe.id)


# ─── Chat ────────────────────────────────────────────────────────────────────

def test_recent_messages_latest_fifty_oldest_first(db, learner, tribe):
    join_tribe(db, learner.id, tribe.id)
    start = datetime(2026, 5, 1, 12, 0)
    for i in range(55):
        db.add(TribeChatMessage(
            tribe_id=tribe.id,
            learner_id=learner.id,
            content=f"message {i}",
            created_at=start + timedelta(minutes=i),
        ))
    db.commit()

    messages = recent_messages(db, tribe.id)
    assert len(messages) == 50
    assert messages[0]["content"] == "message 5"
    assert messages[-1]["content"] == "message 54"
    assert {m["author"] for m in messages} == {"Amani"}


def test_post_message_needs_membership(db, learner, tribe):
    with pytest.raises(NotATribeMember):
        post_message(db, learner.id, tribe.id, "hello lions")


def test_post_message_rejects_markup_only(db, learner, tribe):
    join_tribe(db, learner.id, tribe.id)
    with pytest.raises(InvalidMessage):
        post_message(db, learner.id, tribe.id, "<>")
