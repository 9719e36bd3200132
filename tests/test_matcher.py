"""
Tests for app/bot/matcher.py: word-overlap scoring, best-match selection,
fallback handling and response choice.
"""

import random

import pytest

from app.bot.matcher import (
    FALLBACK_TEXT, NO_RESPONSE_TEXT, Intent,
    find_best_match, find_fallback, pick_response, reply, similarity,
)


def _intents():
    return [
        Intent(
            name="Greet",
            training_phrases=["hello there", "hi", "good morning"],
            responses=["Hello!", "Hi friend!"],
        ),
        Intent(
            name="Weather",
            training_phrases=["what is the weather today", "is it raining"],
            responses=["Sunny all day!"],
        ),
        Intent(
            name="Fallback",
            responses=["Sorry, I don't know that one."],
            is_fallback=True,
        ),
    ]


# ============================================================
# Test: similarity
# ============================================================

class TestSimilarity:
    def test_identical_strings_score_one(self):
        assert similarity("tell me a story", "tell me a story") == 1.0

    def test_case_insensitive(self):
        assert similarity("HELLO There", "hello there") == 1.0

    def test_no_overlap_scores_zero(self):
        assert similarity("good night", "weather today") == 0.0

    def test_divides_by_larger_word_set(self):
        # 2 shared words, phrase has 4 words
        assert similarity("hello there", "hello there my friend") == pytest.approx(0.5)

    def test_repeated_words_count_once(self):
        assert similarity("hi hi hi", "hi") == 1.0

    def test_whitespace_runs_are_one_separator(self):
        assert similarity("  good    morning ", "good morning") == 1.0

    def test_empty_inputs_score_zero(self):
        assert similarity("", "") == 0.0
        assert similarity("", "hello") == 0.0
        assert similarity("   ", "hello") == 0.0

    def test_symmetric_with_set_semantics(self):
        pairs = [
            ("what is the weather", "weather"),
            ("hi", "hi there friend"),
            ("a b c d", "c d e"),
        ]
        for a, b in pairs:
            assert similarity(a, b) == similarity(b, a)

    def test_punctuation_is_part_of_the_word(self):
        assert similarity("hello!", "hello") == 0.0


# ============================================================
# Test: find_best_match
# ============================================================

class TestFindBestMatch:
    def test_exact_phrase_wins_with_full_confidence(self):
        match = find_best_match("Is it raining", _intents())
        assert match is not None
        assert match.intent.name == "Weather"
        assert match.confidence == 1.0
        assert match.phrase == "is it raining"

    def test_identical_phrase_beats_partial_overlap(self):
        intents = [
            Intent(name="Partial", training_phrases=["tell me a joke please"], responses=["x"]),
            Intent(name="Exact", training_phrases=["tell me a joke"], responses=["y"]),
        ]
        match = find_best_match("tell me a joke", intents)
        assert match.intent.name == "Exact"
        assert match.confidence == 1.0

    def test_below_threshold_is_no_match(self):
        # 1 of 4 words = 0.25
        assert find_best_match("what time is lunch", [
            Intent(name="Lunch", training_phrases=["dinner menu for tonight"], responses=["x"]),
            Intent(name="Q", training_phrases=["what about breakfast here"], responses=["x"]),
        ]) is None

    def test_score_equal_to_threshold_does_not_match(self):
        # 3 of 10 words = 0.3 exactly
        phrase = "one two three four five six seven eight nine ten"
        intents = [Intent(name="Count", training_phrases=[phrase], responses=["x"])]
        assert find_best_match("one two three", intents) is None

    def test_empty_training_phrases_never_match(self):
        intents = [Intent(name="Empty", training_phrases=[], responses=["x"])]
        assert find_best_match("anything at all", intents) is None
        assert find_best_match("", intents) is None

    def test_fallback_intent_is_not_matched(self):
        intents = [Intent(name="fallback", training_phrases=["help me"], responses=["x"])]
        assert find_best_match("help me", intents) is None

    def test_ties_go_to_first_intent(self):
        intents = [
            Intent(name="First", training_phrases=["play music"], responses=["a"]),
            Intent(name="Second", training_phrases=["play music"], responses=["b"]),
        ]
        for _ in range(5):
            assert find_best_match("play music", intents).intent.name == "First"

    def test_custom_threshold(self):
        intents = [Intent(name="Greet", training_phrases=["hello there friend"], responses=["x"])]
        assert find_best_match("hello", intents) is not None  # 1/3
        assert find_best_match("hello", intents, threshold=0.5) is None


# ============================================================
# Test: responses and reply
# ============================================================

class TestReply:
    def test_matched_reply_uses_intent_response(self):
        result = reply("good morning", _intents(), rng=random.Random(1))
        assert result.matched
        assert result.intent_name == "Greet"
        assert result.text in ("Hello!", "Hi friend!")
        assert result.confidence == 1.0

    def test_intent_choice_ignores_randomness(self):
        names = {reply("hello there", _intents(), rng=random.Random(seed)).intent_name
                 for seed in range(20)}
        assert names == {"Greet"}

    def test_response_is_chosen_at_random(self):
        texts = {reply("hi", _intents(), rng=random.Random(seed)).text for seed in range(50)}
        assert texts == {"Hello!", "Hi friend!"}

    def test_no_match_uses_fallback_intent(self):
        result = reply("purple elephants dancing", _intents())
        assert not result.matched
        assert result.intent_name == "Fallback"
        assert result.text == "Sorry, I don't know that one."
        assert result.confidence == 0.0

    def test_no_match_without_fallback_uses_default_text(self):
        intents = [i for i in _intents() if not i.is_fallback]
        assert reply("purple elephants", intents).text == FALLBACK_TEXT

    def test_fallback_without_responses_uses_default_text(self):
        intents = [Intent(name="Fallback", is_fallback=True)]
        assert reply("anything", intents).text == FALLBACK_TEXT

    def test_matched_intent_without_responses(self):
        intents = [Intent(name="Quiet", training_phrases=["say something"])]
        result = reply("say something", intents)
        assert result.matched
        assert result.text == NO_RESPONSE_TEXT

    def test_pick_response_skips_blank_strings(self):
        intent = Intent(name="X", responses=["", "only one"])
        assert pick_response(intent, random.Random(0)) == "only one"

    def test_find_fallback_by_name(self):
        intents = [Intent(name="Greet"), Intent(name=" FallBack ")]
        assert find_fallback(intents).name == " FallBack "
