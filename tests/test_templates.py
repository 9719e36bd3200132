"""
Tests for app/content/templates.py: every starter bot must load, validate and answer.
"""

import pytest

from app.bot.matcher import reply
from app.bot.validation import validate_bot_configuration
from app.content.templates import (
    CATEGORIES, TEMPLATES, get_template, list_templates, template_to_configuration,
)


def test_template_ids_unique():
    ids = [t["id"] for t in TEMPLATES]
    assert len(ids) == len(set(ids))


def test_categories_known():
    for t in TEMPLATES:
        assert t["category"] in CATEGORIES, t["id"]


def test_list_all_and_by_category():
    assert len(list_templates()) == len(TEMPLATES)
    assert len(list_templates("all")) == len(TEMPLATES)
    practical = list_templates("practical")
    assert {t["id"] for t in practical} == {"breakfast-bot", "weather-wizard"}
    assert list_templates("nonexistent") == []


def test_get_template():
    assert get_template("math-buddy")["name"] == "Kwame Math Buddy"
    assert get_template("missing") is None


def test_configuration_layout():
    config = template_to_configuration(get_template("story-friend"))
    assert config.name == "Anansi Story Friend"
    assert [n.id for n in config.nodes] == ["intent-1", "intent-2", "intent-3", "fallback"]
    assert config.nodes[-1].is_fallback()
    assert {(e.source, e.target) for e in config.edges} == {
        ("intent-1", "intent-2"), ("intent-1", "intent-3"),
    }


def test_configuration_custom_name():
    config = template_to_configuration(get_template("pet-caretaker"), name="My Zoo")
    assert config.name == "My Zoo"


@pytest.mark.parametrize("template", TEMPLATES, ids=lambda t: t["id"])
def test_template_is_valid(template):
    result = validate_bot_configuration(template_to_configuration(template))
    assert result.is_valid, result.errors


@pytest.mark.parametrize("template", TEMPLATES, ids=lambda t: t["id"])
def test_template_answers_its_own_phrases(template):
    intents = template_to_configuration(template).intents()
    for intent in template["intents"]:
        for phrase in intent["training_phrases"]:
            result = reply(phrase, intents)
            assert result.matched, phrase
            assert result.confidence == 1.0


def test_template_fallback_answers_nonsense():
    config = template_to_configuration(get_template("breakfast-bot"))
    result = reply("quantum chromodynamics", config.intents())
    assert not result.matched
    assert result.intent_name == "Fallback"
