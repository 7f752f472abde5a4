"""Tests for the rules-based coach responder."""

import pytest

from neurocalm.app.heart_core import StressState
from neurocalm.coach import CoachResponder, CoachScript, load_script
from neurocalm.config import DEFAULT_RESPONSES_PATH
from neurocalm.errors import UnknownTrackError


@pytest.fixture
def coach(catalog):
    return CoachResponder(load_script(DEFAULT_RESPONSES_PATH), catalog)


@pytest.mark.parametrize(
    "message,card_id",
    [
        ("Can you play something?", "weightless"),
        ("piano please", "river-flows-in-you"),
        ("show me CHILD's pose", "childs-pose"),
        ("my neck hurts", "seated-neck-release"),
        ("any yoga ideas", "seated-neck-release"),
    ],
)
def test_keyword_rules_return_cards(coach, message, card_id):
    reply = coach.reply(message)
    assert reply.card is not None
    assert reply.card.id == card_id
    assert reply.text == reply.card.description


def test_state_aware_fallback(coach):
    assert "Neck Roll" in coach.reply("hello", state=StressState.MILD).text
    assert "High Stress" in coach.reply("hello", state=StressState.HIGH).text


def test_plain_fallback_when_calm_or_disconnected(coach):
    calm = coach.reply("hello", state=StressState.NORMAL)
    offline = coach.reply("hello")
    assert calm.text == offline.text
    assert calm.card is None


def test_rules_must_point_at_catalog_entries(catalog):
    script = CoachScript(rules=[{"keywords": ["x"], "card": "missing"}], fallback="f")
    with pytest.raises(UnknownTrackError):
        CoachResponder(script, catalog)


def test_text_rule(catalog):
    script = CoachScript(rules=[{"keywords": ["breath"], "text": "In for four, out for six."}], fallback="f")
    coach = CoachResponder(script, catalog)
    assert coach.reply("Start breathing").text == "In for four, out for six."
    assert coach.reply("nothing").text == "f"


def test_load_script_rejects_bad_files(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_script(bad)

    missing_fallback = tmp_path / "partial.yaml"
    missing_fallback.write_text("greeting: hi\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_script(missing_fallback)
