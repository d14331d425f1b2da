import pytest

from content.schemas import SOURCE_GEMINI, SOURCE_HEURISTIC, ScoringUnavailable
from content.scoring import analyze_update, buzzword_count, heuristic_scores
from engine.sim_runner import FakeProvider


def test_empty_text_scores():
    s = heuristic_scores("")
    assert (s.sentiment, s.buzzword, s.feasibility) == (35, 20, 55)
    assert s.source == SOURCE_HEURISTIC


def test_buzzwords_cost_feasibility():
    s = heuristic_scores("We will leverage AI synergy to scale.")
    assert s.buzzword == 65
    assert s.feasibility == 30


def test_numbers_read_as_feasible():
    s = heuristic_scores("Revenue up 12% this week.")
    assert s.buzzword == 20
    assert s.feasibility == 70


def test_buzzwords_need_word_boundaries():
    assert buzzword_count("AIR conditioning, scaled back, GROWTH") == 1


def test_score_caps():
    assert heuristic_scores("AI " * 10).buzzword == 85
    assert heuristic_scores("x" * 400).sentiment == 75


def test_no_provider_uses_heuristic(start_state):
    res = analyze_update("Shipped it.", "Build", start_state)
    assert res.source == SOURCE_HEURISTIC
    assert res.is_fallback
    assert res.error == ""


def test_provider_scores(start_state):
    provider = FakeProvider(scores={"sentiment": 150, "buzzword": -5, "feasibility": 42.6})
    res = analyze_update("Shipped it.", "Build", start_state, provider=provider)
    assert res.source == SOURCE_GEMINI
    assert (res.value.sentiment, res.value.buzzword, res.value.feasibility) == (100, 0, 43)
    assert provider.calls[0].startswith("Analyze this")


def test_provider_failure_falls_back(start_state):
    res = analyze_update("Shipped it.", "Build", start_state, provider=FakeProvider(fail=True))
    assert res.source == SOURCE_HEURISTIC
    assert res.value == heuristic_scores("Shipped it.")
    assert "fake outage" in res.error


@pytest.mark.parametrize(
    "reply",
    [
        {"sentiment": 60, "buzzword": 30},
        {"sentiment": "high", "buzzword": 30, "feasibility": 70},
    ],
)
def test_malformed_scores_fall_back(start_state, reply):
    res = analyze_update("Shipped it.", "Build", start_state, provider=FakeProvider(scores=reply))
    assert res.source == SOURCE_HEURISTIC
    assert res.error


def test_fallback_disabled_raises(start_state):
    with pytest.raises(ScoringUnavailable):
        analyze_update("Shipped it.", "Build", start_state, provider=FakeProvider(fail=True), allow_fallback=False)


def test_word_rules_are_ascii_only():
    assert heuristic_scores("Revenue up ٣٠ this week").feasibility == 55
    assert heuristic_scores("caféAI roadmap").buzzword == 35
