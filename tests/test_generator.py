import random

import pytest

from content import fallbacks
from content.generator import (
    generate_insights,
    generate_milestone_narratives,
    generate_npc_dialogue,
    generate_scene_card,
)
from content.schemas import (
    SOURCE_GEMINI,
    SOURCE_HEURISTIC,
    NarrativeGenerationUnavailable,
    milestone_events_from_llm,
)
from core.narrative import default_narrative, update_narrative_state
from core.state import Meters, ScoreTriple
from engine.sim_runner import FakeProvider

NEUTRAL = ScoreTriple(sentiment=50, buzzword=50, feasibility=50)


def _changes():
    meters = Meters(growth=80, ethics=50, burnout=50, pr=30, funding=65)
    _, changes = update_narrative_state(default_narrative(), {}, meters, "PR", "", NEUTRAL)
    return changes


def test_npc_fallback_thresholds():
    lines = fallbacks.npc_dialogue(Meters(growth=50, ethics=50, burnout=70, pr=80, funding=80))
    assert lines.vc == "Show me more."
    assert lines.employee == "We're burning out."
    lines = fallbacks.npc_dialogue(Meters(growth=50, ethics=50, burnout=20, pr=10, funding=10))
    assert lines.vc == "Not seeing traction yet."
    assert lines.employee == "Managing for now."


def test_insights_fallback_rules():
    tip = fallbacks.insights("ok", {"burnout": 7}, NEUTRAL, "Build").tip
    assert tip.startswith("Dial back")
    tip = fallbacks.insights("ok", {"funding": 9}, NEUTRAL, "Fundraise").tip
    assert tip.startswith("Double down")
    hype = fallbacks.insights("AI platform for viral growth", {}, NEUTRAL, "PR")
    assert hype.headline == "Buzzwords fly, traction TBD"


def test_insights_fallback_headline_follows_rng():
    a = fallbacks.insights("ok", {}, NEUTRAL, "Build", rng=random.Random(3)).headline
    b = fallbacks.insights("ok", {}, NEUTRAL, "Build", rng=random.Random(3)).headline
    assert a == b
    assert a in fallbacks.HEADLINES


def test_scene_card_fallback_trims_long_updates():
    card = fallbacks.scene_card("y" * 200, "Hire", {"growth": 7, "burnout": 8})
    assert card.title == "Building the squad"
    assert "y" * 137 + "..." in card.narrative
    assert "Growth graphs finally bent upward." in card.narrative
    assert card.hook.startswith("Consider a recovery move")


def test_milestone_fallback_hooks():
    events = {e.id: e for e in fallbacks.milestone_events(_changes())}
    assert events["product"].hook == "Milestone complete"
    assert events["funding"].hook.startswith("Capitalize")
    assert events["team"].progress_label == "Grinding"


def test_milestone_llm_copy_is_merged_onto_engine_changes():
    changes = _changes()
    items = [
        {"id": "product", "summary": "V1 is out", "hook": "Celebrate", "progressLabel": "Shipped"},
        {"id": "made-up", "summary": "ignored"},
    ]
    events = milestone_events_from_llm(items, changes)
    assert [e.id for e in events] == [c.id for c in changes]
    product = events[0]
    assert (product.summary, product.progress_label, product.source) == ("V1 is out", "Shipped", SOURCE_GEMINI)
    skipped = events[1]
    assert skipped.source == SOURCE_HEURISTIC
    assert skipped.progress_label == changes[1].progress_label


def test_no_changes_means_no_milestone_call(start_state):
    provider = FakeProvider()
    res = generate_milestone_narratives(start_state, [], {}, "x", "Build", provider=provider)
    assert res.value == []
    assert provider.calls == []


def test_provider_copy_is_tagged(start_state):
    provider = FakeProvider()
    npc = generate_npc_dialogue(start_state, {}, provider=provider)
    card = generate_scene_card(start_state, {}, NEUTRAL, "x", "Build", provider=provider)
    assert npc.source == SOURCE_GEMINI
    assert npc.value.vc == "Let's circle back on traction."
    assert card.value.source == SOURCE_GEMINI
    assert card.value.title == "Another lap"


def test_provider_outage_uses_fallback_copy(start_state):
    res = generate_insights(start_state, {}, NEUTRAL, "x", "Build", provider=FakeProvider(fail=True), rng=random.Random(1))
    assert res.source == SOURCE_HEURISTIC
    assert res.value.source == SOURCE_HEURISTIC
    assert "fake outage" in res.error


def test_fallback_disabled_raises(start_state):
    with pytest.raises(NarrativeGenerationUnavailable):
        generate_npc_dialogue(start_state, {}, provider=FakeProvider(fail=True), allow_fallback=False)


class _WrappedMilestones(FakeProvider):
    def generate_json(self, prompt, **kwargs):
        if prompt.startswith("Milestone progress update"):
            return {"milestones": [{"id": "product", "summary": "Beta is live", "progressLabel": "Beta"}]}
        return super().generate_json(prompt, **kwargs)


def test_wrapped_milestone_reply_is_accepted(start_state):
    changes = _changes()
    res = generate_milestone_narratives(start_state, changes, {}, "x", "PR", provider=_WrappedMilestones())
    assert res.source == SOURCE_GEMINI
    product = res.value[0]
    assert (product.summary, product.progress_label, product.source) == ("Beta is live", "Beta", SOURCE_GEMINI)
