from dataclasses import replace

import pytest

from core.narrative import (
    MAX_STAGE,
    MILESTONE_DEFINITIONS,
    apply_milestone_copy,
    default_narrative,
    normalize_narrative,
    push_scene,
    update_moods,
    update_narrative_state,
)
from core.selfcheck import run_26_weeks_smoke
from core.state import SCENE_LOG_LIMIT, Meters, NpcMood, ScoreTriple
from engine.pipeline import process_round

NEUTRAL = ScoreTriple(sentiment=50, buzzword=50, feasibility=50)
GRIM = Meters(growth=10, ethics=10, burnout=90, pr=0, funding=10)


def _stages(narrative):
    return {ms.id: ms.stage for ms in narrative.milestones}


def test_default_narrative():
    n = default_narrative()
    assert [ms.id for ms in n.milestones] == ["product", "funding", "team"]
    assert all(ms.stage == 0 for ms in n.milestones)
    assert n.npc == NpcMood(0.0, 0.0)
    assert n.scene_log == ()


def test_multi_stage_jump_in_one_round():
    meters = Meters(growth=80, ethics=50, burnout=50, pr=30, funding=65)
    n, changes = update_narrative_state(default_narrative(), {}, meters, "PR", "", NEUTRAL)
    assert _stages(n) == {"product": 3, "funding": 1, "team": 1}
    product = [c for c in changes if c.id == "product"][0]
    assert product.previous_stage == 0 and product.stage == 3
    assert product.complete
    assert product.progress_label == MILESTONE_DEFINITIONS["product"].stage(3).label


def test_action_alone_can_unlock_first_stage():
    n, changes = update_narrative_state(default_narrative(), {}, GRIM, "Fundraise", "", NEUTRAL)
    assert _stages(n) == {"product": 0, "funding": 1, "team": 0}
    assert [c.id for c in changes] == ["funding"]


def test_stages_never_regress():
    meters = Meters(growth=80, ethics=50, burnout=50, pr=30, funding=65)
    n, _ = update_narrative_state(default_narrative(), {}, meters, "PR", "", NEUTRAL)
    n2, changes = update_narrative_state(n, {}, GRIM, "PR", "", NEUTRAL)
    assert _stages(n2) == _stages(n)
    assert changes == []
    assert all(ms.stage <= MAX_STAGE for ms in n2.milestones)


def test_unchanged_track_returns_to_table_copy():
    n = apply_milestone_copy(default_narrative(), {"product": {"status": "Custom", "progress_label": "Custom+"}})
    assert n.milestones[0].status == "Custom"
    n2, _ = update_narrative_state(n, {}, GRIM, "PR", "", NEUTRAL)
    assert n2.milestones[0].status == MILESTONE_DEFINITIONS["product"].stage(0).status
    assert n2.milestones[0].progress_label == "Concept"


def test_moods_are_clamped():
    npc = update_moods(NpcMood(9.5, -8.0), {"funding": 20, "burnout": 20}, NEUTRAL)
    assert npc.vc_mood == 10.0
    assert npc.employee_morale == -10.0


def test_sentiment_moves_both_moods():
    npc = update_moods(NpcMood(0, 0), {}, ScoreTriple(70, 50, 50))
    assert npc.vc_mood == pytest.approx(1.0)
    assert npc.employee_morale == pytest.approx(1.0)


def test_apply_milestone_copy_keeps_stage():
    n = apply_milestone_copy(default_narrative(), {"team": {"status": "Pizza night", "progress_label": ""}})
    team = n.milestones[2]
    assert team.stage == 0
    assert team.status == "Pizza night"
    assert team.progress_label == "Hopeful"


def test_scene_log_keeps_latest_entries():
    n = default_narrative()
    for i in range(SCENE_LOG_LIMIT + 3):
        n = push_scene(n, {"title": f"scene {i}"})
    assert len(n.scene_log) == SCENE_LOG_LIMIT
    assert n.scene_log[0]["title"] == "scene 3"
    assert n.scene_log[-1]["title"] == f"scene {SCENE_LOG_LIMIT + 2}"


def test_normalize_tolerates_partial_wire_data():
    raw = {
        "npc": {"vcMood": 42, "employeeMorale": -3},
        "milestones": [
            {"id": "funding", "stage": 7, "status": "", "progressLabel": "Wired"},
            {"id": "mystery", "stage": 2},
            "not a milestone",
        ],
        "sceneLog": [{"title": str(i)} for i in range(20)] + ["junk"],
    }
    n = normalize_narrative(raw)
    assert [ms.id for ms in n.milestones] == ["product", "funding", "team"]
    assert _stages(n) == {"product": 0, "funding": 3, "team": 0}
    assert n.milestones[1].progress_label == "Wired"
    assert n.milestones[1].status == MILESTONE_DEFINITIONS["funding"].stage(3).status
    assert n.npc.vc_mood == 10.0 and n.npc.employee_morale == -3.0
    assert len(n.scene_log) == SCENE_LOG_LIMIT
    assert n.scene_log[-1] == {"title": "19"}


def test_normalize_none_and_instance():
    assert normalize_narrative(None) == default_narrative()
    n = replace(default_narrative(), npc=NpcMood(3, 4))
    assert normalize_narrative(n) == n


def test_stages_never_decrease_over_a_full_run(start_state):
    plan = [
        ("AI synergy pivot, hyper growth incoming!!!", "Growth Hack"),
        ("Paid down tech debt, 3 services merged.", "Refactor"),
        ("Pitched 7 funds, 2 partner meetings.", "Fundraise"),
        ("Hired 2 engineers, on-call load halved.", "Hire"),
        ("Launch post hit 40k views.", "PR"),
        ("Shipped billing v1 to 12 customers.", "Build"),
    ]
    state = start_state
    previous = _stages(state.narrative)
    for week in range(26):
        text, action = plan[week % len(plan)]
        state = process_round(text, action, state).state
        stages = _stages(state.narrative)
        assert all(stages[k] >= previous[k] for k in stages), (week, previous, stages)
        assert all(0 <= v <= MAX_STAGE for v in stages.values())
        assert -10 <= state.narrative.npc.vc_mood <= 10
        assert -10 <= state.narrative.npc.employee_morale <= 10
        previous = stages
    assert state.round == 27


def test_selfcheck_smoke_run():
    run_26_weeks_smoke()
