"""
core.selfcheck
Minimal "it runs" proof for the balance engine.

Run:
  python -m core.selfcheck
"""

from __future__ import annotations

from dataclasses import asdict, replace

from .effects import apply_deltas, compute_deltas
from .endings import check_ending
from .narrative import update_narrative_state
from .phases import get_phase_title
from .state import CompanyProfile, RoundRecord, ScoreTriple, default_start_state


def run_26_weeks_smoke() -> None:
    state = default_start_state(CompanyProfile("SelfCheck", "Finance", "AI/Automation"), ("Ambition", "Charisma"))
    actions = ["Build", "PR", "Growth Hack", "Fundraise", "Refactor", "Hire"]
    ending = None

    for week in range(1, 27):
        action = actions[week % len(actions)]
        scores = ScoreTriple(sentiment=40 + week, buzzword=30 + (week * 7) % 50, feasibility=60, source="selfcheck")

        deltas = compute_deltas(scores, action, state.traits, state.company, state.meters)
        meters = apply_deltas(state.meters, deltas)
        narrative, _changes = update_narrative_state(state.narrative, deltas, meters, action, "selfcheck", scores)
        previous_stages = [ms.stage for ms in state.narrative.milestones]

        state = replace(
            state,
            round=week + 1,
            meters=meters,
            narrative=narrative,
            history=(*state.history, RoundRecord(week, "selfcheck", action, scores, meters)),
            last_action=action,
        )

        # invariants
        for k, v in asdict(state.meters).items():
            assert 0.0 <= v <= 100.0, (k, v)
        assert all(ms.stage >= prev for ms, prev in zip(state.narrative.milestones, previous_stages))
        assert -10.0 <= state.narrative.npc.vc_mood <= 10.0
        assert -10.0 <= state.narrative.npc.employee_morale <= 10.0

        ending = check_ending(state.meters, state.round)
        if ending is not None:
            break

    print("OK: core smoke test passed.")
    print("Reached:", get_phase_title(state.round), "| ending:", ending.title if ending else None)
    print("Final meters:", asdict(state.meters))


if __name__ == "__main__":
    run_26_weeks_smoke()
