"""engine.pipeline

Core round flow (headless).

Responsibilities:
- Validate the submission (update text + action)
- Score text (provider or heuristic) -> deltas -> clamped meters
- Endings, narrative state machine, phase title
- Flavor copy for the round (provider or heuristic)
- Optional random event, strictly after the canonical update
- Assemble a brand-new GameState + response payload

This layer is UI-agnostic. The input state is never mutated; if anything
outside the scoring / flavor fallbacks raises, the caller keeps its old state.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from content.generator import (
    generate_insights,
    generate_milestone_narratives,
    generate_npc_dialogue,
    generate_post_mortem,
    generate_scene_card,
)
from content.providers.base import TextProvider
from content.schemas import Insights, MilestoneEvent, NpcLines, SceneCard
from content.scoring import analyze_update
from core.effects import apply_deltas, compute_deltas
from core.endings import Ending, check_ending
from core.events import RandomEvent, apply_random_event, roll_random_event
from core.narrative import MilestoneChange, apply_milestone_copy, push_scene, update_narrative_state
from core.phases import get_phase_title
from core.rng import PURPOSE_HEADLINE, round_rng
from core.state import (
    Delta,
    GameState,
    RoundRecord,
    ScoreTriple,
    narrative_to_dict,
    record_to_dict,
    scores_to_dict,
    state_to_dict,
)

from .config import EngineConfig
from .logging import get_logger

log = get_logger("pipeline")


class ValidationFailure(ValueError):
    """Submission rejected before any engine call; nothing was mutated."""


def validate_submission(text: Any, action: Any) -> Tuple[str, str]:
    t = str(text or "").strip()
    a = str(action or "").strip()
    if not t:
        raise ValidationFailure("Write an update first!")
    if not a:
        raise ValidationFailure("Choose an action!")
    return t, a


def provider_from_config(config: EngineConfig) -> Optional[TextProvider]:
    """Gemini when a key is configured, otherwise None (fully offline)."""
    if not config.api_key:
        return None
    from content.providers.gemini import GeminiProvider

    return GeminiProvider.from_api_key_string(config.api_key, model=config.model, timeout=config.request_timeout)


@dataclass(frozen=True)
class RoundResult:
    state: GameState
    scores: ScoreTriple
    analysis_source: str
    deltas: Delta
    phase_title: str
    ending: Optional[Ending]
    npc_lines: NpcLines
    scene_card: SceneCard
    insights: Insights
    insights_source: str
    milestone_changes: List[MilestoneChange] = field(default_factory=list)
    milestone_events: List[MilestoneEvent] = field(default_factory=list)
    post_mortem: Optional[str] = None
    random_event: Optional[RandomEvent] = None

    def to_payload(self) -> Dict[str, Any]:
        """Response body of POST /api/process-round."""
        return {
            "nlp": scores_to_dict(self.scores),
            "deltas": dict(self.deltas),
            "analysisSource": self.analysis_source,
            "newState": state_to_dict(self.state),
            "narrative": narrative_to_dict(self.state.narrative),
            "npcLines": self.npc_lines.to_dict(),
            "ending": self.ending.to_dict() if self.ending else None,
            "postMortem": self.post_mortem,
            "phaseTitle": self.phase_title,
            "sceneCard": self.scene_card.to_dict(),
            "insights": self.insights.to_dict(),
            "insightsSource": self.insights_source,
            "milestoneEvents": [e.to_dict() for e in self.milestone_events],
            "randomEvent": self.random_event.to_dict() if self.random_event else None,
        }


def process_round(
    text: str,
    action: str,
    state: GameState,
    *,
    config: Optional[EngineConfig] = None,
    provider: Optional[TextProvider] = None,
    rng: Optional[random.Random] = None,
) -> RoundResult:
    """Resolve one submitted week and return the next GameState with its UI content.

    `provider=None` runs the whole round offline (heuristic scores and copy).
    `rng` overrides the seeded stream used for the fallback headline pick;
    random events always roll on their own stream.
    """
    text, action = validate_submission(text, action)
    cfg = config or EngineConfig()
    allow = cfg.allow_fallback
    r = rng or round_rng(state, PURPOSE_HEADLINE, base_seed=cfg.base_seed)

    log.info("Processing round %d: %s", state.round, action)

    # 1) scores
    scored = analyze_update(text, action, state, provider=provider, allow_fallback=allow, max_rounds=cfg.max_rounds)
    scores = scored.value

    # 2) balance
    deltas = compute_deltas(scores, action, state.traits, state.company, state.meters)
    meters = apply_deltas(state.meters, deltas)
    new_round = int(state.round) + 1
    ending = check_ending(meters, new_round)

    # 3) narrative state machine
    narrative, changes = update_narrative_state(state.narrative, deltas, meters, action, text, scores)

    record = RoundRecord(round=int(state.round), text=text, action=action, scores=scores, meters_after=meters)
    nxt = replace(
        state,
        round=new_round,
        meters=meters,
        narrative=narrative,
        history=(*state.history, record),
        last_action=action,
    )

    # 4) flavor copy
    events = generate_milestone_narratives(nxt, changes, deltas, text, action, provider=provider, allow_fallback=allow)
    nxt = replace(
        nxt,
        narrative=apply_milestone_copy(
            nxt.narrative,
            {e.id: {"status": e.status, "progress_label": e.progress_label} for e in events.value},
        ),
    )
    scene = generate_scene_card(nxt, deltas, scores, text, action, events.value, provider=provider, allow_fallback=allow)
    nxt = replace(nxt, narrative=push_scene(nxt.narrative, scene.value.to_dict()))
    npc = generate_npc_dialogue(nxt, deltas, provider=provider, allow_fallback=allow)
    insights = generate_insights(nxt, deltas, scores, text, action, provider=provider, allow_fallback=allow, rng=r)

    # 5) random event, after the canonical update
    shock: Optional[RandomEvent] = None
    if cfg.random_events and ending is None:
        shock = roll_random_event(nxt, base_seed=cfg.base_seed, chance=cfg.event_chance)
        if shock is not None:
            log.info("Random event on round %d: %s", state.round, shock.title)
            nxt = apply_random_event(nxt, shock)
            ending = check_ending(nxt.meters, new_round)

    # 6) post-mortem
    post_mortem: Optional[str] = None
    if ending is not None:
        log.info("Ending reached after round %d: %s", state.round, ending.title)
        pm = generate_post_mortem(
            [rec.meters_after for rec in state.history],
            [record_to_dict(rec) for rec in nxt.history[-5:]],
            nxt.meters,
            ending,
            provider=provider,
            allow_fallback=allow,
        )
        post_mortem = pm.value

    return RoundResult(
        state=nxt,
        scores=scores,
        analysis_source=scored.source,
        deltas=deltas,
        phase_title=get_phase_title(new_round),
        ending=ending,
        npc_lines=npc.value,
        scene_card=scene.value,
        insights=insights.value,
        insights_source=insights.source,
        milestone_changes=list(changes),
        milestone_events=list(events.value),
        post_mortem=post_mortem,
        random_event=shock,
    )
