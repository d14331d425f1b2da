"""content.generator

Narrative-text generator: NPC lines, insights, scene cards, milestone copy,
post-mortems. The engine never inspects this text; it only displays it.

Each function returns a Sourced value. Gemini is tried when a provider is
configured; failures are logged and replaced by content.fallbacks, unless
fallback is disabled (then NarrativeGenerationUnavailable is raised).
"""

from __future__ import annotations

import random
from typing import Any, Callable, List, Optional, Sequence, TypeVar

from core.endings import Ending
from core.narrative import MILESTONE_DEFINITIONS, MilestoneChange
from core.state import Delta, GameState, Meters, ScoreTriple, meters_to_dict, scores_to_dict
from engine.logging import get_logger

from . import fallbacks
from .parsing import as_array, as_object
from .prompts import (
    ADVISOR_SYSTEM,
    NPC_SYSTEM,
    build_insights_prompt,
    build_milestone_prompt,
    build_npc_prompt,
    build_post_mortem_prompt,
    build_scene_card_prompt,
)
from .providers.base import TextProvider
from .schemas import (
    SOURCE_GEMINI,
    SOURCE_HEURISTIC,
    Insights,
    MilestoneEvent,
    NarrativeGenerationUnavailable,
    NpcLines,
    SceneCard,
    Sourced,
    insights_from_llm,
    milestone_events_from_llm,
    npc_lines_from_llm,
    post_mortem_from_llm,
    scene_card_from_llm,
)

log = get_logger("generator")

T = TypeVar("T")


def _generate(
    what: str,
    provider: Optional[TextProvider],
    *,
    prompt: Callable[[], str],
    system: str,
    parse: Callable[[Any], T],
    fallback: Callable[[], T],
    allow_fallback: bool,
    temperature: float = 0.8,
    max_output_tokens: int = 600,
) -> Sourced[T]:
    if provider is None:
        return Sourced(fallback(), SOURCE_HEURISTIC)
    if not provider.status().ok:
        if not allow_fallback:
            raise NarrativeGenerationUnavailable(f"{what}: {provider.status().error or 'model unavailable'}")
        return Sourced(fallback(), SOURCE_HEURISTIC)
    try:
        data = provider.generate_json(prompt(), system=system, temperature=temperature, max_output_tokens=max_output_tokens)
        value = parse(data)
    except Exception as e:
        if not allow_fallback:
            raise NarrativeGenerationUnavailable(f"{what}: {e}") from e
        log.warning("Gemini %s failed, using heuristic copy: %s", what, e)
        return Sourced(fallback(), SOURCE_HEURISTIC, error=f"{type(e).__name__}: {e}")
    return Sourced(value, SOURCE_GEMINI)


def generate_npc_dialogue(
    state: GameState,
    deltas: Delta,
    *,
    provider: Optional[TextProvider] = None,
    allow_fallback: bool = True,
) -> Sourced[NpcLines]:
    """`state` is the post-round state (new meters, new moods, last action)."""
    return _generate(
        "npc dialogue",
        provider,
        prompt=lambda: build_npc_prompt(state=state, deltas=deltas),
        system=NPC_SYSTEM,
        parse=lambda d: npc_lines_from_llm(as_object(d)),
        fallback=lambda: fallbacks.npc_dialogue(state.meters),
        allow_fallback=allow_fallback,
        max_output_tokens=200,
    )


def generate_insights(
    state: GameState,
    deltas: Delta,
    scores: ScoreTriple,
    update_text: str,
    action: str,
    *,
    provider: Optional[TextProvider] = None,
    allow_fallback: bool = True,
    rng: Optional[random.Random] = None,
) -> Sourced[Insights]:
    return _generate(
        "insights",
        provider,
        prompt=lambda: build_insights_prompt(
            state=state, deltas=deltas, scores=scores_to_dict(scores), text=update_text, action=action
        ),
        system=ADVISOR_SYSTEM,
        parse=lambda d: insights_from_llm(as_object(d)),
        fallback=lambda: fallbacks.insights(update_text, deltas, scores, action, rng=rng),
        allow_fallback=allow_fallback,
        max_output_tokens=250,
    )


def generate_milestone_narratives(
    state: GameState,
    changes: Sequence[MilestoneChange],
    deltas: Delta,
    update_text: str,
    action: str,
    *,
    provider: Optional[TextProvider] = None,
    allow_fallback: bool = True,
) -> Sourced[List[MilestoneEvent]]:
    if not changes:
        return Sourced([], SOURCE_HEURISTIC)

    def _summary() -> List[dict]:
        out = []
        for ch in changes:
            info = MILESTONE_DEFINITIONS[ch.id].stage(ch.stage)
            out.append({
                "id": ch.id,
                "title": ch.title,
                "stage": ch.stage,
                "previousStage": ch.previous_stage,
                "label": info.label,
                "status": info.status,
                "thresholdsMet": dict(ch.thresholds_met),
            })
        return out

    return _generate(
        "milestone copy",
        provider,
        prompt=lambda: build_milestone_prompt(
            state=state, changes=_summary(), deltas=deltas, text=update_text, action=action
        ),
        system=ADVISOR_SYSTEM,
        parse=lambda d: milestone_events_from_llm(as_array(d), list(changes)),
        fallback=lambda: fallbacks.milestone_events(changes),
        allow_fallback=allow_fallback,
    )


def generate_scene_card(
    state: GameState,
    deltas: Delta,
    scores: ScoreTriple,
    update_text: str,
    action: str,
    milestone_events: Sequence[MilestoneEvent] = (),
    *,
    provider: Optional[TextProvider] = None,
    allow_fallback: bool = True,
) -> Sourced[SceneCard]:
    return _generate(
        "scene card",
        provider,
        prompt=lambda: build_scene_card_prompt(
            state=state,
            deltas=deltas,
            scores=scores_to_dict(scores),
            text=update_text,
            action=action,
            milestone_summaries=[f"{e.title}: {e.summary}" for e in milestone_events],
        ),
        system=ADVISOR_SYSTEM,
        parse=lambda d: scene_card_from_llm(as_object(d)),
        fallback=lambda: fallbacks.scene_card(update_text, action, deltas, milestone_events),
        allow_fallback=allow_fallback,
    )


def generate_post_mortem(
    history_meters: Sequence[Meters],
    history_sample: List[dict],
    final: Meters,
    ending: Ending,
    *,
    provider: Optional[TextProvider] = None,
    allow_fallback: bool = True,
) -> Sourced[str]:
    return _generate(
        "post-mortem",
        provider,
        prompt=lambda: build_post_mortem_prompt(
            ending_title=ending.title,
            ending_text=ending.text,
            final_meters=meters_to_dict(final),
            history=history_sample,
        ),
        system=ADVISOR_SYSTEM,
        parse=lambda d: post_mortem_from_llm(as_object(d)),
        fallback=lambda: fallbacks.post_mortem(history_meters, final, ending.title),
        allow_fallback=allow_fallback,
    )
