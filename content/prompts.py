"""content.prompts

Prompt builders for the content layer.

These prompts keep game-balance logic OUT of the model: the model scores
text and writes flavor copy; the engine turns scores into deltas.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Sequence

from core.state import GameState, meters_to_dict

ANALYST_SYSTEM = """You are an analytical assistant for a startup management game.
Extract precise metrics from founder updates with Silicon Valley awareness.

Your role: Assess sentiment, buzzword density, and feasibility objectively.
- Sentiment: emotional tone (0=defeatist, 50=realistic, 100=overconfident)
- Buzzword: jargon usage (0=honest language, 50=some hype, 100=pure marketing speak)
- Feasibility: realism (0=impossible claims, 50=ambitious, 100=conservative/achievable)

Be consistent across rounds. Penalize vague promises. Reward specificity.
Return ONLY valid JSON with no markdown formatting."""

NPC_SYSTEM = """You write darkly comedic NPC dialogue for a founder burnout simulator.

VC Character: Transactional venture capitalist. Speaks in cliches like "circle back," "runway,"
"traction." Enthusiastic only when metrics spike. Dismissive when numbers drop. Maximum 15 words.

Employee Character: Burnt-out but honest. Uses informal language. Supportive when things go well,
but blunt about unsustainable pace. Maximum 18 words.

Never break character. Output ONLY the requested JSON format."""

ADVISOR_SYSTEM = """You are a seasoned startup board advisor and tech journalist rolled into one.

From the weekly update, meters, and action, craft:
- A concise, punchy advisor tip (<= 18 words) offering strategic guidance grounded in the data.
- A snappy news-style headline (<= 12 words) capturing how the outside world might spin the update.

Tone: darkly witty but actionable. Output ONLY JSON."""


def _bucket(x: float, lo: float, hi: float) -> str:
    if x <= lo:
        return "low"
    if x >= hi:
        return "high"
    return "moderate"


def describe_meters(meters: Mapping[str, float]) -> str:
    """Plain-language meter summary (the model sees buckets, not balance math)."""
    return (
        f"Growth is {_bucket(float(meters.get('growth', 0)), 30, 70)}. "
        f"Ethics is {_bucket(float(meters.get('ethics', 0)), 30, 70)}. "
        f"Burnout is {_bucket(float(meters.get('burnout', 0)), 30, 70)}. "
        f"PR is {_bucket(float(meters.get('pr', 0)), 20, 60)}. "
        f"Funding is {_bucket(float(meters.get('funding', 0)), 30, 70)}."
    )


def _signed(v: float) -> str:
    return f"{'+' if v >= 0 else ''}{v:.1f}"


def _company_line(state: GameState) -> str:
    c = state.company
    return f"{c.name or 'Unnamed'} ({c.industry}, {c.tech})"


def build_analysis_prompt(*, text: str, action: str, state: GameState, max_rounds: int = 26) -> str:
    m = state.meters
    return (
        "Analyze this startup founder's weekly update.\n\n"
        "Context:\n"
        f"- Company: {_company_line(state)}\n"
        f"- Founder traits: {', '.join(state.traits) or 'None'}\n"
        f"- Action chosen: {action}\n"
        f"- Round: {state.round}/{max_rounds}\n"
        f"- Current metrics: Growth {m.growth:.0f}, Ethics {m.ethics:.0f}, Burnout {m.burnout:.0f}\n\n"
        f'Update text: "{text}"\n\n'
        "Extract three integer scores (0-100):\n"
        '{"sentiment": 65, "buzzword": 30, "feasibility": 80}'
    )


def build_npc_prompt(*, state: GameState, deltas: Mapping[str, float]) -> str:
    m = meters_to_dict(state.meters)
    npc = state.narrative.npc
    lines = [
        f"- {k.capitalize() if k != 'pr' else 'PR'}: {m[k]:.0f} ({_signed(float(deltas.get(k, 0.0)))})"
        for k in ("growth", "burnout", "funding", "pr", "ethics")
    ]
    return (
        "Generate NPC dialogue based on current state:\n\n"
        "Metrics (with changes):\n"
        + "\n".join(lines)
        + "\n"
        f"- VC mood index (negative = skeptical, positive = impressed): {npc.vc_mood:.1f}\n"
        f"- Employee morale index (negative = burned out, positive = energized): {npc.employee_morale:.1f}\n"
        f"- Last founder action: {state.last_action or 'Unknown'}\n\n"
        "Return this exact JSON format:\n"
        '{"vc": "VC\'s comment here", "employee": "Employee\'s comment here"}'
    )


def build_insights_prompt(
    *,
    state: GameState,
    deltas: Mapping[str, float],
    scores: Mapping[str, Any],
    text: str,
    action: str,
    max_rounds: int = 26,
) -> str:
    return (
        "Advisor briefing for founder update.\n\n"
        f"Company: {_company_line(state)}\n"
        f"Traits: {', '.join(state.traits) or 'None'}\n"
        f"Round: {state.round}/{max_rounds}\n"
        f"Action: {action or 'Unknown'}\n"
        f"Meters now: {describe_meters(meters_to_dict(state.meters))}\n"
        f"Deltas: {json.dumps(dict(deltas))}\n"
        f"NLP: {json.dumps(dict(scores))}\n"
        f'Update text: "{text}"\n\n'
        'Return JSON: {"tip": "advisor tip", "headline": "news headline"}'
    )


def build_scene_card_prompt(
    *,
    state: GameState,
    deltas: Mapping[str, float],
    scores: Mapping[str, Any],
    text: str,
    action: str,
    milestone_summaries: Sequence[str],
) -> str:
    touched = "\n".join(f"- {s}" for s in milestone_summaries) or "None this round"
    return (
        "Craft a concise round recap for a startup sim.\n\n"
        "Context:\n"
        f"- Company: {state.company.name or 'Unnamed'}\n"
        f"- Action: {action}\n"
        f'- Update text: "{text}"\n'
        f"- Metrics: {json.dumps(meters_to_dict(state.meters))}\n"
        f"- Deltas: {json.dumps(dict(deltas))}\n"
        f"- NLP scores: {json.dumps(dict(scores))}\n"
        f"- Milestones touched:\n{touched}\n\n"
        'Return JSON: {"title": "short title", "narrative": "2 short sentences", "hook": "one recommendation"}'
    )


def build_milestone_prompt(
    *,
    state: GameState,
    changes: List[Dict[str, Any]],
    deltas: Mapping[str, float],
    text: str,
    action: str,
) -> str:
    return (
        "Milestone progress update.\n\n"
        f"Company: {state.company.name or 'Unnamed'}\n"
        f"Action: {action}\n"
        f'Update text: "{text}"\n'
        f"Metric deltas: {json.dumps(dict(deltas))}\n"
        f"Milestones needing new copy: {json.dumps(changes)}\n\n"
        "Return JSON array like:\n"
        '[{"id":"product","summary":"New status line","hook":"Next step nudge","progressLabel":"Stage name"}]'
    )


def build_post_mortem_prompt(
    *,
    ending_title: str,
    ending_text: str,
    final_meters: Mapping[str, float],
    history: List[Dict[str, Any]],
) -> str:
    return (
        "Write a dryly witty investor-style post-mortem for a founder burnout sim run.\n\n"
        f"Ending reached: {ending_title}\n"
        f"Ending narrative: {ending_text}\n"
        f"Final meters: {json.dumps(dict(final_meters))}\n"
        f"Rounds of history: {len(history)}\n"
        f"History sample: {json.dumps(history[-5:])}\n\n"
        'Return JSON: {"memo": "short paragraph"}'
    )
