"""content.fallbacks

Offline flavor copy so the game stays playable without Gemini.
Deterministic given its inputs (headline choice takes an explicit rng).
"""

from __future__ import annotations

import random
import re
from typing import Iterable, List, Mapping, Optional, Sequence

from core.narrative import MILESTONE_DEFINITIONS, MilestoneChange
from core.state import Meters, ScoreTriple

from .schemas import Insights, MilestoneEvent, NpcLines, SceneCard

SCENE_TITLES = {
    "Build": "Feature factory frenzy",
    "PR": "Hype machine in motion",
    "Growth Hack": "Growth hack roulette",
    "Fundraise": "Pitch decks and promises",
    "Refactor": "Tech debt cleanse",
    "Hire": "Building the squad",
}

HEADLINES = (
    "Tiny startup makes cautious progress",
    "Investors squint at the metrics",
    "Team grinds while hype cools",
    "Weekend slide deck gains dust",
)

_HYPE_RE = re.compile(r"\bAI|LLM|automation|platform|viral|growth\b", re.IGNORECASE | re.ASCII)


def npc_dialogue(meters: Meters) -> NpcLines:
    funding_score = (meters.funding + meters.pr) / 200
    return NpcLines(
        vc="Show me more." if funding_score > 0.6 else "Not seeing traction yet.",
        employee="We're burning out." if meters.burnout > 60 else "Managing for now.",
    )


def insights(update_text: str, deltas: Mapping[str, float], scores: ScoreTriple, action: str,
             rng: Optional[random.Random] = None) -> Insights:
    burnout_high = float(deltas.get("burnout", 0.0)) > 6 or scores.sentiment < 45
    funding_pop = float(deltas.get("funding", 0.0)) > 8

    if burnout_high:
        tip = "Dial back sprinting before morale snaps."
    elif funding_pop:
        tip = "Double down on narrative while momentum lasts."
    elif action == "Refactor":
        tip = "Ship the cleanup fast and brag about it."
    else:
        tip = "Pick one priority this week and over-resource it."

    if len(_HYPE_RE.findall(update_text or "")) > 1:
        headline = "Buzzwords fly, traction TBD"
    else:
        headline = (rng or random.Random()).choice(HEADLINES)
    return Insights(tip=tip, headline=headline)


def scene_card(update_text: str, action: str, deltas: Mapping[str, float],
               milestone_events: Sequence[MilestoneEvent] = ()) -> SceneCard:
    title = SCENE_TITLES.get(action, "Another week in founder land")
    text = update_text or ""
    trimmed = f"{text[:137]}..." if len(text) > 140 else text
    narrative = f'You told investors: "{trimmed}".'

    growth = float(deltas.get("growth", 0.0))
    burnout = float(deltas.get("burnout", 0.0))
    if growth > 6:
        narrative += " Growth graphs finally bent upward."
    elif growth < -4:
        narrative += " Acquisition stayed flat and the dashboard groaned."
    if burnout > 6:
        narrative += ' The team looks exhausted; slack statuses read "OOO (mentally)".'

    if milestone_events and milestone_events[0].hook:
        hook = milestone_events[0].hook
    elif burnout > 6:
        hook = "Consider a recovery move before the wheels come off."
    else:
        hook = "Decide whether to press the gas or touch the brakes next week."
    return SceneCard(title=title, narrative=narrative, hook=hook)


def milestone_hook(change: MilestoneChange) -> str:
    if change.complete:
        return "Milestone complete"
    if change.id == "funding":
        return "Capitalize on investor interest before it cools."
    if change.id == "team":
        return "Protect the humans building this thing."
    return "Momentum is fragile -- decide how to amplify it."


def milestone_events(changes: Iterable[MilestoneChange]) -> List[MilestoneEvent]:
    out: List[MilestoneEvent] = []
    for ch in changes:
        info = MILESTONE_DEFINITIONS[ch.id].stage(ch.stage)
        out.append(
            MilestoneEvent(
                id=ch.id,
                title=ch.title,
                summary=info.status,
                hook=milestone_hook(ch),
                status=info.status,
                progress_label=info.label,
            )
        )
    return out


def post_mortem(history_meters: Sequence[Meters], final: Meters, ending_title: str) -> str:
    rounds = len(history_meters) + 1
    peak_growth = max([m.growth for m in history_meters] + [final.growth])
    return (
        f'After {rounds} chaotic weeks you landed at "{ending_title}". '
        f"Growth peaked at {round(peak_growth)} while burnout closed at {round(final.burnout)}. "
        "Investors will be passing this memo around their Monday standup."
    )
