"""
core.events
Opt-in random shocks applied strictly after a round has resolved.

Effects go through the same clamp primitive as regular deltas
(core.effects.apply_deltas), and the shock is recorded on the round's
history entry.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

from .effects import apply_deltas
from .rng import PURPOSE_EVENT, round_rng
from .state import Delta, GameState, annotate_last_record


@dataclass(frozen=True)
class RandomEvent:
    key: str
    title: str
    text: str
    effects: Delta

    @property
    def reaction(self) -> str:
        """boost | setback | mixed, from the sign of the effects.

        Burnout is bad-when-high, so a positive burnout change counts as a setback.
        """
        good = bad = False
        for k, v in self.effects.items():
            if not v:
                continue
            helpful = v < 0 if k == "burnout" else v > 0
            good = good or helpful
            bad = bad or not helpful
        if good and not bad:
            return "boost"
        if bad and not good:
            return "setback"
        return "mixed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "text": self.text,
            "effects": dict(self.effects),
            "reaction": self.reaction,
        }


RANDOM_EVENTS: Tuple[RandomEvent, ...] = (
    RandomEvent("viral_tweet", "Viral Tweet", "A customer's thread about you hits the front page.", {"pr": 8, "growth": 4}),
    RandomEvent("server_outage", "Server Outage", "Prod went down during the demo. Everyone pulls an all-nighter.", {"burnout": 7, "pr": -4}),
    RandomEvent("angel_check", "Surprise Angel Check", "An old colleague wires a small angel check.", {"funding": 7}),
    RandomEvent("key_resignation", "Key Resignation", "Your best engineer leaves for a crypto startup.", {"growth": -4, "burnout": 6}),
    RandomEvent("press_leak", "Press Leak", "A journalist gets hold of your internal metrics deck.", {"pr": -6, "ethics": -3}),
    RandomEvent("team_retreat", "Team Retreat", "A cheap off-site actually works. People sleep.", {"burnout": -6, "ethics": 2}),
    RandomEvent("competitor_raise", "Competitor Mega-Round", "Your rival raises $50M. Investors ask why you haven't.", {"funding": -5, "pr": 3}),
    RandomEvent("regulator_letter", "Regulator Letter", "A polite letter asks about your data practices.", {"ethics": 4, "burnout": 4}),
)

EVENTS_BY_KEY: Dict[str, RandomEvent] = {e.key: e for e in RANDOM_EVENTS}


def roll_random_event(
    state: GameState,
    *,
    base_seed: int,
    chance: float = 0.25,
    rng: Optional[random.Random] = None,
) -> Optional[RandomEvent]:
    """Maybe pick an event for the round that just resolved.

    Without an explicit `rng` the roll has its own stream keyed by
    (seed, company, round), so the same game replays the same shocks
    whatever else the round consumed.
    """
    r = rng or round_rng(state, PURPOSE_EVENT, base_seed=base_seed)
    if r.random() >= float(chance):
        return None
    return r.choice(RANDOM_EVENTS)


def apply_random_event(state: GameState, event: RandomEvent) -> GameState:
    """Apply the event's effects and annotate the latest history record (pure)."""
    return replace(
        state,
        meters=apply_deltas(state.meters, event.effects),
        history=annotate_last_record(state.history, event.title),
    )
