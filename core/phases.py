"""
core.phases
Round number -> week label.
"""

from __future__ import annotations

from typing import Tuple

PHASE_TITLES: Tuple[str, ...] = (
    "Week 1: Gloomy Monday",
    "Week 2: Scrappy Tuesday",
    "Week 3: Pivot Wednesday",
    "Week 4: Hump Day Hustle",
    "Week 5: Throwback Thursday",
    "Week 6: Feature Friday",
    "Week 7: Sprint Saturday",
    "Week 8: Sunday Scaries",
    "Week 9: Momentum Monday",
    "Week 10: Tech Debt Tuesday",
    "Week 11: Wireframe Wednesday",
    "Week 12: Demo Thursday",
    "Week 13: Fundraise Friday",
    "Week 14: Burnout Saturday",
    "Week 15: Recovery Sunday",
    "Week 16: Metrics Monday",
    "Week 17: Press Tuesday",
    "Week 18: Hiring Wednesday",
    "Week 19: Scale Thursday",
    "Week 20: Crunch Friday",
    "Week 21: All-Hands Saturday",
    "Week 22: Reflect Sunday",
    "Week 23: Final Push Monday",
    "Week 24: Last Mile Tuesday",
    "Week 25: Demo Day Eve",
    "Week 26: Judgment Day",
)


def get_phase_title(round: int) -> str:
    ix = min(max(int(round), 1) - 1, len(PHASE_TITLES) - 1)
    return PHASE_TITLES[ix]
