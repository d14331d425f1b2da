"""
core.endings
Terminal outcomes, evaluated in strict priority order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .state import Meters

FINAL_ROUND = 26


@dataclass(frozen=True)
class Ending:
    key: str
    title: str
    text: str

    def to_dict(self) -> Dict[str, str]:
        return {"key": self.key, "title": self.title, "text": self.text}


ENDINGS: Dict[str, Ending] = {
    "collapse": Ending(
        "collapse",
        "Collapse",
        "You burnt out. Your co-founder took over while you checked into a wellness retreat in Bali. "
        "The company pivoted to selling NFTs.",
    ),
    "bankruptcy": Ending(
        "bankruptcy",
        "Bankruptcy",
        'You ran out of runway. Your last Slack message was "brb" three months ago. The domain expired.',
    ),
    "ipo": Ending(
        "ipo",
        "IPO Success",
        "You did it. CNBC called. Your Series C valued you at $2B. "
        "Your biggest problem now is choosing between Goldman and Morgan Stanley.",
    ),
    "acquisition": Ending(
        "acquisition",
        "Acquisition",
        "Google bought you for $400M. You signed a 2-year retention agreement. "
        'Your LinkedIn now says "Entrepreneur, Investor, Advisor."',
    ),
    "wellness": Ending(
        "wellness",
        "Pivot to Wellness",
        "You realized happiness > growth. Now you run a 4-person agency that closes at 4pm Fridays. "
        "Your therapist is proud of you.",
    ),
    "infamy": Ending(
        "infamy",
        "Infamy",
        "TechCrunch wrote a scathing exposé. Your Wikipedia page exists but only to document the controversies. "
        "You moved to Wyoming.",
    ),
    "mediocrity": Ending(
        "mediocrity",
        "Stable Mediocrity",
        "You built a sustainable business. 20 employees, $3M ARR, no headlines. "
        'Your parents still ask when you\'ll get a "real job."',
    ),
}


def check_ending(meters: Meters, round: int) -> Optional[Ending]:
    """First match wins.

    Collapse and Bankruptcy fire at any round; everything else waits for the final week.
    """
    if meters.burnout > 80:
        return ENDINGS["collapse"]
    # Unreachable through apply_deltas() clamping, kept for raw meter input.
    if meters.funding < 0:
        return ENDINGS["bankruptcy"]

    if int(round) < FINAL_ROUND:
        return None

    if meters.growth > 80 and meters.ethics > 50 and meters.burnout < 30:
        return ENDINGS["ipo"]
    if meters.funding > 80 and meters.ethics < 40:
        return ENDINGS["acquisition"]
    if meters.ethics > 80 and meters.burnout < 40 and meters.growth < 70:
        return ENDINGS["wellness"]
    if meters.pr < 10 and meters.ethics < 30:
        return ENDINGS["infamy"]
    return ENDINGS["mediocrity"]
