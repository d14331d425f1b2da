"""
core.rng
Per-round random streams.

Every stream is keyed by (base_seed, company name, round, purpose), so a
replayed game makes the same headline picks and rolls the same shocks, and
one consumer drawing more numbers never shifts another consumer's stream.
"""

from __future__ import annotations

import hashlib
import random

from .state import GameState

PURPOSE_HEADLINE = "headline"
PURPOSE_EVENT = "random-event"


def round_seed(company: str, round: int, purpose: str, *, base_seed: int) -> int:
    """32-bit seed from SHA-256 (Python's hash() is salted per process)."""
    key = f"founder-burnout|{int(base_seed)}|{company}|{int(round)}|{purpose}"
    return int.from_bytes(hashlib.sha256(key.encode("utf-8")).digest()[:4], "big")


def round_rng(state: GameState, purpose: str, *, base_seed: int) -> random.Random:
    return random.Random(round_seed(state.company.name, state.round, purpose, base_seed=base_seed))
