"""content.scoring

Scoring adapter: free text -> (sentiment, buzzword, feasibility).

Two interchangeable implementations:
- provider (Gemini) scoring, tagged "gemini"
- heuristic scoring from the text alone, tagged "heuristic"

analyze_update() always returns a value: any provider failure or malformed
reply is recovered with the heuristic, unless fallback is switched off.
"""

from __future__ import annotations

import math
import re
from typing import Optional

from core.state import GameState, ScoreTriple, clamp
from engine.logging import get_logger

from .parsing import as_object
from .prompts import ANALYST_SYSTEM, build_analysis_prompt
from .providers.base import TextProvider
from .schemas import SOURCE_HEURISTIC, ScoringUnavailable, Sourced, scores_from_llm

log = get_logger("scoring")

BUZZWORD_RE = re.compile(r"\b(AI|synergy|pivot|scale|hyper|growth|runway|NFT|blockchain)\b", re.IGNORECASE | re.ASCII)
NUMBER_RE = re.compile(r"\b\d+%?", re.ASCII)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def buzzword_count(text: str) -> int:
    return len(BUZZWORD_RE.findall(text or ""))


def heuristic_scores(text: str) -> ScoreTriple:
    """Deterministic scores from the text alone.

    Longer updates read as more optimistic, jargon costs credibility,
    concrete numbers read as feasible.
    """
    text = text or ""
    sentiment = _round_half_up(35 + 40 * min(len(text) / 280, 1))
    count = buzzword_count(text)
    buzzword = min(20 + 15 * count, 85)
    has_numbers = bool(NUMBER_RE.search(text))
    raw_feasibility = 70 - 5 * count if has_numbers else 55 - 10 * count
    feasibility = int(clamp(raw_feasibility, 30, 95))
    return ScoreTriple(sentiment=sentiment, buzzword=buzzword, feasibility=feasibility, source=SOURCE_HEURISTIC)


def analyze_update(
    text: str,
    action: str,
    state: GameState,
    *,
    provider: Optional[TextProvider] = None,
    allow_fallback: bool = True,
    max_rounds: int = 26,
) -> Sourced[ScoreTriple]:
    """Score one weekly update. `state` is context for the model only."""
    if provider is None or not provider.status().ok:
        if provider is not None and not allow_fallback:
            raise ScoringUnavailable(provider.status().error or "scoring model unavailable")
        return Sourced(heuristic_scores(text), SOURCE_HEURISTIC)

    prompt = build_analysis_prompt(text=text, action=action, state=state, max_rounds=max_rounds)
    try:
        data = provider.generate_json(prompt, system=ANALYST_SYSTEM, temperature=0.2, max_output_tokens=200)
        scores = scores_from_llm(as_object(data))
    except Exception as e:
        if not allow_fallback:
            raise ScoringUnavailable(str(e)) from e
        log.warning("Gemini analysis failed, using heuristic scores: %s", e)
        return Sourced(heuristic_scores(text), SOURCE_HEURISTIC, error=f"{type(e).__name__}: {e}")

    return Sourced(scores, scores.source)
