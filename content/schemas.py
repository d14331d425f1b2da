"""content.schemas

Contracts for what the content layer hands back to the engine:
- ScoreTriple (from core.state): text scores for the delta engine.
- NpcLines / Insights / SceneCard / MilestoneEvent: display-only copy.

Design choice:
Game balance stays OUT of the model. The model scores text and writes
flavor; every number that moves a meter is computed by core.

Recovery from a failed model call is expressed as a Sourced value
(value + source tag + optional error), not as an exception crossing
module boundaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Mapping, TypeVar

from core.state import ScoreTriple, clamp

T = TypeVar("T")

SOURCE_GEMINI = "gemini"
SOURCE_HEURISTIC = "heuristic"


class ScoringUnavailable(RuntimeError):
    """Primary scoring failed and heuristic fallback is disabled."""


class NarrativeGenerationUnavailable(RuntimeError):
    """Flavor-text generation failed and heuristic fallback is disabled."""


@dataclass(frozen=True)
class Sourced(Generic[T]):
    value: T
    source: str
    error: str = ""

    @property
    def is_fallback(self) -> bool:
        return self.source != SOURCE_GEMINI


def _text(x: Any, limit: int = 600) -> str:
    return str(x or "").strip()[:limit]


# =========================
# Scores
# =========================


def scores_from_llm(data: Mapping[str, Any]) -> ScoreTriple:
    """Strict parse: every score must be present and numeric, then clamped to 0..100."""
    vals: Dict[str, int] = {}
    for k in ("sentiment", "buzzword", "feasibility"):
        if k not in data:
            raise ValueError(f"scores.{k} missing")
        try:
            v = float(data[k])
        except (TypeError, ValueError):
            raise ValueError(f"scores.{k} is not numeric: {data[k]!r}")
        vals[k] = int(round(clamp(v, 0.0, 100.0)))
    return ScoreTriple(source=SOURCE_GEMINI, **vals)


# =========================
# Flavor copy
# =========================


@dataclass(frozen=True)
class NpcLines:
    vc: str
    employee: str

    def to_dict(self) -> Dict[str, str]:
        return {"vc": self.vc, "employee": self.employee}


def npc_lines_from_llm(data: Mapping[str, Any]) -> NpcLines:
    vc, emp = _text(data.get("vc"), 200), _text(data.get("employee"), 200)
    if not vc or not emp:
        raise ValueError("npc lines need both 'vc' and 'employee'")
    return NpcLines(vc=vc, employee=emp)


@dataclass(frozen=True)
class Insights:
    tip: str
    headline: str
    source: str = SOURCE_HEURISTIC

    def to_dict(self) -> Dict[str, str]:
        return {"tip": self.tip, "headline": self.headline, "source": self.source}


def insights_from_llm(data: Mapping[str, Any]) -> Insights:
    tip, headline = _text(data.get("tip"), 240), _text(data.get("headline"), 160)
    if not tip or not headline:
        raise ValueError("insights need 'tip' and 'headline'")
    return Insights(tip=tip, headline=headline, source=SOURCE_GEMINI)


@dataclass(frozen=True)
class SceneCard:
    title: str
    narrative: str
    hook: str
    source: str = SOURCE_HEURISTIC

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "narrative": self.narrative, "hook": self.hook, "source": self.source}


def scene_card_from_llm(data: Mapping[str, Any]) -> SceneCard:
    title = _text(data.get("title"), 120)
    narrative = _text(data.get("narrative"), 800)
    if not title or not narrative:
        raise ValueError("scene card needs 'title' and 'narrative'")
    return SceneCard(title=title, narrative=narrative, hook=_text(data.get("hook"), 240), source=SOURCE_GEMINI)


@dataclass(frozen=True)
class MilestoneEvent:
    id: str
    title: str
    summary: str
    hook: str
    status: str
    progress_label: str
    source: str = SOURCE_HEURISTIC

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "summary": self.summary,
            "hook": self.hook,
            "highlight": self.hook or None,
            "status": self.status,
            "progressLabel": self.progress_label,
            "source": self.source,
        }


def milestone_events_from_llm(items: Any, changes: List[Any]) -> List[MilestoneEvent]:
    """Merge model copy onto the engine's stage changes.

    Only ids the engine reported are accepted; a change the model skipped keeps
    the static table copy.
    """
    if not isinstance(items, list):
        raise ValueError("milestone copy must be a JSON array")
    by_id: Dict[str, Mapping[str, Any]] = {}
    for obj in items:
        if isinstance(obj, Mapping) and obj.get("id"):
            by_id[str(obj["id"])] = obj

    out: List[MilestoneEvent] = []
    for ch in changes:
        obj = by_id.get(ch.id) or {}
        summary = _text(obj.get("summary") or obj.get("status"), 240) or ch.status
        out.append(
            MilestoneEvent(
                id=ch.id,
                title=ch.title,
                summary=summary,
                hook=_text(obj.get("hook") or obj.get("highlight"), 240),
                status=summary,
                progress_label=_text(obj.get("progressLabel"), 60) or ch.progress_label,
                source=SOURCE_GEMINI if obj else SOURCE_HEURISTIC,
            )
        )
    return out


def post_mortem_from_llm(data: Mapping[str, Any]) -> str:
    memo = _text(data.get("memo"), 1600)
    if not memo:
        raise ValueError("post-mortem needs 'memo'")
    return memo
