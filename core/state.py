"""
core.state
Core domain data models (UI/LLM independent).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


Delta = Dict[str, float]

METER_KEYS: Tuple[str, ...] = ("growth", "ethics", "burnout", "pr", "funding")

# UI polarity only; the math treats every channel the same way.
BAD_WHEN_HIGH = frozenset({"burnout", "ethics"})

INDUSTRIES = ("Healthcare", "Software", "Finance", "Electronics")
TECH_SECTORS = ("Software", "AI/Automation", "Physical Product")
TRAITS = ("Ambition", "Integrity", "Resilience", "Charisma", "Critical Thinking")
ACTIONS = ("Build", "PR", "Growth Hack", "Fundraise", "Refactor", "Hire")

SCENE_LOG_LIMIT = 12


@dataclass(frozen=True)
class Meters:
    """The five bounded game channels.

    Every value sits in 0..100 at rest; clamping is done by
    core.effects.apply_deltas().
    """

    growth: float
    ethics: float
    burnout: float
    pr: float
    funding: float


@dataclass(frozen=True)
class CompanyProfile:
    name: str = "StartupCo"
    industry: str = "Software"
    tech: str = "Software"


@dataclass(frozen=True)
class ScoreTriple:
    """Text scores consumed by the delta engine. `source` is attribution only."""

    sentiment: int
    buzzword: int
    feasibility: int
    source: str = "heuristic"


@dataclass(frozen=True)
class RoundRecord:
    round: int
    text: str
    action: str
    scores: ScoreTriple
    meters_after: Meters
    random_event: Optional[str] = None


@dataclass(frozen=True)
class NpcMood:
    vc_mood: float = 0.0          # -10..10
    employee_morale: float = 0.0  # -10..10


@dataclass(frozen=True)
class MilestoneTrack:
    id: str
    title: str
    stage: int
    status: str
    progress_label: str


@dataclass(frozen=True)
class NarrativeState:
    npc: NpcMood = field(default_factory=NpcMood)
    milestones: Tuple[MilestoneTrack, ...] = ()
    scene_log: Tuple[Dict[str, Any], ...] = ()


@dataclass(frozen=True)
class GameState:
    """Aggregate root. A processed round always yields a new instance."""

    round: int
    company: CompanyProfile
    traits: Tuple[str, ...]
    meters: Meters
    history: Tuple[RoundRecord, ...] = ()
    narrative: NarrativeState = field(default_factory=NarrativeState)
    last_action: Optional[str] = None


def default_meters() -> Meters:
    return Meters(growth=35.0, ethics=60.0, burnout=25.0, pr=10.0, funding=50.0)


def validate_traits(traits: Any) -> Tuple[str, ...]:
    """Setup-time check: exactly two distinct known traits."""
    out = tuple(str(t).strip() for t in (traits or []) if str(t).strip())
    if len(out) != 2 or len(set(out)) != 2:
        raise ValueError("Please select exactly 2 traits!")
    unknown = [t for t in out if t not in TRAITS]
    if unknown:
        raise ValueError(f"Unknown trait(s): {', '.join(unknown)}")
    return out


def default_start_state(company: Optional[CompanyProfile] = None, traits: Any = ()) -> GameState:
    """Baseline start state.

    Keep it in core so headless tests, the server and the UI share the same baseline.
    """
    from .narrative import default_narrative

    return GameState(
        round=1,
        company=company or CompanyProfile(),
        traits=tuple(traits or ()),
        meters=default_meters(),
        history=(),
        narrative=default_narrative(),
        last_action=None,
    )


# -------------------------
# JSON bridge (wire shape is camelCase)
# -------------------------


def meters_from_mapping(d: Mapping[str, Any]) -> Meters:
    """Bridge helper for dict-based meters. Values are re-clamped to 0..100."""
    base = default_meters()
    vals = {}
    for k in METER_KEYS:
        try:
            v = float(d.get(k, getattr(base, k)))
        except (TypeError, ValueError):
            v = float(getattr(base, k))
        vals[k] = clamp(v, 0.0, 100.0)
    return Meters(**vals)


def meters_to_dict(m: Meters) -> Dict[str, float]:
    return {k: float(getattr(m, k)) for k in METER_KEYS}


def scores_to_dict(s: ScoreTriple) -> Dict[str, Any]:
    return {
        "sentiment": int(s.sentiment),
        "buzzword": int(s.buzzword),
        "feasibility": int(s.feasibility),
        "source": str(s.source),
    }


def scores_from_mapping(d: Mapping[str, Any]) -> ScoreTriple:
    def _int(key: str, default: int) -> int:
        try:
            return int(clamp(float(d.get(key, default)), 0, 100))
        except (TypeError, ValueError):
            return default

    return ScoreTriple(
        sentiment=_int("sentiment", 50),
        buzzword=_int("buzzword", 50),
        feasibility=_int("feasibility", 50),
        source=str(d.get("source") or "unknown"),
    )


def record_to_dict(r: RoundRecord) -> Dict[str, Any]:
    return {
        "round": int(r.round),
        "text": r.text,
        "action": r.action,
        "nlp": scores_to_dict(r.scores),
        "meters": meters_to_dict(r.meters_after),
        "randomEvent": r.random_event,
    }


def record_from_mapping(d: Mapping[str, Any]) -> RoundRecord:
    return RoundRecord(
        round=int(d.get("round", 0) or 0),
        text=str(d.get("text", "") or ""),
        action=str(d.get("action", "") or ""),
        scores=scores_from_mapping(d.get("nlp") or d),
        meters_after=meters_from_mapping(d.get("meters") or {}),
        random_event=d.get("randomEvent") or None,
    )


def narrative_to_dict(n: NarrativeState) -> Dict[str, Any]:
    return {
        "npc": {"vcMood": float(n.npc.vc_mood), "employeeMorale": float(n.npc.employee_morale)},
        "milestones": [
            {
                "id": ms.id,
                "title": ms.title,
                "stage": int(ms.stage),
                "status": ms.status,
                "progressLabel": ms.progress_label,
            }
            for ms in n.milestones
        ],
        "sceneLog": [dict(s) for s in n.scene_log],
    }


def state_to_dict(s: GameState) -> Dict[str, Any]:
    return {
        "round": int(s.round),
        "company": {"name": s.company.name, "industry": s.company.industry, "tech": s.company.tech},
        "traits": list(s.traits),
        "meters": meters_to_dict(s.meters),
        "history": [record_to_dict(r) for r in s.history],
        "narrative": narrative_to_dict(s.narrative),
        "lastAction": s.last_action,
    }


def state_from_dict(d: Mapping[str, Any]) -> GameState:
    """Tolerant inverse of state_to_dict() (client payloads may be partial)."""
    from .narrative import normalize_narrative

    company = dict(d.get("company") or {})
    history: List[RoundRecord] = []
    for item in list(d.get("history") or []):
        if isinstance(item, Mapping):
            history.append(record_from_mapping(item))

    return GameState(
        round=max(1, int(d.get("round", 1) or 1)),
        company=CompanyProfile(
            name=str(company.get("name") or "StartupCo"),
            industry=str(company.get("industry") or "Software"),
            tech=str(company.get("tech") or "Software"),
        ),
        traits=tuple(str(t) for t in (d.get("traits") or [])),
        meters=meters_from_mapping(d.get("meters") or {}),
        history=tuple(history),
        narrative=normalize_narrative(d.get("narrative")),
        last_action=d.get("lastAction") or None,
    )


def annotate_last_record(history: Tuple[RoundRecord, ...], random_event: str) -> Tuple[RoundRecord, ...]:
    """Return a new history whose last record carries the random-event title."""
    if not history:
        return history
    return (*history[:-1], replace(history[-1], random_event=random_event))
