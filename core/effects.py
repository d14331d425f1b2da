"""
core.effects
Game-balance rules:
- base action vectors
- text-score modifiers
- industry / tech multipliers (direction-aware)
- founder trait adjustments
- clamp rules
"""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional, Tuple

from .state import CompanyProfile, Delta, METER_KEYS, Meters, ScoreTriple, clamp


# (growth, ethics, burnout, pr, funding) per action
ACTION_EFFECTS: Dict[str, Dict[str, float]] = {
    "Build":       {"growth": 5,  "ethics": 2,  "burnout": 8,   "pr": -2, "funding": -3},
    "PR":          {"growth": 2,  "ethics": -1, "burnout": 3,   "pr": 12, "funding": 3},
    "Growth Hack": {"growth": 15, "ethics": -8, "burnout": 10,  "pr": -5, "funding": 5},
    "Fundraise":   {"growth": -2, "ethics": 0,  "burnout": 5,   "pr": 8,  "funding": 12},
    "Refactor":    {"growth": -5, "ethics": 5,  "burnout": -8,  "pr": -3, "funding": -5},
    "Hire":        {"growth": 3,  "ethics": 3,  "burnout": -12, "pr": 2,  "funding": -15},
}

# (growth, ethics_risk, pr, funding) multipliers
INDUSTRY_MODIFIERS: Dict[str, Tuple[float, float, float, float]] = {
    "Healthcare":  (0.9, 0.6, 0.9, 1.0),
    "Software":    (1.0, 1.0, 1.0, 1.0),
    "Finance":     (1.0, 1.2, 1.0, 1.1),
    "Electronics": (1.1, 1.0, 1.0, 1.0),
}

TECH_MODIFIERS: Dict[str, Tuple[float, float, float, float]] = {
    "Software":         (1.0, 1.0, 1.0, 1.0),
    "AI/Automation":    (1.0, 1.2, 1.15, 1.0),
    "Physical Product": (0.9, 1.0, 1.1, 0.95),
}


def base_effects(action: str) -> Delta:
    return {k: float(v) for k, v in ACTION_EFFECTS.get(action, ACTION_EFFECTS["Build"]).items()}


def industry_modifiers(industry: str) -> Tuple[float, float, float, float]:
    return INDUSTRY_MODIFIERS.get(industry, INDUSTRY_MODIFIERS["Software"])


def tech_modifiers(tech: str) -> Tuple[float, float, float, float]:
    return TECH_MODIFIERS.get(tech, TECH_MODIFIERS["Software"])


def apply_score_modifiers(d: Delta, scores: ScoreTriple) -> Delta:
    out = dict(d)
    s, b, f = float(scores.sentiment), float(scores.buzzword), float(scores.feasibility)
    out["growth"] += (s - 50) * 0.15
    out["pr"] += (s - 50) * 0.2
    out["ethics"] -= (b - 50) * 0.1        # hype costs ethics
    out["funding"] += (f - 20) * 0.08
    out["burnout"] += (100 - f) * 0.05     # unrealistic plans cost sleep
    return out


def apply_sector_modifiers(d: Delta, company: CompanyProfile) -> Delta:
    """Amplify or dampen only in the direction that matters; never flips a sign."""
    ig, ie, ip, if_ = industry_modifiers(company.industry)
    tg, te, tp, tf = tech_modifiers(company.tech)
    out = dict(d)
    if out["growth"] > 0:
        out["growth"] *= ig * tg
    if out["ethics"] < 0:
        out["ethics"] *= ie * te
    if out["pr"] > 0:
        out["pr"] *= ip * tp
    if out["funding"] > 0:
        out["funding"] *= if_ * tf
    return out


def apply_trait_modifiers(d: Delta, traits: Iterable[str], action: str) -> Delta:
    """Trait adjustments. Each trait touches its own rule, so order is irrelevant."""
    traits = set(traits or ())
    out = dict(d)
    if "Ambition" in traits:
        if action in ("PR", "Fundraise"):
            out["pr"] += 5
        out["burnout"] += 1
    if "Integrity" in traits:
        if out["ethics"] < 0:
            out["ethics"] *= 0.5
        if action == "Growth Hack":
            out["pr"] -= 2
    if "Resilience" in traits:
        out["burnout"] -= 6
    if "Charisma" in traits and action == "Fundraise":
        out["funding"] += 5
    # "Critical Thinking" has no meter rule.
    return out


def compute_deltas(
    scores: ScoreTriple,
    action: str,
    traits: Iterable[str],
    company: CompanyProfile,
    meters: Optional[Meters] = None,
) -> Delta:
    """Scores + action + founder profile -> unclamped meter deltas (pure function).

    `meters` is part of the signature so callers can pass full context; the
    current balance does not read it.
    """
    d = base_effects(action)
    d = apply_score_modifiers(d, scores)
    d = apply_sector_modifiers(d, company)
    d = apply_trait_modifiers(d, traits, action)
    return {k: float(d[k]) for k in METER_KEYS}


def apply_deltas(meters: Meters, delta: Mapping[str, float]) -> Meters:
    """Apply delta with clamp rules (pure function). Unknown keys are ignored."""
    vals = {}
    for k in METER_KEYS:
        vals[k] = float(clamp(float(getattr(meters, k)) + float(delta.get(k, 0.0) or 0.0), 0.0, 100.0))
    return Meters(**vals)
