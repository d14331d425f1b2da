"""engine.sim_runner

Headless runner for quick sanity checks.

This keeps tests deterministic and CI-friendly by avoiding network calls.
It uses a tiny built-in fake provider that answers like Gemini would.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from content.prompts import ANALYST_SYSTEM, NPC_SYSTEM
from content.providers.base import ProviderStatus
from core.state import CompanyProfile, default_start_state

from .config import EngineConfig
from .pipeline import RoundResult, process_round


@dataclass
class FakeProvider:
    """Deterministic provider for tests (no LLM).

    Scores come from `scores`; copy requests get short canned JSON.
    Set `fail=True` to simulate an outage.
    """

    scores: Dict[str, Any] = field(default_factory=lambda: {"sentiment": 60, "buzzword": 30, "feasibility": 70})
    fail: bool = False
    calls: List[str] = field(default_factory=list)

    def status(self) -> ProviderStatus:
        return ProviderStatus(True, "fake", "fake-1")

    def generate_json(self, prompt: str, *, system: str = "", temperature: float = 0.7, max_output_tokens: int = 800) -> Any:
        self.calls.append(prompt.splitlines()[0] if prompt else "")
        if self.fail:
            raise RuntimeError("fake outage")
        if system == ANALYST_SYSTEM:
            return dict(self.scores)
        if system == NPC_SYSTEM:
            return {"vc": "Let's circle back on traction.", "employee": "Coffee is a food group now."}
        if prompt.startswith("Milestone progress update"):
            return [{"id": "product", "summary": "Demo day nerves, real users", "hook": "Keep shipping", "progressLabel": "Prototype+"}]
        if prompt.startswith("Craft a concise round recap"):
            return {"title": "Another lap", "narrative": "You shipped. People noticed.", "hook": "Rest on Sunday."}
        if prompt.startswith("Write a dryly witty"):
            return {"memo": "The fund will write this one off with a smile."}
        return {"tip": "Pick one metric and defend it.", "headline": "Founder survives another week"}


DEFAULT_PLAN: Tuple[Tuple[str, str], ...] = (
    ("Shipped onboarding v2, activation up 12% week over week.", "Build"),
    ("Talked to 9 customers, rewrote pricing page, churn flat.", "Refactor"),
    ("Hired a support lead; backlog down to 40 tickets.", "Hire"),
    ("Pitched 6 funds, two partner meetings booked for next week.", "Fundraise"),
)


def run_headless_sim(
    weeks: int = 26,
    *,
    plan: Sequence[Tuple[str, str]] = DEFAULT_PLAN,
    traits: Sequence[str] = ("Resilience", "Integrity"),
    company: Optional[CompanyProfile] = None,
    config: Optional[EngineConfig] = None,
    provider: Optional[Any] = None,
) -> Dict[str, Any]:
    """Play up to `weeks` rounds (cycling through `plan`) or until an ending fires."""
    cfg = config or EngineConfig()
    state = default_start_state(company or CompanyProfile("SimCo", "Software", "Software"), traits)

    results: List[RoundResult] = []
    for i in range(int(weeks)):
        text, action = plan[i % len(plan)]
        res = process_round(text, action, state, config=cfg, provider=provider)
        results.append(res)
        state = res.state
        if res.ending is not None:
            break

    return {
        "weeks": len(results),
        "final": state,
        "ending": results[-1].ending if results else None,
        "results": results,
    }
