"""
core.narrative
NPC mood indices, the three milestone ladders, and the scene log.

Stages only ever move up. Flavor copy for a stage change is produced by the
content layer; this module only decides *that* a change happened.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .state import (
    SCENE_LOG_LIMIT,
    Delta,
    Meters,
    MilestoneTrack,
    NarrativeState,
    NpcMood,
    ScoreTriple,
    clamp,
    meters_to_dict,
)

MOOD_MIN, MOOD_MAX = -10.0, 10.0
MAX_STAGE = 3


@dataclass(frozen=True)
class StageInfo:
    label: str
    status: str


@dataclass(frozen=True)
class MilestoneDefinition:
    title: str
    stages: Tuple[StageInfo, ...]

    def stage(self, ix: int) -> StageInfo:
        return self.stages[min(max(int(ix), 0), len(self.stages) - 1)]


MILESTONE_DEFINITIONS: Dict[str, MilestoneDefinition] = {
    "product": MilestoneDefinition(
        "Ship V1",
        (
            StageInfo("Concept", "Sketching the vision and chasing the first prototype"),
            StageInfo("Prototype", "Alpha version limping through early demos"),
            StageInfo("Launch", "Public launch spiking user curiosity"),
            StageInfo("Scale", "Version 2 shipping weekly with users sticking around"),
        ),
    ),
    "funding": MilestoneDefinition(
        "Secure Series A",
        (
            StageInfo("Door knocking", "Warm intros and cold emails dominate the calendar"),
            StageInfo("Term sheet whispers", "Partners circling as metrics improve"),
            StageInfo("Diligence gauntlet", "Data room open, tough questions flying in"),
            StageInfo("Money in the bank", "Wire hit, new board member ready to meddle"),
        ),
    ),
    "team": MilestoneDefinition(
        "Keep Team Together",
        (
            StageInfo("Hopeful", "Team buzzing on vision and caffeine"),
            StageInfo("Grinding", "Burnout creeping while deadlines loom"),
            StageInfo("Stabilizing", "Processes, rest, and clarity return"),
            StageInfo("Thriving", "Proud, sustainable, and celebrating the wins"),
        ),
    ),
}


@dataclass(frozen=True)
class MilestoneChange:
    """Emitted for every stage increase; consumed by the narrative-text generator."""

    id: str
    title: str
    stage: int
    previous_stage: int
    status: str
    progress_label: str
    thresholds_met: Dict[str, float] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return self.stage >= MAX_STAGE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "stage": int(self.stage),
            "previousStage": int(self.previous_stage),
            "status": self.status,
            "progressLabel": self.progress_label,
            "thresholdsMet": dict(self.thresholds_met),
        }


def _track_at(ms_id: str, stage: int) -> MilestoneTrack:
    d = MILESTONE_DEFINITIONS[ms_id]
    info = d.stage(stage)
    return MilestoneTrack(id=ms_id, title=d.title, stage=int(stage), status=info.status, progress_label=info.label)


def default_narrative() -> NarrativeState:
    return NarrativeState(
        npc=NpcMood(0.0, 0.0),
        milestones=tuple(_track_at(ms_id, 0) for ms_id in MILESTONE_DEFINITIONS),
        scene_log=(),
    )


def normalize_narrative(raw: Any) -> NarrativeState:
    """Accept a NarrativeState, a camelCase mapping from the wire, or None."""
    if raw is None:
        return default_narrative()
    if isinstance(raw, NarrativeState):
        data: Mapping[str, Any] = {}
        npc = raw.npc
        tracks = {ms.id: ms for ms in raw.milestones}
        scene_log = list(raw.scene_log)
    else:
        data = dict(raw)
        npc_raw = dict(data.get("npc") or {})
        npc = NpcMood(
            vc_mood=float(npc_raw.get("vcMood", 0.0) or 0.0),
            employee_morale=float(npc_raw.get("employeeMorale", 0.0) or 0.0),
        )
        tracks = {}
        for item in list(data.get("milestones") or []):
            if not isinstance(item, Mapping) or item.get("id") not in MILESTONE_DEFINITIONS:
                continue
            ms_id = str(item["id"])
            try:
                stage = int(item.get("stage", 0) or 0)
            except (TypeError, ValueError):
                stage = 0
            stage = int(clamp(stage, 0, MAX_STAGE))
            base = _track_at(ms_id, stage)
            tracks[ms_id] = replace(
                base,
                status=str(item.get("status") or base.status),
                progress_label=str(item.get("progressLabel") or base.progress_label),
            )
        scene_log = [s for s in list(data.get("sceneLog") or []) if isinstance(s, Mapping)]

    milestones = tuple(tracks.get(ms_id) or _track_at(ms_id, 0) for ms_id in MILESTONE_DEFINITIONS)
    return NarrativeState(
        npc=NpcMood(
            vc_mood=clamp(float(npc.vc_mood), MOOD_MIN, MOOD_MAX),
            employee_morale=clamp(float(npc.employee_morale), MOOD_MIN, MOOD_MAX),
        ),
        milestones=milestones,
        scene_log=tuple(dict(s) for s in scene_log[-SCENE_LOG_LIMIT:]),
    )


def update_moods(npc: NpcMood, deltas: Delta, scores: ScoreTriple) -> NpcMood:
    sentiment_shift = (float(scores.sentiment) - 50) * 0.05
    vc = npc.vc_mood + float(deltas.get("funding", 0.0)) * 0.25 + float(deltas.get("pr", 0.0)) * 0.15 + sentiment_shift
    morale = (
        npc.employee_morale
        - float(deltas.get("burnout", 0.0)) * 0.3
        + float(deltas.get("ethics", 0.0)) * 0.12
        + sentiment_shift
    )
    return NpcMood(vc_mood=clamp(vc, MOOD_MIN, MOOD_MAX), employee_morale=clamp(morale, MOOD_MIN, MOOD_MAX))


def next_stage(ms_id: str, stage: int, meters: Meters, action: str) -> int:
    """Evaluate one track's ladder in increasing order. Never returns less than `stage`."""
    m = meters
    if ms_id == "product":
        if stage < 1 and (m.growth > 45 or action == "Build"):
            stage = 1
        if stage < 2 and (m.growth > 60 and m.pr > 20):
            stage = 2
        if stage < 3 and (m.growth > 75 and m.funding > 60):
            stage = 3
    elif ms_id == "funding":
        if stage < 1 and (m.funding > 55 or action == "Fundraise"):
            stage = 1
        if stage < 2 and (m.funding > 70 and m.pr > 25):
            stage = 2
        if stage < 3 and (m.funding > 85 and m.pr > 35):
            stage = 3
    elif ms_id == "team":
        if stage < 1 and (m.burnout < 55 or action in ("Hire", "Refactor")):
            stage = 1
        if stage < 2 and (m.burnout < 40 and m.ethics > 55):
            stage = 2
        if stage < 3 and (m.burnout < 32 and m.growth > 60):
            stage = 3
    return stage


def update_narrative_state(
    prior: Optional[NarrativeState],
    deltas: Delta,
    meters: Meters,
    action: str,
    update_text: str,
    scores: ScoreTriple,
) -> Tuple[NarrativeState, List[MilestoneChange]]:
    """Advance moods and milestone ladders against the *new* meters (pure).

    `update_text` is accepted for the content layer's benefit; the rules never read it.
    """
    narrative = normalize_narrative(prior)
    npc = update_moods(narrative.npc, deltas, scores)

    changes: List[MilestoneChange] = []
    tracks: List[MilestoneTrack] = []
    for ms in narrative.milestones:
        previous = int(ms.stage)
        stage = next_stage(ms.id, previous, meters, action)
        if stage > previous:
            nxt = _track_at(ms.id, stage)
            changes.append(
                MilestoneChange(
                    id=ms.id,
                    title=ms.title,
                    stage=stage,
                    previous_stage=previous,
                    status=nxt.status,
                    progress_label=nxt.progress_label,
                    thresholds_met=meters_to_dict(meters),
                )
            )
            tracks.append(nxt)
        else:
            # generated copy lasts one round; the static table is the resting text
            tracks.append(_track_at(ms.id, previous))

    return replace(narrative, npc=npc, milestones=tuple(tracks)), changes


def apply_milestone_copy(narrative: NarrativeState, copy: Mapping[str, Mapping[str, str]]) -> NarrativeState:
    """Override status / progress label with generated copy. Stages are untouched."""
    if not copy:
        return narrative
    tracks = []
    for ms in narrative.milestones:
        c = copy.get(ms.id)
        if c:
            ms = replace(
                ms,
                status=str(c.get("status") or ms.status),
                progress_label=str(c.get("progress_label") or ms.progress_label),
            )
        tracks.append(ms)
    return replace(narrative, milestones=tuple(tracks))


def push_scene(narrative: NarrativeState, scene: Mapping[str, Any]) -> NarrativeState:
    """Append a scene summary, keep the most recent SCENE_LOG_LIMIT entries."""
    log = (*narrative.scene_log, dict(scene))
    return replace(narrative, scene_log=tuple(log[-SCENE_LOG_LIMIT:]))
