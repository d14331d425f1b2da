"""Founder Burnout (Streamlit)

Weekly founder updates -> five meters, milestones, NPC banter, one of seven endings.

Principles:
- UI only renders + triggers.
- Core balance and the round pipeline are pure Python modules.
- Content comes from Gemini when a key is configured; otherwise (or when it
  fails) heuristic copy keeps the game playable. The source is always shown.
- When FOUNDER_BACKEND_URL is set, rounds go through the HTTP backend and
  fall back to the local engine if it is unreachable.

Entry point: streamlit run app.py
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

import streamlit as st

import core
from content.providers.base import ProviderStatus
from core.state import (
    ACTIONS,
    BAD_WHEN_HIGH,
    INDUSTRIES,
    METER_KEYS,
    TECH_SECTORS,
    TRAITS,
    CompanyProfile,
    GameState,
    default_start_state,
    meters_to_dict,
    validate_traits,
)
from core.phases import get_phase_title
from engine.client import play_round
from engine.config import EngineConfig
from engine.logging import dumps_run_export, make_run_export
from engine.pipeline import ValidationFailure, provider_from_config


APP_TITLE = "Founder Burnout"
APP_SUBTITLE = "26 weeks. Five meters. One founder running on cold brew."
APP_VERSION = "1.0.0"
EXPECTED_CORE_VERSION = "core-v1-founder-burnout"

METER_LABELS = {"growth": "Growth", "ethics": "Ethics", "burnout": "Burnout", "pr": "PR", "funding": "Funding"}

st.set_page_config(page_title=APP_TITLE, page_icon="🔥", layout="wide", initial_sidebar_state="expanded")

CSS = """
<style>
.block-container {padding-top: 3.2rem; padding-bottom: 2rem;}
.card {
  border: 1px solid rgba(255,255,255,0.08);
  border-radius: 16px;
  padding: 14px 16px;
  background: rgba(255,255,255,0.03);
}
.pill {
  display: inline-block;
  padding: 2px 10px;
  border-radius: 999px;
  border: 1px solid rgba(255,255,255,0.12);
  font-size: 12px;
  opacity: .85;
}
.pill.ok {border-color: rgba(120,255,160,0.25);}
.pill.bad {border-color: rgba(255,120,120,0.25);}
.small {font-size: 13px; opacity:.75;}
</style>
"""

st.markdown(CSS, unsafe_allow_html=True)


def check_core_version() -> None:
    """Stop with a helpful message if app.py and core/ come from different releases."""
    if getattr(core, "API_VERSION", None) != EXPECTED_CORE_VERSION:
        st.error(
            "Core version does not match the app (partial deploy?).\n\n"
            f"Expected core: {EXPECTED_CORE_VERSION}, found: {getattr(core, 'API_VERSION', None)!r}"
        )
        st.stop()


# =========================
# Helpers
# =========================


def _get_api_key() -> Optional[str]:
    # Streamlit Cloud: st.secrets (missing secrets.toml raises)
    try:
        if "GEMINI_API_KEY" in st.secrets:
            return str(st.secrets["GEMINI_API_KEY"])
    except Exception:
        pass
    return None


def _config() -> EngineConfig:
    return EngineConfig.from_env(api_key=_get_api_key())


def _provider_status(cfg: EngineConfig) -> ProviderStatus:
    provider = provider_from_config(cfg)
    if provider is None:
        return ProviderStatus(False, "none", "", note="offline heuristics", error="GEMINI_API_KEY not set")
    return provider.status()


def _meter_delta_label(key: str, value: float) -> str:
    """Arrow + polarity for the explainability row."""
    if abs(value) < 0.05:
        return "·"
    arrow = "↑" if value > 0 else "↓"
    good = (value < 0) if key in BAD_WHEN_HIGH else (value > 0)
    cls = "ok" if good else "bad"
    return f"<span class='pill {cls}'>{arrow} {abs(value):.1f}</span>"


# =========================
# Session State
# =========================


def _ensure_state() -> None:
    ss = st.session_state
    if "run_id" not in ss:
        ss.run_id = datetime.utcnow().strftime("%Y%m%d%H%M%S%f")
    if "started" not in ss:
        ss.started = False
    if "game_state" not in ss:
        ss.game_state = None
    if "last_payload" not in ss:
        ss.last_payload = None
    if "ending" not in ss:
        ss.ending = None
    if "post_mortem" not in ss:
        ss.post_mortem = None
    if "rounds" not in ss:
        ss.rounds = []


def _reset_run() -> None:
    ss = st.session_state
    for k in list(ss.keys()):
        del ss[k]
    _ensure_state()


def _start_run(name: str, industry: str, tech: str, traits: List[str]) -> None:
    ss = st.session_state
    chosen = validate_traits(traits)
    ss.game_state = default_start_state(CompanyProfile(name.strip() or "StartupCo", industry, tech), chosen)
    ss.started = True
    ss.last_payload = None
    ss.ending = None
    ss.post_mortem = None
    ss.rounds = []


def _submit_round(text: str, action: Optional[str]) -> None:
    ss = st.session_state
    cfg = _config()
    state: GameState = ss.game_state

    outcome = play_round(text, action or "", state, config=cfg, provider=provider_from_config(cfg))

    payload = outcome.payload
    ss.game_state = outcome.state
    ss.last_payload = payload
    ss.rounds.append({"round": state.round, "via": outcome.via, "payload": payload})
    if payload.get("ending"):
        ss.ending = payload["ending"]
        ss.post_mortem = payload.get("postMortem")


# =========================
# UI Pages
# =========================


def page_setup() -> None:
    st.title(APP_TITLE)
    st.caption(APP_SUBTITLE)

    st.markdown("""
    ### How to play
    - Every week write a short **founder update** and pick **one action**.
    - Your words are scored for sentiment, buzzwords and feasibility; the action and your traits do the rest.
    - Burn out (burnout > 80) and it's over early. Survive to week 26 and the board decides your fate.
    """)

    with st.form("setup"):
        name = st.text_input("Company name", value="", placeholder="StartupCo")
        c1, c2 = st.columns(2)
        industry = c1.selectbox("Industry", INDUSTRIES, index=INDUSTRIES.index("Software"))
        tech = c2.selectbox("Technology", TECH_SECTORS, index=0)
        traits = st.multiselect("Founder traits (pick exactly 2)", TRAITS, max_selections=2)
        submitted = st.form_submit_button("Start the company", use_container_width=True)

    if submitted:
        try:
            _start_run(name, industry, tech, traits)
        except ValueError as e:
            st.warning(str(e))
            return
        st.rerun()


def render_meters(state: GameState, deltas: Optional[Dict[str, float]]) -> None:
    cols = st.columns(len(METER_KEYS))
    m = meters_to_dict(state.meters)
    for col, key in zip(cols, METER_KEYS):
        with col:
            st.metric(METER_LABELS[key], f"{round(m[key])}")
            st.progress(min(1.0, max(0.0, m[key] / 100.0)))
            if deltas:
                st.markdown(_meter_delta_label(key, float(deltas.get(key, 0.0))), unsafe_allow_html=True)


def render_last_round(payload: Dict[str, Any]) -> None:
    nlp = payload.get("nlp") or {}
    a, b, c, d = st.columns([1, 1, 1, 1.4])
    a.metric("Sentiment", nlp.get("sentiment", "—"))
    b.metric("Buzzword", nlp.get("buzzword", "—"))
    c.metric("Feasibility", nlp.get("feasibility", "—"))
    d.caption(f"Scored by: {payload.get('analysisSource', 'unknown')}")

    npc = payload.get("npcLines") or {}
    n1, n2 = st.columns(2)
    n1.markdown(f"**VC:** \"{npc.get('vc', '')}\"")
    n2.markdown(f"**Employee:** \"{npc.get('employee', '')}\"")

    scene = payload.get("sceneCard") or {}
    if scene:
        st.markdown("<div class='card'>", unsafe_allow_html=True)
        st.markdown(f"#### {scene.get('title', '')}")
        st.markdown(scene.get("narrative", ""))
        if scene.get("hook"):
            st.markdown(f"<div class='small'>➡ {scene['hook']}</div>", unsafe_allow_html=True)
        st.markdown("</div>", unsafe_allow_html=True)

    insights = payload.get("insights") or {}
    if insights:
        st.markdown(f"📰 *{insights.get('headline', '')}*")
        st.markdown(f"🧭 **Advisor:** {insights.get('tip', '')}  <span class='small'>({payload.get('insightsSource', 'unknown')})</span>",
                    unsafe_allow_html=True)

    for ev in payload.get("milestoneEvents") or []:
        st.success(f"🏁 {ev.get('title')}: {ev.get('progressLabel')} — {ev.get('hook') or ev.get('summary')}")

    shock = payload.get("randomEvent")
    if shock:
        box = st.error if shock.get("reaction") == "setback" else (st.success if shock.get("reaction") == "boost" else st.info)
        box(f"🎲 {shock.get('title')}: {shock.get('text')}")


def render_milestones(state: GameState) -> None:
    npc = state.narrative.npc
    st.caption(f"VC mood {npc.vc_mood:+.1f} · Team morale {npc.employee_morale:+.1f}")
    cols = st.columns(len(state.narrative.milestones) or 1)
    for col, ms in zip(cols, state.narrative.milestones):
        with col:
            st.markdown(f"**{ms.title}**")
            st.progress(ms.stage / 3.0, text=f"{ms.progress_label} ({ms.stage}/3)")
            st.markdown(f"<div class='small'>{ms.status}</div>", unsafe_allow_html=True)


def page_run() -> None:
    ss = st.session_state
    state: GameState = ss.game_state
    payload = ss.last_payload

    st.title(state.company.name)
    st.caption(f"{state.company.industry} · {state.company.tech} · Traits: {', '.join(state.traits)}")
    st.markdown(f"## {payload.get('phaseTitle') if payload else get_phase_title(state.round)}")

    render_meters(state, (payload or {}).get("deltas"))
    st.markdown("<hr/>", unsafe_allow_html=True)

    if payload:
        render_last_round(payload)
        st.markdown("<hr/>", unsafe_allow_html=True)

    render_milestones(state)
    st.markdown("<hr/>", unsafe_allow_html=True)

    st.markdown(f"### Week {state.round}: your update")
    with st.form(f"round_{state.round}", clear_on_submit=True):
        text = st.text_area("What happened this week?", max_chars=600, height=130)
        action = st.radio("Action", ACTIONS, index=None, horizontal=True)
        submitted = st.form_submit_button("Submit week", use_container_width=True)

    if submitted:
        try:
            with st.spinner("Crunching the numbers…"):
                _submit_round(text, action)
        except ValidationFailure as e:
            st.warning(str(e))
            return
        st.rerun()


def page_ending() -> None:
    ss = st.session_state
    state: GameState = ss.game_state
    ending = ss.ending or {}

    st.title(ending.get("title", "Game over"))
    st.markdown(ending.get("text", ""))

    m = meters_to_dict(state.meters)
    cols = st.columns(len(METER_KEYS))
    for col, key in zip(cols, METER_KEYS):
        col.metric(METER_LABELS[key], f"{round(m[key])}")

    if ss.post_mortem:
        st.markdown("### Post-mortem")
        st.markdown(ss.post_mortem)

    if st.button("Restart", use_container_width=True):
        _reset_run()
        st.rerun()


def page_history() -> None:
    ss = st.session_state
    st.title("History")
    state: Optional[GameState] = ss.game_state
    if state is None or not state.history:
        st.info("No rounds yet.")
        return

    for rec in reversed(state.history):
        st.markdown("<div class='card'>", unsafe_allow_html=True)
        st.markdown(f"#### {get_phase_title(rec.round)} — {rec.action}")
        st.markdown(rec.text)
        st.markdown(
            f"<div class='small'>sentiment {rec.scores.sentiment} · buzzword {rec.scores.buzzword} · "
            f"feasibility {rec.scores.feasibility} ({rec.scores.source})"
            + (f" · 🎲 {rec.random_event}" if rec.random_event else "")
            + "</div>",
            unsafe_allow_html=True,
        )
        st.markdown("</div>", unsafe_allow_html=True)
        st.write("")


def page_debug() -> None:
    ss = st.session_state
    cfg = _config()
    st.title("Debug")

    st.subheader("Provider")
    st.json(asdict(_provider_status(cfg)))

    st.subheader("EngineConfig")
    st.json({**asdict(cfg), "api_key": "***" if cfg.api_key else ""})

    st.subheader("Last payload")
    st.json(ss.last_payload or {})


def export_controls() -> None:
    ss = st.session_state
    st.sidebar.markdown("---")
    st.sidebar.markdown("### Run export")
    if not ss.get("started") or ss.game_state is None:
        st.sidebar.caption("Start a company to export the run.")
        return
    export = make_run_export(state=ss.game_state, ending=ss.ending, post_mortem=ss.post_mortem)
    st.sidebar.download_button(
        "Download run (JSON)",
        data=dumps_run_export(export).encode("utf-8"),
        file_name=f"founder_burnout_{ss.get('run_id', 'run')}.json",
        mime="application/json",
    )


# =========================
# Sidebar
# =========================


def sidebar() -> str:
    ss = st.session_state
    cfg = _config()

    st.sidebar.markdown(f"**{APP_TITLE}**  ")
    st.sidebar.markdown(f"v{APP_VERSION}")
    st.sidebar.markdown("---")

    ps = _provider_status(cfg)
    if ps.ok:
        st.sidebar.success(f"Gemini ready ({ps.backend} / {ps.model})")
    else:
        st.sidebar.info("Offline mode: heuristic scoring")
        st.sidebar.caption(ps.error or "")
    if cfg.backend_url:
        st.sidebar.caption(f"Backend: {cfg.backend_url}")
    if cfg.random_events:
        st.sidebar.caption("Random events: on")

    if st.sidebar.button("Reset", use_container_width=True):
        _reset_run()
        st.rerun()

    export_controls()

    st.sidebar.markdown("---")
    return st.sidebar.radio("Page", ["Play", "History", "Debug"], index=0, disabled=not ss.started)


# =========================
# Main
# =========================


def main() -> None:
    check_core_version()
    _ensure_state()
    page = sidebar()

    ss = st.session_state

    if not ss.started or ss.game_state is None:
        page_setup()
        return

    if page == "History":
        page_history()
    elif page == "Debug":
        page_debug()
    elif ss.ending:
        page_ending()
    else:
        page_run()


if __name__ == "__main__":
    main()
