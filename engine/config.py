"""engine.config

Runtime configuration shared by the server, the Streamlit client and the
headless runners.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off"}


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, "") or default)
    except ValueError:
        return default


@dataclass(frozen=True)
class EngineConfig:
    api_key: str = ""
    model: str = "gemini-2.0-flash"
    allow_fallback: bool = True
    request_timeout: float = 20.0
    random_events: bool = False
    event_chance: float = 0.25
    base_seed: int = 42
    max_rounds: int = 26
    backend_url: str = ""

    @staticmethod
    def from_env(api_key: Optional[str] = None) -> "EngineConfig":
        """Read `.env` (if present) and the process environment.

        An explicit `api_key` (e.g. from st.secrets) wins over the environment.
        """
        load_dotenv()
        key = api_key if api_key is not None else (os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or "")
        return EngineConfig(
            api_key=str(key or ""),
            model=os.getenv("GEMINI_MODEL") or "gemini-2.0-flash",
            allow_fallback=_env_bool("GEMINI_ALLOW_FALLBACK", True),
            request_timeout=_env_float("GEMINI_TIMEOUT", 20.0),
            random_events=_env_bool("FOUNDER_RANDOM_EVENTS", False),
            event_chance=_env_float("FOUNDER_EVENT_CHANCE", 0.25),
            base_seed=int(_env_float("FOUNDER_SEED", 42)),
            backend_url=(os.getenv("FOUNDER_BACKEND_URL") or "").rstrip("/"),
        )
