"""engine.client

Client-side round runner.

Posts the round to the backend when one is configured; if the round-trip
fails (network error, non-2xx, body-level `error`, unusable body) it logs a
warning and resolves the same round with the local engine. Both paths
return the same payload shape and a full replacement GameState.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from content.providers.base import TextProvider
from core.state import GameState, state_from_dict, state_to_dict

from .config import EngineConfig
from .logging import get_logger
from .pipeline import process_round, validate_submission

log = get_logger("client")


class TransportFailure(RuntimeError):
    """The HTTP round-trip to the backend failed."""


@dataclass(frozen=True)
class RoundOutcome:
    state: GameState
    payload: Dict[str, Any]
    via: str  # backend | local


def post_round(
    base_url: str,
    text: str,
    action: str,
    state: GameState,
    *,
    timeout: float,
    session: Optional[requests.Session] = None,
) -> Dict[str, Any]:
    http = session or requests
    url = f"{base_url.rstrip('/')}/api/process-round"
    try:
        resp = http.post(url, json={"text": text, "action": action, "gameState": state_to_dict(state)}, timeout=timeout)
    except requests.RequestException as e:
        raise TransportFailure(f"request failed: {e}") from e

    if not resp.ok:
        raise TransportFailure(f"HTTP {resp.status_code}")
    try:
        body = resp.json()
    except ValueError as e:
        raise TransportFailure("response is not JSON") from e
    if not isinstance(body, dict) or body.get("error"):
        raise TransportFailure(str(body.get("error") if isinstance(body, dict) else "unexpected body"))
    if not isinstance(body.get("newState"), dict):
        raise TransportFailure("response has no newState")
    return body


def play_round(
    text: str,
    action: str,
    state: GameState,
    *,
    config: EngineConfig,
    provider: Optional[TextProvider] = None,
    session: Optional[requests.Session] = None,
) -> RoundOutcome:
    """Validation errors propagate (nothing is sent); transport errors fall back locally."""
    text, action = validate_submission(text, action)

    if config.backend_url:
        try:
            payload = post_round(
                config.backend_url,
                text,
                action,
                state,
                timeout=float(config.request_timeout) + 10.0,
                session=session,
            )
            return RoundOutcome(state=state_from_dict(payload["newState"]), payload=payload, via="backend")
        except TransportFailure as e:
            log.warning("Backend unavailable, switching to local engine: %s", e)

    result = process_round(text, action, state, config=config, provider=provider)
    return RoundOutcome(state=result.state, payload=result.to_payload(), via="local")
