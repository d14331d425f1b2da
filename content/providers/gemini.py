"""content.providers.gemini

Gemini provider (LLM).

- Supports google-genai (preferred) and google-generativeai (legacy).
- Every request is bounded by `timeout` seconds.
- Returns parsed JSON or raises; callers decide whether to fall back.
- One instance is shared by the server's worker threads. The connected
  backend is an immutable snapshot; key rotation builds the next snapshot
  under a lock and swaps it in whole, so a request in flight never sees a
  half-initialised client.

Important: This provider is UI-agnostic (no Streamlit / FastAPI dependency).
Secrets/env loading is done by engine.config.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from engine.logging import get_logger

from ..parsing import try_parse_json
from .base import ProviderStatus

log = get_logger("gemini")

DEFAULT_MODEL = "gemini-2.0-flash"
FALLBACK_MODELS = ["gemini-2.5-flash", "gemini-1.5-flash"]


@dataclass(frozen=True)
class Backend:
    kind: str  # genai | legacy | none
    client: Any = None
    key_index: int = 0
    error: str = ""


def connect(api_key: str, *, timeout: float, key_index: int = 0) -> Backend:
    """Build a backend for one key; never raises."""
    try:
        from google import genai  # type: ignore

        client = genai.Client(api_key=api_key, http_options={"timeout": int(timeout * 1000)})
        return Backend("genai", client, key_index)
    except Exception as e:
        genai_error = f"google-genai unavailable: {e}"

    try:
        import google.generativeai as genai_legacy  # type: ignore

        genai_legacy.configure(api_key=api_key)
        return Backend("legacy", genai_legacy, key_index)
    except Exception as e:
        log.warning("Gemini SDK unavailable (%s; %s); heuristic fallbacks only.", genai_error, e)
        return Backend("none", None, key_index, error=f"google-generativeai unavailable: {e}")


@dataclass
class GeminiProvider:
    api_keys: List[str]
    model: str = DEFAULT_MODEL
    timeout: float = 20.0

    _backend: Backend = field(default=Backend("none"), init=False, repr=False)
    _lock: Any = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.api_keys = [k.strip() for k in (self.api_keys or []) if str(k).strip()]
        if self.api_keys:
            self._backend = connect(self.api_keys[0], timeout=self.timeout)
        else:
            self._backend = Backend("none", error="Gemini API key missing.")

    @staticmethod
    def from_api_key_string(raw: str, *, model: str = DEFAULT_MODEL, timeout: float = 20.0) -> "GeminiProvider":
        """Comma-separated keys rotate on failure."""
        keys = [x.strip() for x in str(raw or "").split(",") if x.strip()]
        return GeminiProvider(keys, model=model or DEFAULT_MODEL, timeout=float(timeout))

    @property
    def backend(self) -> str:
        return self._backend.kind

    def status(self) -> ProviderStatus:
        b = self._backend
        if b.kind == "none":
            return ProviderStatus(False, "none", "", error=b.error)
        return ProviderStatus(True, b.kind, self.model)

    def _rotate_key(self, failed: Backend) -> Backend:
        """Move to the next key unless another thread already moved past `failed`."""
        with self._lock:
            current = self._backend
            if current is not failed or len(self.api_keys) <= 1:
                return current
            nxt = (failed.key_index + 1) % len(self.api_keys)
            self._backend = connect(self.api_keys[nxt], timeout=self.timeout, key_index=nxt)
            log.info("Gemini key rotated to #%d (%s)", nxt, self._backend.kind)
            return self._backend

    def _candidates(self) -> List[str]:
        return [self.model] + [m for m in FALLBACK_MODELS if m != self.model]

    def _generate_text(self, prompt: str, *, system: str, temperature: float, max_output_tokens: int) -> str:
        b = self._backend
        last_err: Optional[Exception] = None

        for _ in range(max(1, len(self.api_keys))):
            if b.kind == "none":
                raise RuntimeError(b.error or "Gemini not configured")
            for m in self._candidates():
                try:
                    txt = self._call(b, m, prompt, system=system, temperature=temperature, max_output_tokens=max_output_tokens)
                except Exception as e:
                    last_err = e
                    log.debug("Gemini model %s failed: %s", m, e)
                    continue
                if txt:
                    return txt
            b = self._rotate_key(b)

        raise RuntimeError(f"Gemini error: {last_err}" if last_err else "Gemini returned no text.")

    def _call(self, b: Backend, model: str, prompt: str, *, system: str, temperature: float, max_output_tokens: int) -> str:
        cfg: Dict[str, Any] = {
            "temperature": float(temperature),
            "max_output_tokens": int(max_output_tokens),
            "response_mime_type": "application/json",
        }
        if b.kind == "genai":
            if system:
                cfg["system_instruction"] = system
            resp = b.client.models.generate_content(model=model, contents=prompt, config=cfg)
            return (getattr(resp, "text", "") or "").strip()

        if b.kind == "legacy":
            gm = b.client.GenerativeModel(model, system_instruction=system or None)
            resp = gm.generate_content(
                prompt,
                generation_config=cfg,
                request_options={"timeout": float(self.timeout)},
            )
            return (getattr(resp, "text", "") or "").strip()

        raise RuntimeError(b.error or "Gemini backend not initialised")

    def generate_json(
        self,
        prompt: str,
        *,
        system: str = "",
        temperature: float = 0.7,
        max_output_tokens: int = 800,
    ) -> Any:
        raw = self._generate_text(prompt, system=system, temperature=temperature, max_output_tokens=max_output_tokens)
        res = try_parse_json(raw)
        if not res.ok:
            raise ValueError(f"Gemini reply is not JSON: {res.error}")
        return res.data
