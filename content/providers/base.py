"""content.providers.base

Provider interfaces.

A provider's job is to turn a prompt into parsed JSON (object or array).
Everything game-specific (which prompt, how to validate, what to fall back
to) lives in content.scoring / content.generator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class ProviderStatus:
    ok: bool
    backend: str
    model: str
    note: str = ""
    error: str = ""


class TextProvider(Protocol):
    def status(self) -> ProviderStatus: ...

    def generate_json(
        self,
        prompt: str,
        *,
        system: str = "",
        temperature: float = 0.7,
        max_output_tokens: int = 800,
    ) -> Any:
        """Return the parsed JSON reply, or raise."""
        ...
