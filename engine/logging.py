"""engine.logging

Diagnostics + run logs.

- get_logger(): one `founder_burnout` logger tree with a console handler,
  configured on first use. Fallbacks log at WARNING, rounds at INFO.
- make_run_export(): JSON-serializable record of a finished (or ongoing)
  game so the client can offer it as a download.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

ROOT_LOGGER = "founder_burnout"
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Safe to call multiple times; skips if handlers already exist."""
    logger = logging.getLogger(ROOT_LOGGER)
    if logger.handlers:
        return logger

    lvl = (level or os.getenv("FOUNDER_LOG_LEVEL") or "INFO").upper()
    logger.setLevel(getattr(logging, lvl, logging.INFO))

    ch = logging.StreamHandler(sys.stderr)
    ch.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(ch)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    setup_logging()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def make_run_export(*, state: Any, ending: Optional[Dict[str, Any]] = None, post_mortem: Optional[str] = None) -> Dict[str, Any]:
    """`state` is a core.state.GameState."""
    from core.state import state_to_dict

    return {
        "version": 1,
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "state": state_to_dict(state),
        "ending": dict(ending) if ending else None,
        "post_mortem": post_mortem,
    }


def dumps_run_export(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2, sort_keys=True)
