"""Founder Burnout HTTP backend (FastAPI).

Endpoints:
- POST /api/process-round  {text, action, gameState} -> round payload
- GET  /api/health

The backend is stateless: every request carries the full game state and
gets a brand-new one back.

Run locally:
  uvicorn server:app --port 3000
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from core.state import state_from_dict
from engine.config import EngineConfig
from engine.logging import get_logger
from engine.pipeline import ValidationFailure, process_round, provider_from_config

log = get_logger("server")

CONFIG = EngineConfig.from_env()
PROVIDER = provider_from_config(CONFIG)

app = FastAPI(title="Founder Burnout", version="1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class RoundRequest(BaseModel):
    text: str = ""
    action: str = ""
    gameState: Dict[str, Any] = Field(default_factory=dict)


@app.post("/api/process-round")
def api_process_round(req: RoundRequest) -> Any:
    # sync handler: FastAPI runs it in the threadpool, the Gemini call may block
    try:
        state = state_from_dict(req.gameState)
        result = process_round(req.text, req.action, state, config=CONFIG, provider=PROVIDER)
    except ValidationFailure as e:
        return JSONResponse(status_code=422, content={"error": "Invalid submission", "details": str(e)})
    except Exception as e:
        log.exception("Error processing round")
        return JSONResponse(status_code=500, content={"error": "Processing failed", "details": str(e)})
    return result.to_payload()


@app.get("/api/health")
def api_health() -> Dict[str, str]:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


_PUBLIC = Path(__file__).resolve().parent / "public"
if _PUBLIC.is_dir():
    app.mount("/", StaticFiles(directory=str(_PUBLIC), html=True), name="public")


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "3000"))
    log.info("Server running on http://localhost:%d", port)
    uvicorn.run(app, host="0.0.0.0", port=port)
