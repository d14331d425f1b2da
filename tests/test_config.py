import json

from core.state import default_start_state
from engine.config import EngineConfig
from engine.logging import dumps_run_export, get_logger, make_run_export

ENV_VARS = (
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_ALLOW_FALLBACK",
    "GEMINI_TIMEOUT",
    "FOUNDER_RANDOM_EVENTS",
    "FOUNDER_EVENT_CHANCE",
    "FOUNDER_SEED",
    "FOUNDER_BACKEND_URL",
)


def _clear(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    _clear(monkeypatch)
    cfg = EngineConfig.from_env()
    assert cfg == EngineConfig()
    assert cfg.request_timeout == 20.0
    assert cfg.random_events is False


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    _clear(monkeypatch)
    monkeypatch.setenv("GOOGLE_API_KEY", "k1,k2")
    monkeypatch.setenv("GEMINI_ALLOW_FALLBACK", "off")
    monkeypatch.setenv("GEMINI_TIMEOUT", "5")
    monkeypatch.setenv("FOUNDER_RANDOM_EVENTS", "1")
    monkeypatch.setenv("FOUNDER_SEED", "7")
    monkeypatch.setenv("FOUNDER_BACKEND_URL", "http://localhost:3000/")
    cfg = EngineConfig.from_env()
    assert cfg.api_key == "k1,k2"
    assert cfg.allow_fallback is False
    assert cfg.request_timeout == 5.0
    assert cfg.random_events is True
    assert cfg.base_seed == 7
    assert cfg.backend_url == "http://localhost:3000"


def test_explicit_key_wins(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    assert EngineConfig.from_env(api_key="from-secrets").api_key == "from-secrets"


def test_bad_numbers_use_defaults(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    _clear(monkeypatch)
    monkeypatch.setenv("GEMINI_TIMEOUT", "soon")
    assert EngineConfig.from_env().request_timeout == 20.0


def test_loggers_share_one_tree():
    assert get_logger("pipeline").name == "founder_burnout.pipeline"


def test_run_export_is_json():
    export = make_run_export(state=default_start_state(), ending={"key": "ipo"}, post_mortem="memo")
    data = json.loads(dumps_run_export(export))
    assert data["version"] == 1
    assert data["state"]["round"] == 1
    assert data["ending"] == {"key": "ipo"}
    assert data["post_mortem"] == "memo"
