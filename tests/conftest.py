import pytest

from core.state import CompanyProfile, default_start_state
from engine.config import EngineConfig
from engine.sim_runner import FakeProvider


@pytest.fixture
def start_state():
    return default_start_state(CompanyProfile("TestCo", "Software", "Software"), ("Resilience", "Integrity"))


@pytest.fixture
def offline_config():
    return EngineConfig()


@pytest.fixture
def fake_provider():
    return FakeProvider()
