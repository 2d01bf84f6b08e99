import pytest

from sentinel.clock import ManualClock
from sentinel.engine import InactivityEngine
from sentinel.models import InactivityConfig


SENTINEL_ENV_KEYS = (
    'SENTINEL_TIMEOUT',
    'SENTINEL_WARNING',
    'SENTINEL_ACTIVITY_SPACING',
    'SENTINEL_TRACKING_ENABLED',
    'SENTINEL_LOG_LEVEL',
    'SENTINEL_LOG_PATH',
)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def short_policy() -> InactivityConfig:
    """Ten second timeout with a warning five seconds before it"""
    return InactivityConfig.from_seconds(10, warning=5)


@pytest.fixture
def make_engine(clock):
    def factory(config: InactivityConfig, **kwargs) -> InactivityEngine:
        return InactivityEngine(config, clock, **kwargs)
    return factory


@pytest.fixture
def clean_env(monkeypatch):
    """Remove sentinel variables; values loaded from .env files are undone afterwards"""
    for key in SENTINEL_ENV_KEYS:
        # setenv first so monkeypatch records the original state for restore
        monkeypatch.setenv(key, 'placeholder')
        monkeypatch.delenv(key)
    return monkeypatch
