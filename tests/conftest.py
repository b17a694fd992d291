# tests/conftest.py
from __future__ import annotations

import pytest

from storyframe.io import config as config_mod

# Env vars read by the loader; cleared so the developer's shell cannot leak into tests
_LOADER_ENV = (
    "STORYFRAME_CONFIG",
    "STORYFRAME_LOG_LEVEL",
    "STORYFRAME_PORT",
    "STORYFRAME_TELEMETRY",
    "OPENAI_API_KEY",
    "STABILITY_API_KEY",
)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch):
    """Fresh process-wide config snapshot and a clean loader environment per test."""
    for name in _LOADER_ENV:
        monkeypatch.delenv(name, raising=False)
    config_mod.reset_config()
    yield
    config_mod.reset_config()
