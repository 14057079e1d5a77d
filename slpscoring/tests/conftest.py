"""Shared pytest fixtures for slpscoring tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from slpscoring.app import app
from slpscoring.config import Settings, reset_settings_cache
from slpscoring.preferences import PreferencesStore, get_preferences_store
from slpscoring.runtime import ScoringRuntime, get_scoring_runtime

from .fakes import FakeGateway, make_player


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    monkeypatch.delenv("API_KEY", raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway(
        [
            make_player("p1", "Ann", "Lee", handicap="4", scores=[(1, 4), (2, 5)]),
            make_player("p2", "Bo", "Diaz", handicap="12"),
        ],
        strokes={"p1": 0, "p2": 1},
    )


@pytest.fixture
def runtime(gateway) -> ScoringRuntime:
    return ScoringRuntime(
        gateway=gateway, settings=Settings()  # type: ignore[arg-type]
    )


@pytest.fixture
def api_client(runtime, tmp_path):
    prefs = PreferencesStore(tmp_path / "prefs.json")
    app.dependency_overrides[get_scoring_runtime] = lambda: runtime
    app.dependency_overrides[get_preferences_store] = lambda: prefs
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.pop(get_scoring_runtime, None)
    app.dependency_overrides.pop(get_preferences_store, None)
