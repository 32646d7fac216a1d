# tests/conftest.py

import pytest
from fastapi.testclient import TestClient

import app as app_module


@pytest.fixture
def prefs_db(tmp_path):
    """Fresh preferences database per test."""
    return tmp_path / "prefs.db"


@pytest.fixture
def api(prefs_db):
    """
    TestClient with ESPN / FantasyPros swapped out. Tests put a TeamSources in
    `api.sources` (or an exception in `api.error`) before calling the app.
    """

    class Api:
        sources = None
        error = None
        loaded = []

    def fake_loader(team_cfg, week):
        Api.loaded.append((team_cfg["team_name_keyword"], week))
        if Api.error is not None:
            raise Api.error
        return Api.sources

    Api.loaded = []
    app_module.app.dependency_overrides[app_module.get_sources_loader] = lambda: fake_loader
    app_module.app.dependency_overrides[app_module.get_db_path] = lambda: prefs_db
    with TestClient(app_module.app) as client:
        Api.client = client
        yield Api
    app_module.app.dependency_overrides.clear()
