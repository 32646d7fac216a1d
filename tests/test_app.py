# tests/test_app.py

from fakes import WEEK, free_agent, player, team_sources

from errors import InvalidLineupRequirements
from models import SlotTag


def _qb_sources():
    return team_sources(
        [player("qb1", "QB", starter=True), player("qb2", "QB"), player("rb1", "RB", starter=True), player("rb2", "RB")],
        {"qb1": 20.0, "qb2": 25.0, "rb1": 10.0, "rb2": 4.0},
        slot_labels=["QB", "RB", "BE", "BE"],
        free_agents={"RB": [free_agent("fa_rb", "RB", 11.0)]},
    )


def test_health(api):
    resp = api.client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_list_teams_hides_credentials(api):
    resp = api.client.get("/teams")
    assert resp.status_code == 200
    teams = resp.json()
    assert {t["key"] for t in teams} == {"cant_teach_matchups", "stinky_steinerts"}
    assert all("espn_s2" not in t for t in teams)


def test_optimize_uses_default_threshold(api):
    api.sources = _qb_sources()

    resp = api.client.get(f"/teams/cant_teach_matchups/optimize?week={WEEK}&scoring=ppr")

    assert resp.status_code == 200
    body = resp.json()
    assert body["threshold_pct"] == 10.0
    assert [p["id"] for p in body["optimal_lineup"]["QB"]] == ["qb2"]
    assert body["improvement"] == 5.0
    assert body["actionable_improvement"] == 5.0
    assert body["changes"][0]["improvement_percentage"] == 25.0
    assert body["move_chains"][0]["steps"][1]["to_slot"] == "QB"
    assert body["waivers"][0]["add"]["id"] == "fa_rb"
    assert api.loaded[0][1] == WEEK


def test_saved_threshold_applies_on_next_request(api):
    api.sources = _qb_sources()

    resp = api.client.put("/preferences/me", json={"min_improvement_pct": 30})
    assert resp.status_code == 200
    assert resp.json() == {"profile": "me", "min_improvement_pct": 30.0}

    body = api.client.get("/teams/cant_teach_matchups/optimize?profile=me").json()
    assert body["threshold_pct"] == 30.0
    assert body["changes"] == []
    assert body["actionable_improvement"] == 0.0
    assert body["improvement"] == 5.0

    # other profiles keep the default
    assert api.client.get("/preferences/default").json()["min_improvement_pct"] == 10.0


def test_threshold_out_of_range_rejected(api):
    assert api.client.put("/preferences/me", json={"min_improvement_pct": 150}).status_code == 422
    assert api.client.put("/preferences/me", json={"min_improvement_pct": -1}).status_code == 422


def test_unknown_team_is_404(api):
    assert api.client.get("/teams/nobody/optimize").status_code == 404
    assert api.client.get("/teams/nobody/waivers").status_code == 404
    assert api.loaded == []


def test_empty_roster_is_404(api):
    api.sources = team_sources([], {"qb1": 1.0})

    resp = api.client.get("/teams/cant_teach_matchups/optimize")

    assert resp.status_code == 404
    assert resp.json()["error"] == "NoTeamData"


def test_missing_projections_is_503(api):
    api.sources = team_sources([player("qb1", "QB", starter=True)], {})

    resp = api.client.get("/teams/cant_teach_matchups/optimize")

    assert resp.status_code == 503
    assert resp.json()["detail"] == "No projections available"


def test_invalid_requirements_is_422(api):
    api.error = InvalidLineupRequirements(f"{SlotTag.QB.value} has negative count -1")

    resp = api.client.get("/teams/cant_teach_matchups/optimize")

    assert resp.status_code == 422
    assert resp.json()["error"] == "InvalidLineupRequirements"


def test_espn_failure_is_502(api):
    api.error = RuntimeError("Could not find team")

    resp = api.client.get("/teams/cant_teach_matchups/waivers")

    assert resp.status_code == 502


def test_waivers_endpoint(api):
    api.sources = _qb_sources()

    resp = api.client.get("/teams/stinky_steinerts/waivers?limit=3")

    assert resp.status_code == 200
    body = resp.json()
    assert body["team_key"] == "stinky_steinerts"
    assert len(body["options"]) == 1
    option = body["options"][0]
    assert option["add"]["id"] == "fa_rb"
    assert option["drop"]["id"] == "rb2"
    assert option["projected_impact"] == 7.0
    assert api.loaded == [("Stinky Steinerts", body["week"])]


def test_startup_creates_table_at_configured_path(api, prefs_db):
    assert prefs_db.exists()
