# tests/test_waivers.py

from fakes import WEEK, YEAR, FakeAvailable, free_agent, player

from models import ScoringFormat
from waivers import recommend_waivers, weakest_player


def _roster():
    return [
        player("rb1", "RB", starter=True),
        player("rb2", "RB"),
        player("rb_ir", "RB", slot="IR"),
        player("wr1", "WR", starter=True),
    ]


PROJECTIONS = {"rb1": 12.0, "rb2": 6.0, "rb_ir": 1.0, "wr1": 10.0}


def test_weakest_player_ignores_ir():
    drop, points = weakest_player(_roster(), "RB", PROJECTIONS)
    assert drop.player_id == "rb2"
    assert points == 6.0


def test_weakest_player_none_when_position_empty():
    assert weakest_player(_roster(), "TE", PROJECTIONS) is None


def test_only_clear_upgrades_are_suggested():
    available = FakeAvailable(
        {
            "RB": [free_agent("fa_rb1", "RB", 9.5), free_agent("fa_rb2", "RB", 9.0)],
            "WR": [free_agent("fa_wr", "WR", 20.0)],
        }
    )

    recs = recommend_waivers(_roster(), PROJECTIONS, available, WEEK, YEAR, 5, ScoringFormat.PPR)

    assert [r.player_to_add.player_id for r in recs] == ["fa_wr", "fa_rb1"]
    assert recs[0].player_to_drop.player_id == "wr1"
    assert recs[0].projected_impact == 10.0
    assert recs[0].reason == "Projected +10.0 pts over Wr1"
    assert recs[1].player_to_drop.player_id == "rb2"
    assert recs[1].projected_points_drop == 6.0


def test_limit_and_positions_queried():
    available = FakeAvailable(
        {
            "RB": [free_agent("fa_rb1", "RB", 9.5)],
            "WR": [free_agent("fa_wr", "WR", 20.0)],
        }
    )

    recs = recommend_waivers(_roster(), PROJECTIONS, available, WEEK, YEAR, 1, ScoringFormat.PPR)

    assert [r.player_to_add.player_id for r in recs] == ["fa_wr"]
    # QB / TE have nobody to drop, so they are never looked up
    assert [c[0] for c in available.calls] == ["RB", "WR"]
    assert all(c[3] == 10 for c in available.calls)
