# tests/test_espn_adapter.py

from types import SimpleNamespace

from espn_adapter import EspnAvailablePlayers, EspnTeamSource
from fakes import FakeProjections, ppr_table
from models import ScoringFormat

WEEK = 14


def _espn_player(pid, name, position, team, slot, schedule=None):
    return SimpleNamespace(
        playerId=pid,
        name=name,
        position=position,
        proTeam=team,
        lineupSlot=slot,
        schedule=schedule if schedule is not None else {WEEK: {"team": "OPP"}},
    )


def _box_player(pid, team, game_played, points=0.0, on_bye=False):
    return SimpleNamespace(
        playerId=pid,
        proTeam=team,
        game_played=game_played,
        points=points,
        on_bye_week=on_bye,
    )


class FakeLeague:
    def __init__(self):
        self.teams = [
            SimpleNamespace(team_name="Somebody Else", roster=[]),
            SimpleNamespace(
                team_name="Can't Teach Matchups",
                roster=[
                    _espn_player(1, "Jordan Love", "QB", "GB", "QB"),
                    _espn_player(2, "Kenneth Walker III", "RB", "SEA", "RB"),
                    _espn_player(3, "Seahawks D/ST", "D/ST", "SEA", "BE"),
                    _espn_player(4, "Tank Dell", "WR", "HOU", "BE", schedule={13: {}}),
                    _espn_player(5, "Hurt Guy", "TE", "NYJ", "IR"),
                ],
            ),
        ]
        self.settings = SimpleNamespace(
            position_slot_counts={"QB": 1, "RB": 2, "RB/WR/TE": 1, "D/ST": 1, "BE": 5, "IR": 0}
        )
        self.free_agent_calls = []

    def box_scores(self, week):
        return [
            SimpleNamespace(
                home_lineup=[_box_player(1, "GB", 100, points=22.4)],
                away_lineup=[_box_player(9, "CHI", 100), _box_player(2, "SEA", 0)],
            ),
            SimpleNamespace(home_lineup=[_box_player(7, "MIA", 0, on_bye=True)], away_lineup=[]),
        ]

    def free_agents(self, week, size, position):
        self.free_agent_calls.append((week, size, position))
        return [
            SimpleNamespace(playerId=11, name="Puka Nacua", position="WR", proTeam="LAR"),
            SimpleNamespace(playerId=12, name="No Projection Guy", position="WR", proTeam="LAR"),
            SimpleNamespace(playerId=13, name="Rashee Rice", position="WR", proTeam="KC"),
        ]


def _source():
    cfg = {"team_name_keyword": "teach matchups"}
    return EspnTeamSource(cfg, league=FakeLeague())


def test_fetch_roster_maps_players():
    roster = {p.player_id: p for p in _source().fetch_roster(WEEK)}

    love = roster["1"]
    assert love.is_starter and love.current_slot == "QB"
    assert love.current_points == 22.4
    assert love.projection_key == "QB:jordan love"

    defense = roster["3"]
    assert defense.position == "DEF"
    assert not defense.is_starter
    assert defense.projection_key == "DEF:seahawks"

    assert roster["2"].current_points is None
    assert not roster["5"].is_starter and roster["5"].current_slot == "IR"


def test_fetch_game_status():
    status = _source().fetch_game_status(WEEK)

    assert status.is_game_final("GB", WEEK)
    assert status.is_game_final("CHI", WEEK)
    assert not status.is_game_final("SEA", WEEK)
    assert status.is_on_bye("MIA", WEEK)
    # no week 14 entry in his schedule
    assert status.is_on_bye("HOU", WEEK)


def test_fetch_slot_labels():
    labels = _source().fetch_slot_labels()

    assert labels.count("RB") == 2
    assert labels.count("BE") == 5
    assert "IR" not in labels
    assert "RB/WR/TE" in labels


def test_slot_labels_missing():
    source = _source()
    source.league.settings = SimpleNamespace()
    assert source.fetch_slot_labels() is None


def test_available_players_ranked_by_projection():
    league = FakeLeague()
    projections = FakeProjections(ppr_table({"WR:puka nacua": 15.0, "WR:rashee rice": 17.5}))
    available = EspnAvailablePlayers(league, projections, pool_size=25)

    top = available.top_available("WR", WEEK, 2025, 5, ScoringFormat.PPR)

    assert [p.name for p in top] == ["Rashee Rice", "Puka Nacua"]
    assert top[0].player_id == "13"
    assert league.free_agent_calls == [(WEEK, 25, "WR")]

    assert len(available.top_available("WR", WEEK, 2025, 1, ScoringFormat.PPR)) == 1
