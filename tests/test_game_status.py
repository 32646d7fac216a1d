# tests/test_game_status.py

from fakes import WEEK, player

from game_status import GameStatusTable, classify_locks


def test_final_games_lock_players():
    roster = [
        player("qb1", "QB", starter=True, team="KC"),
        player("rb1", "RB", starter=True, team="DAL"),
        player("rb2", "RB", team=None),
    ]
    status = GameStatusTable(week=WEEK, final_teams={"kc"})

    assert classify_locks(roster, WEEK, status) == frozenset({"qb1"})


def test_other_weeks_are_unknown():
    status = GameStatusTable(week=WEEK, final_teams={"KC"}, bye_teams={"SEA"})

    assert status.is_game_final("KC", WEEK)
    assert not status.is_game_final("KC", WEEK + 1)
    assert not status.is_on_bye("SEA", WEEK - 1)
    assert not status.is_on_bye(None, WEEK)
