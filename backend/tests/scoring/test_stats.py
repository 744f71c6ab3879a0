import os, sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))
from boxcricket.scoring import Ball, WicketType, replay_stats


def _over(bowler, over_number, runs=(0, 0, 0, 0, 0, 0)):
    return [
        Ball(over_number, n, "s", "n", bowler, runs=r) for n, r in enumerate(runs, start=1)
    ]


def test_replay_is_deterministic():
    log = _over("b1", 0, (1, 4, 0, 6, 2, 1)) + [Ball(1, 0, "s", "n", "b2", is_wide=True)]
    first = replay_stats(log)
    second = replay_stats(list(log))
    assert first == second
    assert first.total_runs == 14


def test_batting_and_bowling_counters():
    log = _over("b1", 0, (4, 6, 0, 1, 0, 0))
    log.append(Ball(1, 0, "s", "n", "b2", runs=1, is_no_ball=True))
    log.append(Ball(1, 0, "s", "n", "b2", is_wide=True))
    stats = replay_stats(log).stats_by_player

    assert stats["s"].runs == 12
    assert stats["s"].fours == 1
    assert stats["s"].sixes == 1
    # a no-ball is faced, a wide is not
    assert stats["s"].balls_faced == 7
    assert stats["b1"].balls_bowled == 6
    assert stats["b1"].runs_conceded == 11
    assert stats["b2"].balls_bowled == 0
    assert stats["b2"].no_balls == 1
    assert stats["b2"].wides == 1
    assert stats["b2"].runs_conceded == 1


def test_maiden_is_any_bowler_over_without_runs():
    log = _over("b1", 0) + _over("b2", 1, (0, 0, 0, 0, 0, 1)) + _over("b1", 2)[:3]
    stats = replay_stats(log).stats_by_player
    # over 2 is still in progress and counts as well
    assert stats["b1"].maidens == 2
    assert stats["b2"].maidens == 0


def test_first_illegal_delivery_keeps_maiden():
    log = _over("b1", 0)[:3] + [Ball(0, 3, "s", "n", "b1", is_wide=True)]
    assert replay_stats(log).stats_by_player["b1"].maidens == 1

    log.append(Ball(0, 3, "s", "n", "b1", runs=1, is_wide=True))
    assert replay_stats(log).stats_by_player["b1"].maidens == 0


def test_run_out_credits_fielder_not_bowler():
    log = [
        Ball(0, 1, "s", "n", "b", runs=1, is_wicket=True, wicket_type=WicketType.RUN_OUT,
             fielder_id="f", dismissed_batsman_id="n"),
    ]
    replay = replay_stats(log)
    assert replay.wickets == 1
    assert replay.stats_by_player["f"].run_outs == 1
    assert replay.stats_by_player["b"].wickets == 0


def test_caught_credits_fielder_and_bowler():
    log = [
        Ball(0, 1, "s", "n", "b", is_wicket=True, wicket_type=WicketType.CAUGHT,
             fielder_id="f", dismissed_batsman_id="s"),
        Ball(0, 2, "t", "n", "b", is_wicket=True, wicket_type=WicketType.CAUGHT_AND_BOWLED,
             dismissed_batsman_id="t"),
        Ball(0, 3, "u", "n", "b", is_wicket=True, wicket_type=WicketType.STUMPED,
             fielder_id="k", dismissed_batsman_id="u"),
    ]
    stats = replay_stats(log).stats_by_player
    assert stats["f"].catches == 1
    assert stats["b"].catches == 1
    assert stats["b"].wickets == 3
    assert stats["k"].stumpings == 1


def test_empty_log():
    replay = replay_stats([])
    assert (replay.total_runs, replay.wickets, replay.stats_by_player) == (0, 0, {})
