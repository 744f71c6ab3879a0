import os, sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))
from boxcricket.scoring import Ball, replay_overs, update_over_progress
from boxcricket.scoring.overs import OverProgress, legal_balls_in_over


def test_illegal_delivery_leaves_count():
    assert update_over_progress(0, 3, False) == OverProgress(0, 3, False)


def test_six_legal_balls_complete_over():
    overs, balls = 0, 0
    for i in range(6):
        progress = update_over_progress(overs, balls, True)
        overs, balls = progress.overs, progress.balls_in_over
        assert progress.over_completed is (i == 5)
    assert (overs, balls) == (1, 0)


def test_replay_ignores_extras():
    log = [Ball(0, n, "s", "n", "b") for n in range(1, 6)]
    log.insert(2, Ball(0, 2, "s", "n", "b", is_wide=True))
    log.append(Ball(0, 5, "s", "n", "b", is_no_ball=True))
    assert replay_overs(log) == OverProgress(0, 5, False)

    log.append(Ball(0, 6, "s", "n", "b"))
    assert replay_overs(log) == OverProgress(1, 0, True)
    assert legal_balls_in_over(log, 0) == 6
    assert legal_balls_in_over(log, 1) == 0
