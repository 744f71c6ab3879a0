import os, sys
import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))
from boxcricket.scoring import Ball, bonus_runs, get_bonus_policy, illegal_streak
from boxcricket.scoring.illegal_delivery import classic_bonus


def _ball(is_wide=False, is_no_ball=False, runs=0):
    return Ball(0, 1, "s", "n", "b", runs=runs, is_wide=is_wide, is_no_ball=is_no_ball)


def _bonuses(deliveries, policy=None):
    history, out = [], []
    for kind, runs in deliveries:
        illegal = kind in ("wide", "noBall")
        out.append(bonus_runs(history, illegal, policy) + runs)
        history.append(
            _ball(is_wide=kind == "wide", is_no_ball=kind == "noBall", runs=runs)
        )
    return out


def test_two_wides_second_earns_bonus():
    assert _bonuses([("wide", 0), ("wide", 0)]) == [0, 1]


def test_mixed_illegal_streak_keeps_bonus():
    assert _bonuses([("wide", 0), ("noBall", 0), ("wide", 0)]) == [0, 1, 1]


def test_legal_ball_breaks_streak_and_earns_nothing():
    assert _bonuses([("wide", 0), ("run", 4)]) == [0, 4]
    assert _bonuses([("wide", 0), ("run", 0), ("wide", 0)]) == [0, 0, 0]


def test_illegal_streak_counts_from_the_end():
    history = [_ball(is_wide=True), _ball(), _ball(is_no_ball=True), _ball(is_wide=True)]
    assert illegal_streak(history) == 2
    assert illegal_streak([]) == 0


def test_classic_policy_bonus_on_every_illegal_delivery():
    assert _bonuses([("wide", 0), ("wide", 0), ("run", 1)], classic_bonus) == [1, 1, 1]


def test_get_bonus_policy_by_name():
    assert get_bonus_policy("classic") is classic_bonus
    assert get_bonus_policy(None)(1) == 0
    assert get_bonus_policy(" BOX ")(2) == 1
    with pytest.raises(ValueError, match="unknown bonus policy"):
        get_bonus_policy("generous")


def test_tracer_sees_streak():
    events = []
    bonus_runs([_ball(is_wide=True)], True, tracer=lambda e, f: events.append((e, dict(f))))
    assert events == [("illegal_streak", {"before": 1, "new_streak": 2, "bonus": 1})]
