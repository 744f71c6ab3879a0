import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from boxcricket.scoring import InningsScore
from boxcricket.services import innings_status, max_wickets


def test_max_wickets_never_negative():
    assert max_wickets(6) == 5
    assert max_wickets(1) == 0
    assert max_wickets(0) == 0


def test_all_out():
    status = innings_status(
        InningsScore(total_runs=20, wickets=2), total_overs=6, batting_side_size=3
    )
    assert status.is_all_out is True
    assert status.can_complete_innings is True
    assert status.is_overs_complete is False


def test_overs_complete():
    status = innings_status(InningsScore(overs=6), total_overs=6, batting_side_size=5)
    assert status.is_overs_complete is True
    assert status.can_complete_innings is True


def test_target_only_in_second_innings():
    score = InningsScore(total_runs=31)
    first = innings_status(
        score, total_overs=6, batting_side_size=5, first_innings_total=30
    )
    assert first.is_target_reached is False

    second = innings_status(
        score,
        total_overs=6,
        batting_side_size=5,
        innings_number=2,
        first_innings_total=30,
    )
    assert second.is_target_reached is True

    level = innings_status(
        InningsScore(total_runs=30),
        total_overs=6,
        batting_side_size=5,
        innings_number=2,
        first_innings_total=30,
    )
    assert level.is_target_reached is False
    assert level.can_complete_innings is False


def test_completed_innings_cannot_complete_again():
    status = innings_status(
        InningsScore(overs=6), total_overs=6, batting_side_size=5, completed=True
    )
    assert status.is_overs_complete is True
    assert status.can_complete_innings is False
