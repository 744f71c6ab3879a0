from __future__ import annotations

from dataclasses import fields
from typing import Dict, Iterable, Mapping, Optional

from ..scoring.overs import BALLS_PER_OVER
from ..scoring.types import PlayerStats

# points per unit of each contribution
RUN_POINTS = 1.0
STRIKE_RATE_POINTS = 0.3  # per strike-rate point above 100
WICKET_POINTS = 20.0
ECONOMY_BASELINE = 24.0
ECONOMY_POINTS = 0.8  # per run an over below the baseline
DISMISSAL_POINTS = 8.0  # catch, stumping or run out


def merge_stats(innings_stats: Iterable[Mapping[str, PlayerStats]]) -> Dict[str, PlayerStats]:
    """Sum per-innings stats into one line per player for the whole match."""
    merged: Dict[str, PlayerStats] = {}
    for stats_by_player in innings_stats:
        for player_id, stats in stats_by_player.items():
            total = merged.setdefault(player_id, PlayerStats())
            for f in fields(PlayerStats):
                setattr(total, f.name, getattr(total, f.name) + getattr(stats, f.name))
    return merged


def impact_score(stats: PlayerStats) -> float:
    """Weigh batting, bowling and fielding into one number."""
    batting = stats.runs * RUN_POINTS
    if stats.balls_faced > 0:
        strike_rate = stats.runs / stats.balls_faced * 100
        batting += (strike_rate - 100) * STRIKE_RATE_POINTS

    bowling = stats.wickets * WICKET_POINTS
    if stats.balls_bowled > 0:
        economy = stats.runs_conceded / (stats.balls_bowled / BALLS_PER_OVER)
        bowling += (ECONOMY_BASELINE - economy) * ECONOMY_POINTS

    fielding = (stats.catches + stats.stumpings + stats.run_outs) * DISMISSAL_POINTS
    return batting + bowling + fielding


def man_of_the_match(stats_by_player: Mapping[str, PlayerStats]) -> Optional[str]:
    """Return the player with the highest impact score, or ``None`` if nobody played.

    Players are compared in id order and the first to reach the best score
    keeps it, so ties are settled the same way on every call.
    """
    best_id: Optional[str] = None
    best_score = float("-inf")
    for player_id in sorted(stats_by_player):
        score = impact_score(stats_by_player[player_id])
        if score > best_score:
            best_id, best_score = player_id, score
    return best_id
