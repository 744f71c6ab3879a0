"""Replay a ball log into innings totals and per-player statistics.

Everything here is recomputed from the full log on every record and undo.
Nothing is patched incrementally, so the derived numbers cannot drift from the
log they came from.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple

from .dismissal import dismissal_credit
from .tracing import Tracer, emit
from .types import Ball, PlayerStats, StatsReplay


def replay_stats(balls: Iterable[Ball], tracer: Optional[Tracer] = None) -> StatsReplay:
    stats: Dict[str, PlayerStats] = {}
    total_runs = 0
    wickets = 0
    # runs conceded per (bowler, over), including overs still in progress
    bowler_overs: Dict[Tuple[str, int], int] = {}

    def ensure(player_id: str) -> PlayerStats:
        if player_id not in stats:
            stats[player_id] = PlayerStats()
        return stats[player_id]

    count = 0
    for ball in balls:
        count += 1

        bat = ensure(ball.batsman_id)
        # a no-ball can be hit, a wide cannot
        if not ball.is_wide:
            bat.balls_faced += 1
        bat.runs += ball.runs
        if ball.runs == 4:
            bat.fours += 1
        elif ball.runs == 6:
            bat.sixes += 1

        bowl = ensure(ball.bowler_id)
        if ball.is_legal:
            bowl.balls_bowled += 1
        if ball.is_wide:
            bowl.wides += 1
        if ball.is_no_ball:
            bowl.no_balls += 1
        # the streak bonus is already part of ball.runs
        bowl.runs_conceded += ball.runs
        total_runs += ball.runs

        key = (ball.bowler_id, ball.over_number)
        bowler_overs[key] = bowler_overs.get(key, 0) + ball.runs

        if ball.is_wicket:
            wickets += 1
            credit = dismissal_credit(ball.wicket_type, ball.bowler_id, ball.fielder_id)
            if credit.bowler_wicket:
                bowl.wickets += 1
            if credit.catch_by:
                ensure(credit.catch_by).catches += 1
            if credit.run_out_by:
                ensure(credit.run_out_by).run_outs += 1
            if credit.stumping_by:
                ensure(credit.stumping_by).stumpings += 1

    for (bowler_id, _over), runs in sorted(bowler_overs.items()):
        if runs == 0:
            stats[bowler_id].maidens += 1

    emit(tracer, "stats_replayed", balls=count, total_runs=total_runs, wickets=wickets)
    return StatsReplay(total_runs=total_runs, wickets=wickets, stats_by_player=stats)
