import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import scorecard_cache
from ..db import get_session
from ..exceptions import InvalidBall
from ..schemas import (
    BallOut,
    InningsCompletionOut,
    InningsStatusOut,
    PlayerStatsOut,
    RecordBallIn,
    RecordBallOut,
    ScorecardOut,
    ScoreOut,
    UndoBallOut,
)
from ..scoring import ValidationError
from ..services import scoring
from .streams import broadcast

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/matches", tags=["balls"])


# POST /api/v0/matches/{mid}/innings/{iid}/balls
@router.post(
    "/{mid}/innings/{iid}/balls",
    response_model=RecordBallOut,
    status_code=201,
)
async def record_ball(
    mid: str,
    iid: str,
    body: RecordBallIn,
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
    session: AsyncSession = Depends(get_session),
):
    try:
        result = await scoring.record_ball(
            session,
            mid,
            iid,
            body.crease(),
            body.ball_input(),
            operation_id=idempotency_key or None,
        )
    except ValidationError as exc:
        logger.info("Rejected ball for innings %s: %s", iid, exc.detail)
        raise InvalidBall(exc.detail) from exc

    out = RecordBallOut.from_result(result)
    await scorecard_cache.invalidate_match(mid)
    await broadcast(
        mid,
        {
            "event": "ball",
            "inningsId": iid,
            "ball": out.ball.model_dump(mode="json", by_alias=True),
            "score": out.updated_score.model_dump(by_alias=True),
        },
    )
    return out


# DELETE /api/v0/matches/{mid}/innings/{iid}/balls/last
@router.delete(
    "/{mid}/innings/{iid}/balls/last", response_model=UndoBallOut
)
async def undo_last_ball(
    mid: str,
    iid: str,
    ball_id: Optional[str] = Query(default=None, alias="ballId"),
    session: AsyncSession = Depends(get_session),
):
    result = await scoring.undo_last_ball(session, mid, iid, ball_id=ball_id or None)
    out = UndoBallOut.from_result(result)
    if result.deleted_ball is not None:
        await scorecard_cache.invalidate_match(mid)
        await broadcast(
            mid,
            {
                "event": "undo",
                "inningsId": iid,
                "ballId": result.deleted_ball.id,
                "score": out.updated_score.model_dump(by_alias=True),
            },
        )
    return out


# POST /api/v0/matches/{mid}/innings/{iid}/complete
@router.post(
    "/{mid}/innings/{iid}/complete",
    response_model=InningsCompletionOut,
)
async def complete_innings(
    mid: str, iid: str, session: AsyncSession = Depends(get_session)
):
    completion = await scoring.complete_innings(session, mid, iid)
    await scorecard_cache.invalidate_match(mid)
    out = InningsCompletionOut(
        innings_id=completion.innings_id,
        status=completion.status,
        second_innings_started=completion.second_innings_started,
        match_completed=completion.match_completed,
        winner=completion.winner,
        man_of_match_id=completion.man_of_match_id,
    )
    await broadcast(
        mid, {"event": "innings_completed", **out.model_dump(by_alias=True)}
    )
    return out


# GET /api/v0/matches/{mid}/innings/{iid}/scorecard
@router.get(
    "/{mid}/innings/{iid}/scorecard", response_model=ScorecardOut
)
async def get_scorecard(
    mid: str, iid: str, session: AsyncSession = Depends(get_session)
):
    async def load() -> ScorecardOut:
        card = await scoring.get_scorecard(session, mid, iid)
        return ScorecardOut(
            match_id=card.match_id,
            innings_id=card.innings_id,
            innings_number=card.innings_number,
            status=card.status,
            score=ScoreOut.from_score(card.score),
            balls=[BallOut.from_ball(b) for b in card.balls],
            players=[
                PlayerStatsOut.from_stats(pid, stats)
                for pid, stats in sorted(card.stats_by_player.items())
            ],
            innings_status=InningsStatusOut.from_status(card.innings_status),
        )

    return await scorecard_cache.get_or_load((mid, iid), load)
