# backend/scoreforge/routers/matches.py
from typing import Awaitable

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..exceptions import MatchNotFound, scoring_problem
from ..models import Match
from ..schemas import (
    InitIn,
    MatchCreate,
    MatchIdOut,
    MatchOut,
    PointIn,
    ScoringOut,
    ServerIn,
    VersionIn,
)
from ..scoring.errors import ScoringError
from ..scoring.scorelog import format_score
from ..services import live_scoring
from ..services.live_scoring import ScoringOutcome
from ..time_utils import coerce_utc

# Resource-only prefix; versioning is added in main.py
router = APIRouter(prefix="/matches", tags=["matches"])


def _scoring_out(m: Match) -> ScoringOut | None:
    state = live_scoring.state_for_match(m)
    if state is None:
        return None
    mode = live_scoring.mode_for_match(m)
    return ScoringOut(
        **state.to_dict(include_history=False),
        score=format_score(state, mode.kind, getattr(mode, "use_advantage", True)),
    )


def _match_out(m: Match) -> MatchOut:
    return MatchOut(
        id=m.id,
        sport=m.sport_id,
        rulesetId=m.ruleset_id,
        status=m.status,
        winnerSide=m.winner_side,
        createdAt=coerce_utc(m.created_at),
        completedAt=coerce_utc(m.completed_at),
        config=m.scoring_config,
        scoring=_scoring_out(m),
    )


async def _run(call: Awaitable[ScoringOutcome]) -> MatchOut:
    try:
        outcome = await call
    except ScoringError as exc:
        raise scoring_problem(exc)
    return _match_out(outcome.match)


# POST /api/v0/matches
@router.post("", response_model=MatchIdOut)
async def create_match(
    body: MatchCreate,
    session: AsyncSession = Depends(get_session),
):
    try:
        m = await live_scoring.create_match(
            session, body.sport, config=body.config, ruleset_id=body.rulesetId
        )
    except ScoringError as exc:
        raise scoring_problem(exc)
    return MatchIdOut(id=m.id)


# GET /api/v0/matches/{mid}
@router.get("/{mid}", response_model=MatchOut)
async def get_match(mid: str, session: AsyncSession = Depends(get_session)):
    m = await session.get(Match, mid)
    if m is None:
        raise MatchNotFound(mid)
    return _match_out(m)


# POST /api/v0/matches/{mid}/scoring/init
@router.post("/{mid}/scoring/init", response_model=MatchOut)
async def init_scoring(
    mid: str,
    body: InitIn,
    session: AsyncSession = Depends(get_session),
):
    return await _run(live_scoring.initialize_match(session, mid, body.first_server))


# POST /api/v0/matches/{mid}/scoring/points
@router.post("/{mid}/scoring/points", response_model=MatchOut)
async def score_point(
    mid: str,
    body: PointIn,
    session: AsyncSession = Depends(get_session),
):
    return await _run(
        live_scoring.record_point(session, mid, body.side, body.version)
    )


# POST /api/v0/matches/{mid}/scoring/aces
@router.post("/{mid}/scoring/aces", response_model=MatchOut)
async def score_ace(
    mid: str,
    body: VersionIn,
    session: AsyncSession = Depends(get_session),
):
    return await _run(live_scoring.record_ace(session, mid, body.version))


# POST /api/v0/matches/{mid}/scoring/faults
@router.post("/{mid}/scoring/faults", response_model=MatchOut)
async def score_fault(
    mid: str,
    body: VersionIn,
    session: AsyncSession = Depends(get_session),
):
    return await _run(live_scoring.record_fault(session, mid, body.version))


# POST /api/v0/matches/{mid}/scoring/undo
@router.post("/{mid}/scoring/undo", response_model=MatchOut)
async def undo_last(
    mid: str,
    body: VersionIn,
    session: AsyncSession = Depends(get_session),
):
    return await _run(live_scoring.undo(session, mid, body.version))


# PUT /api/v0/matches/{mid}/scoring/server
@router.put("/{mid}/scoring/server", response_model=MatchOut)
async def correct_server(
    mid: str,
    body: ServerIn,
    session: AsyncSession = Depends(get_session),
):
    return await _run(
        live_scoring.correct_server(session, mid, body.side, body.version)
    )


# GET /api/v0/matches/{mid}/scoring/log.csv
@router.get("/{mid}/scoring/log.csv")
async def scoring_log_csv(mid: str, session: AsyncSession = Depends(get_session)):
    text = await live_scoring.export_scoring_log(session, mid)
    return Response(
        content=text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="match-{mid}-log.csv"'},
    )
