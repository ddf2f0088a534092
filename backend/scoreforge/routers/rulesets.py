# backend/scoreforge/routers/rulesets.py
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from ..db import get_session
from ..exceptions import RuleSetNotFound, scoring_problem
from ..models import RuleSet, Sport
from ..schemas import RuleSetOut, RuleSetCreate
from ..scoring import SPORTS
from ..scoring.errors import ScoringError
from ..services.validation import validate_scoring_config

# Resource-only prefix
router = APIRouter(prefix="/rulesets", tags=["rulesets"])

# GET /api/v0/rulesets?sport=tennis
@router.get("", response_model=list[RuleSetOut])
async def list_rulesets(
    sport: str = Query(..., description="Sport id, e.g. 'tennis' or 'volleyball'"),
    session: AsyncSession = Depends(get_session),
):
    rows = (await session.execute(select(RuleSet).where(RuleSet.sport_id == sport))).scalars().all()
    return [RuleSetOut(id=r.id, sport_id=r.sport_id, name=r.name, config=r.config) for r in rows]


@router.post("", response_model=RuleSetOut)
async def create_ruleset(
    body: RuleSetCreate,
    session: AsyncSession = Depends(get_session),
):
    try:
        validate_scoring_config(body.sport_id, body.config)
    except ScoringError as exc:
        raise scoring_problem(exc)

    if await session.get(Sport, body.sport_id) is None:
        session.add(Sport(id=body.sport_id, name=SPORTS[body.sport_id].NAME))
        await session.flush()

    rid = uuid.uuid4().hex
    r = RuleSet(id=rid, sport_id=body.sport_id, name=body.name, config=body.config)
    session.add(r)
    await session.commit()
    return RuleSetOut(id=rid, sport_id=body.sport_id, name=body.name, config=body.config)


@router.delete("/{ruleset_id}", status_code=204)
async def delete_ruleset(
    ruleset_id: str,
    session: AsyncSession = Depends(get_session),
):
    r = await session.get(RuleSet, ruleset_id)
    if not r:
        raise RuleSetNotFound(ruleset_id)
    await session.delete(r)
    await session.commit()
    return Response(status_code=204)
