from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..models import Sport
from ..schemas import SportOut
from ..scoring import SPORTS

router = APIRouter(prefix="/sports", tags=["sports"])


def _sport_name(sport_id: str, provided_name: str | None) -> str:
    if provided_name:
        normalized = provided_name.strip()
        if normalized:
            return normalized
    return SPORTS[sport_id].NAME


# GET /api/v0/sports
@router.get("", response_model=list[SportOut])
async def list_sports(session: AsyncSession = Depends(get_session)) -> list[SportOut]:
    rows = (await session.execute(select(Sport))).scalars().all()

    names = {sport_id: preset.NAME for sport_id, preset in SPORTS.items()}
    for sport in rows:
        # Sports stored without a scoring preset cannot be scored live.
        if sport.id in SPORTS:
            names[sport.id] = _sport_name(sport.id, sport.name)

    # Return a deterministic ordering for consumers
    ordered = sorted(names.items(), key=lambda item: (item[1].lower(), item[0]))

    return [
        SportOut(
            id=sport_id,
            name=name,
            kind=SPORTS[sport_id].KIND,
            defaultConfig=dict(SPORTS[sport_id].DEFAULT_CONFIG),
        )
        for sport_id, name in ordered
    ]
