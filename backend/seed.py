import asyncio
import os
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from scoreforge.db import _normalize_url
from scoreforge.models import Sport, RuleSet
from scoreforge.scoring import SPORTS
from scoreforge.services.validation import validate_scoring_config

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL environment variable is required")
DATABASE_URL = _normalize_url(DATABASE_URL)

engine = create_async_engine(DATABASE_URL, echo=False, pool_pre_ping=True)
Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

RULESETS = [
    ("tennis-standard", "tennis", "Tennis standard", {"tiebreakTo": 7, "sets": 3}),
    (
        "tennis-super-tiebreak",
        "tennis",
        "Tennis with match tiebreak",
        {"sets": 3, "useMatchTiebreak": True, "matchTiebreakPoints": 10},
    ),
    (
        "tennis-fast4",
        "tennis",
        "Fast4",
        {"sets": 3, "gamesPerSet": 4, "tiebreakAt": 3, "tiebreakTo": 5, "useAdvantage": False},
    ),
    ("padel-default", "padel", "Padel default", {"goldenPoint": False, "tiebreakTo": 7, "sets": 3}),
    ("padel-golden", "padel", "Padel golden point", {"goldenPoint": True, "tiebreakTo": 7, "sets": 3}),
    ("volleyball-indoor", "volleyball", "Indoor volleyball", {"bestOf": 5, "pointsTo": 25, "decidingSetPointsTo": 15}),
    ("volleyball-beach", "volleyball", "Beach volleyball", {"bestOf": 3, "pointsTo": 21, "decidingSetPointsTo": 15}),
    ("badminton-standard", "badminton", "Badminton standard", {"pointsTo": 21, "winBy": 2, "bestOf": 3, "maxPoint": 30}),
    ("table-tennis-standard", "table_tennis", "Table tennis standard", {"pointsTo": 11, "winBy": 2, "bestOf": 5}),
]

async def main():
    async with Session() as s:
        existing = (await s.execute(select(Sport))).scalars().all()
        have = {x.id for x in existing}
        for sid, preset in SPORTS.items():
            if sid not in have:
                s.add(Sport(id=sid, name=preset.NAME))
        await s.commit()

        existing_rs = {
            x.id for x in (await s.execute(select(RuleSet))).scalars().all()
        }
        for rid, sport_id, name, config in RULESETS:
            validate_scoring_config(sport_id, config)
            if rid not in existing_rs:
                s.add(RuleSet(id=rid, sport_id=sport_id, name=name, config=config))
        await s.commit()

if __name__ == "__main__":
    asyncio.run(main())
