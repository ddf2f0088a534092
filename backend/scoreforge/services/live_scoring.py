"""Storage boundary for live scoring.

Each call loads the match, runs the pure engine and writes the new state back
with a conditional ``UPDATE ... WHERE scoring_version = :expected``. If another
scorer got there first the update touches no rows and ``VersionConflict`` is
raised; nothing is retried. The scoring log row is written in the same
transaction as the state.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import MatchNotFound, RuleSetNotFound
from ..models import Match, RuleSet, ScoringLog, Sport
from ..scoring import SPORTS, engine, mode_for_sport
from ..scoring.engine import ScoringResult
from ..scoring.errors import (
    AlreadyInitialized,
    InvalidScoringMode,
    ScoringNotInitialized,
    VersionConflict,
)
from ..scoring.modes import AnyMode
from ..scoring.scorelog import ScoringLogEntry, export_csv
from ..scoring.state import ScoringState
from ..time_utils import coerce_utc, utcnow
from . import lifecycle
from .validation import merge_configs, validate_scoring_config

logger = logging.getLogger(__name__)


class ScoringOutcome(NamedTuple):
    match: Match
    state: ScoringState
    completed: bool
    reopened: bool
    log_entry: ScoringLogEntry


def mode_for_match(m: Match) -> AnyMode:
    return mode_for_sport(m.sport_id, m.scoring_config)


def state_for_match(m: Match) -> Optional[ScoringState]:
    if m.scoring_state is None:
        return None
    return ScoringState.from_dict(m.scoring_state)


async def _load_match(session: AsyncSession, match_id: str) -> Match:
    m = await session.get(Match, match_id, populate_existing=True)
    if m is None:
        raise MatchNotFound(match_id)
    return m


async def create_match(
    session: AsyncSession,
    sport_id: str,
    *,
    config: Optional[Dict[str, Any]] = None,
    ruleset_id: Optional[str] = None,
    match_id: Optional[str] = None,
) -> Match:
    """Create a scheduled match with its scoring mode frozen from the config.

    Options from the ruleset (if any) are applied first, then ``config``.
    """

    base: Optional[Dict[str, Any]] = None
    if ruleset_id is not None:
        rs = await session.get(RuleSet, ruleset_id)
        if rs is None:
            raise RuleSetNotFound(ruleset_id)
        if rs.sport_id != sport_id:
            raise InvalidScoringMode(
                f"ruleset '{ruleset_id}' belongs to sport '{rs.sport_id}'"
            )
        base = rs.config

    mode = validate_scoring_config(sport_id, merge_configs(base, config))

    if await session.get(Sport, sport_id) is None:
        session.add(Sport(id=sport_id, name=SPORTS[sport_id].NAME))
        await session.flush()

    m = Match(
        id=match_id or uuid.uuid4().hex,
        sport_id=sport_id,
        ruleset_id=ruleset_id,
        scoring_config=mode.to_config(),
        status="scheduled",
    )
    session.add(m)
    await session.commit()
    await session.refresh(m)
    logger.info("Created %s match %s", sport_id, m.id)
    return m


async def _persist(
    session: AsyncSession,
    m: Match,
    expected_version: Optional[int],
    result: ScoringResult,
) -> ScoringOutcome:
    state = result.state
    entry = result.log_entry

    values: Dict[str, Any] = {
        "scoring_state": state.to_dict(),
        "scoring_version": state.version,
        "status": "completed" if state.is_complete else "live",
        "winner_side": state.winning_side,
    }
    if result.completed:
        values["completed_at"] = entry.timestamp
    elif not state.is_complete:
        values["completed_at"] = None

    if expected_version is None:
        guard = Match.scoring_version.is_(None)
    else:
        guard = Match.scoring_version == expected_version
    stmt = (
        update(Match)
        .where(Match.id == m.id, guard)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    res = await session.execute(stmt)
    if res.rowcount != 1:
        await session.rollback()
        if expected_version is None:
            raise AlreadyInitialized()
        logger.warning(
            "Scoring version conflict on match %s (expected %s)",
            m.id,
            expected_version,
        )
        raise VersionConflict(expected_version)

    session.add(
        ScoringLog(
            id=uuid.uuid4().hex,
            match_id=m.id,
            version=entry.version,
            action=entry.action,
            side=entry.side,
            score_before=entry.score_before,
            score_after=entry.score_after,
            details=dict(entry.details),
            created_at=entry.timestamp,
        )
    )
    await session.commit()
    await session.refresh(m)

    logger.debug(
        "Match %s: %s -> version %s (%s)",
        m.id,
        entry.action,
        entry.version,
        entry.score_after,
    )
    if result.completed:
        logger.info("Match %s completed; winner side %s", m.id, state.winning_side)
        await lifecycle.notify_completed(m)
    elif result.reopened:
        logger.info("Match %s reopened by undo", m.id)
        await lifecycle.notify_reopened(m)

    return ScoringOutcome(m, state, result.completed, result.reopened, entry)


async def initialize_match(
    session: AsyncSession,
    match_id: str,
    first_server: int,
    *,
    now: Optional[datetime] = None,
) -> ScoringOutcome:
    m = await _load_match(session, match_id)
    result = engine.initialize(
        mode_for_match(m), first_server, state_for_match(m), now=now
    )
    outcome = await _persist(session, m, None, result)
    logger.info("Initialized scoring for match %s; side %s serves", m.id, first_server)
    return outcome


async def _apply(
    session: AsyncSession,
    match_id: str,
    expected_version: int,
    op: Callable[[ScoringState, AnyMode], ScoringResult],
) -> ScoringOutcome:
    m = await _load_match(session, match_id)
    state = state_for_match(m)
    if state is None:
        raise ScoringNotInitialized()
    try:
        result = op(state, mode_for_match(m))
    except VersionConflict:
        logger.warning(
            "Scoring version conflict on match %s (expected %s, current %s)",
            m.id,
            expected_version,
            state.version,
        )
        raise
    return await _persist(session, m, expected_version, result)


async def record_point(
    session: AsyncSession,
    match_id: str,
    side: int,
    expected_version: int,
    *,
    now: Optional[datetime] = None,
) -> ScoringOutcome:
    return await _apply(
        session,
        match_id,
        expected_version,
        lambda s, mode: engine.apply_point(s, mode, side, expected_version, now=now),
    )


async def record_ace(
    session: AsyncSession,
    match_id: str,
    expected_version: int,
    *,
    now: Optional[datetime] = None,
) -> ScoringOutcome:
    return await _apply(
        session,
        match_id,
        expected_version,
        lambda s, mode: engine.score_ace(s, mode, expected_version, now=now),
    )


async def record_fault(
    session: AsyncSession,
    match_id: str,
    expected_version: int,
    *,
    now: Optional[datetime] = None,
) -> ScoringOutcome:
    return await _apply(
        session,
        match_id,
        expected_version,
        lambda s, mode: engine.score_fault(s, mode, expected_version, now=now),
    )


async def correct_server(
    session: AsyncSession,
    match_id: str,
    side: int,
    expected_version: int,
    *,
    now: Optional[datetime] = None,
) -> ScoringOutcome:
    return await _apply(
        session,
        match_id,
        expected_version,
        lambda s, mode: engine.set_server(s, mode, side, expected_version, now=now),
    )


async def undo(
    session: AsyncSession,
    match_id: str,
    expected_version: int,
    *,
    now: Optional[datetime] = None,
) -> ScoringOutcome:
    return await _apply(
        session,
        match_id,
        expected_version,
        lambda s, mode: engine.undo_last_point(s, mode, expected_version, now=now),
    )


async def get_scoring_log(session: AsyncSession, match_id: str) -> List[ScoringLogEntry]:
    await _load_match(session, match_id)
    rows = (
        await session.execute(
            select(ScoringLog)
            .where(ScoringLog.match_id == match_id)
            .order_by(ScoringLog.version)
        )
    ).scalars().all()
    return [
        ScoringLogEntry(
            action=r.action,
            side=r.side,
            version=r.version,
            score_before=r.score_before,
            score_after=r.score_after,
            timestamp=coerce_utc(r.created_at) or utcnow(),
            details=dict(r.details or {}),
        )
        for r in rows
    ]


async def export_scoring_log(session: AsyncSession, match_id: str) -> str:
    return export_csv(await get_scoring_log(session, match_id))
