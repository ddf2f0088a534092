"""Live scoring state machine.

Turns discrete scoring events ("point to side 1", "undo", ...) into derived
game/set/match state for a single match::

    NotStarted -> InProgress(Game) <-> InProgress(Tiebreak) -> Complete

Every operation takes the current :class:`ScoringState` plus the caller's
last observed version and returns a :class:`ScoringResult` holding a *new*
state. The input state is never mutated, so a rejected call leaves nothing
half-applied. The engine does no I/O; persisting the result atomically is
the caller's job (see ``services.live_scoring``).

The scoring transition itself is a per-variant strategy: :class:`TennisRules`
for points -> games -> sets, :class:`RallyRules` for points-race sets. Version
checks, history, completion tracking and the scoring log are shared.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, NamedTuple, Optional

from ..time_utils import utcnow
from . import rotation
from .arithmetic import (
    evaluate_game,
    evaluate_rally_set,
    evaluate_set,
    is_deciding_set,
    match_winner,
    normalize_game_points,
    tiebreak_target,
)
from .errors import (
    AlreadyInitialized,
    InvalidScoringEvent,
    MatchAlreadyComplete,
    NothingToUndo,
    VersionConflict,
)
from .modes import AnyMode, RallyMode, ScoringMode
from .scorelog import ScoringLogEntry, format_score
from .state import ScoringState


class ScoringResult(NamedTuple):
    state: ScoringState
    completed: bool
    reopened: bool
    log_entry: ScoringLogEntry


# ---------------------------------------------------------------------------
# Rule strategies
# ---------------------------------------------------------------------------


class TennisRules:
    """Points -> games -> sets with tiebreaks and optional match tiebreak."""

    def __init__(self, mode: ScoringMode) -> None:
        self.mode = mode

    def begin(self, state: ScoringState) -> None:
        # A one-set match tiebreak format opens straight into the tiebreak.
        mode = self.mode
        if (
            mode.use_match_tiebreak
            and mode.match_tiebreak_trigger == "immediate"
            and is_deciding_set(state.completed_sets, mode.sets_to_win)
        ):
            self._start_tiebreak(state, "match", state.serving_side)

    def score(self, state: ScoringState, side: int) -> None:
        if state.is_tiebreak:
            self._tiebreak_point(state, side)
        else:
            self._game_point(state, side)

    def server_for(self, state: ScoringState, side: int) -> None:
        games_played = sum(state.current_set_games)
        if state.is_tiebreak:
            played = sum(state.current_game_points)
            first = side if rotation.tiebreak_server(side, played) == side else rotation.other(side)
            state.tiebreak_first_server = first
            state.first_server_of_current_set = rotation.game_server(first, games_played)
        else:
            state.first_server_of_current_set = rotation.game_server(side, games_played)
        state.serving_side = side

    # -- standard games -----------------------------------------------------

    def _game_point(self, state: ScoringState, side: int) -> None:
        points = list(state.current_game_points)
        points[side - 1] += 1
        result = evaluate_game(points, self.mode)
        if result.game_won is None:
            state.current_game_points = normalize_game_points(points, self.mode)
            self._check_game_points(state.current_game_points)
            return
        state.current_game_points = [0, 0]
        self._award_game(state, result.game_won)

    def _check_game_points(self, points: list[int]) -> None:
        a, b = points
        if self.mode.use_advantage:
            assert 0 <= a <= 4 and 0 <= b <= 4, f"unreachable game score {points}"
            assert not (a == 4 and b != 3) and not (b == 4 and a != 3), (
                f"unreachable advantage score {points}"
            )
        else:
            assert 0 <= a <= 3 and 0 <= b <= 3, f"unreachable no-ad score {points}"

    def _award_game(self, state: ScoringState, winner: int) -> None:
        games = list(state.current_set_games)
        games[winner - 1] += 1
        state.current_set_games = games
        result = evaluate_set(games, self.mode)

        if result.set_won is not None:
            self._close_set(state, (games[0], games[1]), sum(games))
            return

        due = rotation.game_server(state.first_server_of_current_set, sum(games))
        if result.enter_tiebreak:
            self._start_tiebreak(state, self._tiebreak_kind_at_all(state), due)
            return

        if self.mode.tiebreak_at is not None:
            assert max(games) <= self.mode.games_per_set, f"unreachable set score {games}"
        state.serving_side = due

    def _tiebreak_kind_at_all(self, state: ScoringState) -> str:
        mode = self.mode
        if (
            mode.use_match_tiebreak
            and mode.match_tiebreak_trigger == "tiebreak"
            and is_deciding_set(state.completed_sets, mode.sets_to_win)
        ):
            return "match"
        return "set"

    # -- tiebreaks ----------------------------------------------------------

    def _start_tiebreak(self, state: ScoringState, kind: str, due: int) -> None:
        if kind == "match":
            due = rotation.match_tiebreak_first_server(
                due, state.initial_server, self.mode.match_tiebreak_server
            )
        state.is_tiebreak = True
        state.tiebreak_kind = kind
        state.tiebreak_first_server = due
        state.serving_side = due
        state.current_game_points = [0, 0]

    def _tiebreak_point(self, state: ScoringState, side: int) -> None:
        points = list(state.current_game_points)
        points[side - 1] += 1
        deciding = is_deciding_set(state.completed_sets, self.mode.sets_to_win)
        target = tiebreak_target(self.mode, state.tiebreak_kind or "set", deciding)
        result = evaluate_game(points, self.mode, tiebreak_target=target)
        first = state.tiebreak_first_server
        assert first is not None, "tiebreak without a first server"

        if result.game_won is None:
            state.current_game_points = points
            state.serving_side = rotation.tiebreak_server(first, sum(points))
            return

        winner = result.game_won
        replaces_set = (
            state.tiebreak_kind == "match"
            and self.mode.match_tiebreak_trigger == "immediate"
        )
        state.is_tiebreak = False
        state.tiebreak_kind = None
        state.tiebreak_first_server = None
        state.current_game_points = [0, 0]

        if replaces_set:
            # The deciding set is the match tiebreak itself; record its points.
            self._close_set(state, (points[0], points[1]), 1)
            return

        games = list(state.current_set_games)
        games[winner - 1] += 1
        state.current_set_games = games
        assert evaluate_set(games, self.mode, after_tiebreak=True).set_won == winner
        self._close_set(state, (games[0], games[1]), sum(games))

    # -- sets ---------------------------------------------------------------

    def _close_set(self, state: ScoringState, set_score: tuple[int, int], games_in_set: int) -> None:
        state.completed_sets = state.completed_sets + [set_score]
        state.current_set_games = [0, 0]

        winner = match_winner(state.completed_sets, self.mode.sets_to_win)
        if winner is not None:
            state.is_complete = True
            state.winning_side = winner
            return

        next_first = rotation.next_set_first_server(
            state.first_server_of_current_set, games_in_set
        )
        state.first_server_of_current_set = next_first
        state.serving_side = next_first

        mode = self.mode
        if (
            mode.use_match_tiebreak
            and mode.match_tiebreak_trigger == "immediate"
            and is_deciding_set(state.completed_sets, mode.sets_to_win)
        ):
            self._start_tiebreak(state, "match", next_first)


class RallyRules:
    """Points-race sets: first to N with a minimum lead, optional cap."""

    def __init__(self, mode: RallyMode) -> None:
        self.mode = mode

    def begin(self, state: ScoringState) -> None:
        return None

    def _target(self, deciding: bool) -> int:
        return self.mode.points_per_deciding_set if deciding else self.mode.points_per_set

    def score(self, state: ScoringState, side: int) -> None:
        mode = self.mode
        points = list(state.current_game_points)
        points[side - 1] += 1
        deciding = is_deciding_set(state.completed_sets, mode.sets_to_win)
        set_winner = evaluate_rally_set(points, mode, deciding)

        if set_winner is None:
            if mode.point_cap is not None:
                assert max(points) <= mode.point_cap, f"unreachable rally score {points}"
            state.current_game_points = points
            state.serving_side = self._server(state, side, points, deciding)
            return

        state.current_game_points = [0, 0]
        state.completed_sets = state.completed_sets + [(points[0], points[1])]
        winner = match_winner(state.completed_sets, mode.sets_to_win)
        if winner is not None:
            state.is_complete = True
            state.winning_side = winner
            return

        if mode.service == "winner":
            next_first = side
        else:
            next_first = rotation.other(state.first_server_of_current_set)
        state.first_server_of_current_set = next_first
        state.serving_side = next_first

    def _server(self, state: ScoringState, winner: int, points: list[int], deciding: bool) -> int:
        return rotation.rally_server(
            winner,
            points,
            self.mode.service,
            self.mode.serves_per_turn,
            state.first_server_of_current_set,
            self._target(deciding) - 1,
        )

    def server_for(self, state: ScoringState, side: int) -> None:
        if self.mode.service == "alternate":
            points = state.current_game_points
            deciding = is_deciding_set(state.completed_sets, self.mode.sets_to_win)
            deuce_at = self._target(deciding) - 1
            due = rotation.rally_server(
                side, points, "alternate", self.mode.serves_per_turn, side, deuce_at
            )
            state.first_server_of_current_set = side if due == side else rotation.other(side)
        state.serving_side = side


def rules_for(mode: AnyMode) -> TennisRules | RallyRules:
    if isinstance(mode, RallyMode):
        return RallyRules(mode)
    return TennisRules(mode)


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def _check_side(side: object, label: str = "side") -> int:
    if isinstance(side, bool) or side not in (1, 2):
        raise InvalidScoringEvent(f"{label} must be 1 or 2")
    return side  # type: ignore[return-value]


def _check_version(state: ScoringState, expected_version: int) -> None:
    if expected_version != state.version:
        raise VersionConflict(expected_version, state.version)


def _score(state: ScoringState, mode: AnyMode) -> str:
    return format_score(state, mode.kind, getattr(mode, "use_advantage", True))


def _mutate(
    state: ScoringState,
    mode: AnyMode,
    expected_version: int,
    action: str,
    side: Optional[int],
    change: Callable[[ScoringState], None],
    now: Optional[datetime],
    details: Optional[dict] = None,
) -> ScoringResult:
    if state.is_complete:
        raise MatchAlreadyComplete()
    _check_version(state, expected_version)

    now = now or utcnow()
    new = state.copy()
    new.history.push(state.snapshot())
    change(new)
    new.version = state.version + 1

    entry = ScoringLogEntry(
        action=action,
        side=side,
        version=new.version,
        score_before=_score(state, mode),
        score_after=_score(new, mode),
        timestamp=now,
        details=details or {},
    )
    return ScoringResult(new, new.is_complete, False, entry)


def initialize(
    mode: AnyMode,
    first_server: int,
    existing: Optional[ScoringState] = None,
    *,
    now: Optional[datetime] = None,
) -> ScoringResult:
    """Create the scoring state once the first server is chosen."""

    if existing is not None:
        raise AlreadyInitialized()
    first_server = _check_side(first_server, "first server")

    state = ScoringState(
        serving_side=first_server,
        first_server_of_current_set=first_server,
        initial_server=first_server,
        version=1,
    )
    rules_for(mode).begin(state)
    score = _score(state, mode)
    entry = ScoringLogEntry(
        action="init",
        side=first_server,
        version=1,
        score_before=score,
        score_after=score,
        timestamp=now or utcnow(),
        details={"mode": mode.kind},
    )
    return ScoringResult(state, False, False, entry)


def _start_clock(state: ScoringState, now: Optional[datetime]) -> None:
    if state.match_started_at is None:
        state.match_started_at = now or utcnow()


def apply_point(
    state: ScoringState,
    mode: AnyMode,
    winning_side: int,
    expected_version: int,
    *,
    now: Optional[datetime] = None,
) -> ScoringResult:
    """Award the next point to ``winning_side``."""

    winning_side = _check_side(winning_side)
    rules = rules_for(mode)
    now = now or utcnow()

    def change(s: ScoringState) -> None:
        _start_clock(s, now)
        s.fault_pending = False
        rules.score(s, winning_side)

    return _mutate(state, mode, expected_version, "point", winning_side, change, now)


def score_ace(
    state: ScoringState,
    mode: AnyMode,
    expected_version: int,
    *,
    now: Optional[datetime] = None,
) -> ScoringResult:
    """Award the point to the server and count an ace."""

    if not isinstance(mode, ScoringMode):
        raise InvalidScoringEvent("aces are only tracked for tennis-style scoring")
    rules = rules_for(mode)
    server = state.serving_side
    now = now or utcnow()

    def change(s: ScoringState) -> None:
        _start_clock(s, now)
        s.fault_pending = False
        s.aces[server - 1] += 1
        rules.score(s, server)

    return _mutate(state, mode, expected_version, "ace", server, change, now)


def score_fault(
    state: ScoringState,
    mode: AnyMode,
    expected_version: int,
    *,
    now: Optional[datetime] = None,
) -> ScoringResult:
    """Record a service fault; a second consecutive fault loses the point."""

    if not isinstance(mode, ScoringMode):
        raise InvalidScoringEvent("faults are only tracked for tennis-style scoring")
    rules = rules_for(mode)
    server = state.serving_side
    now = now or utcnow()

    if not state.fault_pending:
        def first_fault(s: ScoringState) -> None:
            _start_clock(s, now)
            s.fault_pending = True

        return _mutate(state, mode, expected_version, "fault", server, first_fault, now)

    def double_fault(s: ScoringState) -> None:
        _start_clock(s, now)
        s.fault_pending = False
        s.double_faults[server - 1] += 1
        rules.score(s, rotation.other(server))

    return _mutate(
        state,
        mode,
        expected_version,
        "double_fault",
        server,
        double_fault,
        now,
        details={"pointTo": rotation.other(server)},
    )


def set_server(
    state: ScoringState,
    mode: AnyMode,
    side: int,
    expected_version: int,
    *,
    now: Optional[datetime] = None,
) -> ScoringResult:
    """Correct the serving side; later rotation continues from ``side``."""

    side = _check_side(side)
    rules = rules_for(mode)

    def change(s: ScoringState) -> None:
        s.fault_pending = False
        rules.server_for(s, side)

    return _mutate(state, mode, expected_version, "set_server", side, change, now)


def undo_last_point(
    state: ScoringState,
    mode: AnyMode,
    expected_version: int,
    *,
    now: Optional[datetime] = None,
) -> ScoringResult:
    """Restore the most recent snapshot.

    Allowed after completion so a mistaken match-ending point can be reverted.
    Each call pops one more entry; the undone state is not pushed back.
    """

    _check_version(state, expected_version)
    if not state.history:
        raise NothingToUndo()

    new = state.copy()
    new.restore(new.history.pop())
    new.version = state.version + 1

    entry = ScoringLogEntry(
        action="undo",
        side=None,
        version=new.version,
        score_before=_score(state, mode),
        score_after=_score(new, mode),
        timestamp=now or utcnow(),
    )
    return ScoringResult(new, False, state.is_complete and not new.is_complete, entry)
