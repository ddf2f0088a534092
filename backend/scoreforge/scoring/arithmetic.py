"""Pure game/set arithmetic consulted by the engine on every point.

Nothing here holds state. Point counts are raw integers indexed by side - 1.
"""

from __future__ import annotations

from typing import NamedTuple, Optional, Sequence

from .modes import RallyMode, ScoringMode


class GameResult(NamedTuple):
    game_won: Optional[int]
    is_deuce: bool
    advantage_side: Optional[int]


class SetResult(NamedTuple):
    set_won: Optional[int]
    enter_tiebreak: bool


def _leader(a: int, b: int) -> int:
    return 1 if a > b else 2


def evaluate_game(
    points: Sequence[int],
    mode: ScoringMode,
    tiebreak_target: Optional[int] = None,
) -> GameResult:
    """Evaluate the current game.

    With ``tiebreak_target`` the game is a tiebreak: first to the target with a
    two point margin, no cap. Otherwise it is a standard game: first to four
    with a two point margin, or first to four outright under no-ad scoring.
    """

    a, b = points[0], points[1]

    if tiebreak_target is not None:
        if max(a, b) >= tiebreak_target and abs(a - b) >= 2:
            return GameResult(_leader(a, b), False, None)
        return GameResult(None, False, None)

    if mode.use_advantage:
        if max(a, b) >= 4 and abs(a - b) >= 2:
            return GameResult(_leader(a, b), False, None)
        if a >= 3 and b >= 3:
            if a == b:
                return GameResult(None, True, None)
            return GameResult(None, False, _leader(a, b))
        return GameResult(None, False, None)

    # No-ad: sudden death once both sides reach three.
    if a >= 4 or b >= 4:
        return GameResult(_leader(a, b), False, None)
    return GameResult(None, a == 3 and b == 3, None)


def normalize_game_points(points: Sequence[int], mode: ScoringMode) -> list[int]:
    """Collapse advantage-game counts back to 3-3 / 4-3 / 3-4.

    Keeps raw counts bounded so a long deuce game never grows past four.
    """

    a, b = points[0], points[1]
    if mode.use_advantage and a >= 3 and b >= 3:
        if a == b:
            return [3, 3]
        if abs(a - b) == 1:
            return [4, 3] if a > b else [3, 4]
    return [a, b]


def evaluate_set(
    games: Sequence[int],
    mode: ScoringMode,
    after_tiebreak: bool = False,
) -> SetResult:
    """Evaluate the current set after a game has been awarded."""

    a, b = games[0], games[1]

    if after_tiebreak:
        return SetResult(_leader(a, b), False)

    if mode.tiebreak_at is not None and a == b == mode.tiebreak_at:
        return SetResult(None, True)

    if max(a, b) >= mode.games_per_set and abs(a - b) >= 2:
        return SetResult(_leader(a, b), False)

    return SetResult(None, False)


def sets_won(completed_sets: Sequence[Sequence[int]]) -> tuple[int, int]:
    p1 = p2 = 0
    for s in completed_sets:
        if s[0] > s[1]:
            p1 += 1
        elif s[1] > s[0]:
            p2 += 1
    return p1, p2


def is_deciding_set(completed_sets: Sequence[Sequence[int]], sets_to_win: int) -> bool:
    """Return ``True`` when both sides need exactly one more set."""

    p1, p2 = sets_won(completed_sets)
    return p1 == sets_to_win - 1 and p2 == sets_to_win - 1


def match_winner(completed_sets: Sequence[Sequence[int]], sets_to_win: int) -> Optional[int]:
    p1, p2 = sets_won(completed_sets)
    if p1 >= sets_to_win:
        return 1
    if p2 >= sets_to_win:
        return 2
    return None


def tiebreak_target(mode: ScoringMode, kind: str, deciding: bool) -> int:
    if kind == "match":
        return mode.match_tiebreak_points
    if deciding and mode.final_set_tiebreak_points is not None:
        return mode.final_set_tiebreak_points
    return mode.points_to_win_tiebreak


def evaluate_rally_set(
    points: Sequence[int],
    mode: RallyMode,
    deciding: bool,
) -> Optional[int]:
    """Return the winner of a points-race set, if it is over."""

    a, b = points[0], points[1]
    target = mode.points_per_deciding_set if deciding else mode.points_per_set
    if mode.point_cap is not None and max(a, b) >= mode.point_cap and a != b:
        return _leader(a, b)
    if max(a, b) >= target and abs(a - b) >= mode.min_lead:
        return _leader(a, b)
    return None
