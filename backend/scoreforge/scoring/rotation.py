"""Server rotation rules.

Standard games alternate the server every game across the whole match. A
tiebreak is opened by the side due to serve the next game; that side serves
one point, then each side serves two points in turn. The tiebreak counts as a
single game for rotation, so the side that received first in it opens the
next set.
"""

from __future__ import annotations


def other(side: int) -> int:
    return 2 if side == 1 else 1


def tiebreak_server(first_server: int, points_played: int) -> int:
    """Server of the next tiebreak point after ``points_played`` points."""

    return first_server if ((points_played + 1) // 2) % 2 == 0 else other(first_server)


def game_server(first_server_of_set: int, games_played: int) -> int:
    """Server of the next game once ``games_played`` games of the set are done."""

    return first_server_of_set if games_played % 2 == 0 else other(first_server_of_set)


def next_set_first_server(first_server_of_set: int, games_in_set: int) -> int:
    """First server of the following set under strict game alternation."""

    return game_server(first_server_of_set, games_in_set)


def match_tiebreak_first_server(due_server: int, initial_server: int, rule: str) -> int:
    """Who opens a deciding-set match tiebreak.

    ``continue`` keeps strict alternation (the side due to serve next);
    ``reset`` hands the serve back to the match's first server.
    """

    if rule == "reset":
        return initial_server
    return due_server


def rally_server(
    point_winner: int,
    points: tuple[int, int] | list[int],
    service: str,
    serves_per_turn: int,
    first_server_of_set: int,
    deuce_at: int,
) -> int:
    """Server of the next rally in a points-race set.

    ``winner``: the rally winner serves next (side-out scoring).
    ``alternate``: service changes every ``serves_per_turn`` points, and every
    point once both sides have reached ``deuce_at``.
    """

    if service == "winner":
        return point_winner

    total = points[0] + points[1]
    if points[0] >= deuce_at and points[1] >= deuce_at:
        base = 2 * deuce_at
        turns = (base // serves_per_turn) + (total - base)
    else:
        turns = total // serves_per_turn
    return first_server_of_set if turns % 2 == 0 else other(first_server_of_set)
