import os, sys
from datetime import datetime, timezone

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))
from scoreforge.scoring import engine
from scoreforge.scoring.errors import (
    AlreadyInitialized,
    InvalidScoringEvent,
    MatchAlreadyComplete,
    NothingToUndo,
    VersionConflict,
)
from scoreforge.scoring.modes import RallyMode, ScoringMode
from scoreforge.scoring.state import ScoringState

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _start(mode=None, first_server=1):
    mode = mode or ScoringMode()
    return mode, engine.initialize(mode, first_server, now=NOW).state


def _play(state, mode, *sides):
    for side in sides:
        state = engine.apply_point(state, mode, side, state.version, now=NOW).state
    return state


def _game(state, mode, side):
    return _play(state, mode, *([side] * 4))


def _games(state, mode, side, count):
    for _ in range(count):
        state = _game(state, mode, side)
    return state


def _sets(state):
    return [tuple(s) for s in state.completed_sets]


def test_initialize_sets_first_server_and_version():
    mode, state = _start(first_server=2)
    assert state.version == 1
    assert state.serving_side == 2
    assert state.initial_server == 2
    assert state.current_game_points == [0, 0]
    assert state.current_set_games == [0, 0]
    assert state.completed_sets == []
    assert not state.history


def test_initialize_rejects_existing_state():
    mode, state = _start()
    with pytest.raises(AlreadyInitialized):
        engine.initialize(mode, 1, state)


@pytest.mark.parametrize("side", [0, 3, True, "1", None])
def test_initialize_rejects_invalid_first_server(side):
    with pytest.raises(InvalidScoringEvent):
        engine.initialize(ScoringMode(), side)


def test_scenario_a_no_ad_straight_sets():
    mode, state = _start(ScoringMode(use_advantage=False))
    state = _games(state, mode, 1, 6)
    assert _sets(state) == [(6, 0)]
    assert not state.is_complete

    state = _games(state, mode, 1, 6)
    assert state.is_complete
    assert state.winning_side == 1
    assert state.to_dict()["completedSets"] == [[6, 0], [6, 0]]
    assert state.version == 1 + 48


def test_scenario_b_tiebreak_trigger():
    mode, state = _start()
    for _ in range(6):
        state = _game(state, mode, 1)
        state = _game(state, mode, 2)
    assert state.current_set_games == [6, 6]
    assert state.is_tiebreak
    assert state.tiebreak_kind == "set"

    state = _play(state, mode, *([2] * 7))
    assert not state.is_tiebreak
    assert _sets(state) == [(6, 7)]
    assert state.current_set_games == [0, 0]
    assert state.current_game_points == [0, 0]


def test_scenario_c_undo_after_match_point():
    mode, state = _start()
    state = _games(state, mode, 1, 11)
    state = _play(state, mode, 1, 1, 1)
    assert state.current_set_games == [5, 0]
    assert state.current_game_points == [3, 0]
    before = state.to_dict()

    won = engine.apply_point(state, mode, 1, state.version, now=NOW)
    assert won.completed
    assert won.state.is_complete
    assert won.state.winning_side == 1

    undone = engine.undo_last_point(won.state, mode, won.state.version, now=NOW)
    assert undone.reopened
    assert not undone.state.is_complete
    assert undone.state.winning_side is None
    assert undone.state.version == state.version + 2

    after = undone.state.to_dict()
    for key in ("version", "history", "historyDepth"):
        before.pop(key)
        after.pop(key)
    assert after == before


def test_scenario_d_version_conflict():
    mode, state = _start()
    state = _play(state, mode, 1, 2, 1, 2)
    assert state.version == 5

    caller_a = engine.apply_point(state, mode, 1, 5, now=NOW)
    assert caller_a.state.version == 6

    with pytest.raises(VersionConflict) as exc:
        engine.apply_point(caller_a.state, mode, 2, 5, now=NOW)
    assert exc.value.expected == 5
    assert exc.value.actual == 6


def test_rejected_call_leaves_state_untouched():
    mode, state = _start()
    state = _play(state, mode, 1, 1)
    snapshot = state.to_dict()
    with pytest.raises(VersionConflict):
        engine.apply_point(state, mode, 1, state.version - 1)
    with pytest.raises(InvalidScoringEvent):
        engine.apply_point(state, mode, 3, state.version)
    assert state.to_dict() == snapshot


def test_conflict_detection_is_repeatable():
    mode, state = _start()
    state = _play(state, mode, 1)
    for _ in range(3):
        with pytest.raises(VersionConflict):
            engine.apply_point(state, mode, 2, 1)
    assert state.version == 2


def test_apply_returns_new_state_and_keeps_input():
    mode, state = _start()
    result = engine.apply_point(state, mode, 1, 1, now=NOW)
    assert state.current_game_points == [0, 0]
    assert state.version == 1
    assert result.state.current_game_points == [1, 0]
    assert result.state.version == 2
    assert len(result.state.history) == 1


def test_deuce_and_advantage_return_to_deuce():
    mode, state = _start()
    state = _play(state, mode, 1, 1, 1, 2, 2, 2)
    assert state.current_game_points == [3, 3]

    state = _play(state, mode, 1)
    assert state.current_game_points == [4, 3]
    state = _play(state, mode, 2)
    assert state.current_game_points == [3, 3]

    for _ in range(5):
        state = _play(state, mode, 2, 1)
        assert state.current_game_points == [3, 3]

    state = _play(state, mode, 2, 2)
    assert state.current_set_games == [0, 1]
    assert state.current_game_points == [0, 0]


def test_no_ad_deciding_point_wins_game():
    mode, state = _start(ScoringMode(use_advantage=False))
    state = _play(state, mode, 1, 1, 1, 2, 2, 2)
    assert state.current_game_points == [3, 3]
    state = _play(state, mode, 2)
    assert state.current_set_games == [0, 1]
    assert state.current_game_points == [0, 0]


def test_set_needs_two_game_margin():
    mode, state = _start()
    for _ in range(5):
        state = _game(state, mode, 1)
        state = _game(state, mode, 2)
    state = _game(state, mode, 1)
    assert state.current_set_games == [6, 5]
    assert state.completed_sets == []

    state = _game(state, mode, 1)
    assert _sets(state) == [(7, 5)]


def test_set_without_tiebreak_runs_on():
    mode, state = _start(ScoringMode(tiebreak_at=None))
    for _ in range(7):
        state = _game(state, mode, 1)
        state = _game(state, mode, 2)
    assert state.current_set_games == [7, 7]
    assert not state.is_tiebreak
    state = _games(state, mode, 2, 2)
    assert _sets(state) == [(7, 9)]


def test_tiebreak_needs_two_point_margin():
    mode, state = _start()
    for _ in range(6):
        state = _game(state, mode, 1)
        state = _game(state, mode, 2)
    for _ in range(6):
        state = _play(state, mode, 1, 2)
    assert state.current_game_points == [6, 6]
    state = _play(state, mode, 1)
    assert state.is_tiebreak
    state = _play(state, mode, 2, 2, 2)
    assert _sets(state) == [(6, 7)]


def test_tiebreak_server_rotation():
    mode, state = _start(first_server=1)
    for _ in range(6):
        state = _game(state, mode, 1)
        state = _game(state, mode, 2)
    # 12 games played; the set's first server opens the tiebreak
    assert state.tiebreak_first_server == 1
    servers = [state.serving_side]
    for side in (1, 2, 1, 2, 1):
        state = _play(state, mode, side)
        servers.append(state.serving_side)
    assert servers == [1, 2, 2, 1, 1, 2]


def test_server_alternates_each_game_and_across_sets():
    mode, state = _start(first_server=2)
    assert state.serving_side == 2
    state = _game(state, mode, 1)
    assert state.serving_side == 1
    state = _game(state, mode, 1)
    assert state.serving_side == 2

    # 6-1 first set: seven games, so side 1 opens the second set
    state = _game(state, mode, 2)
    state = _games(state, mode, 1, 4)
    assert _sets(state) == [(6, 1)]
    assert state.first_server_of_current_set == 1
    assert state.serving_side == 1


def test_final_set_tiebreak_target():
    mode = ScoringMode(final_set_tiebreak_points=10)
    mode, state = _start(mode)
    state = _games(state, mode, 1, 6)
    state = _games(state, mode, 2, 6)
    for _ in range(6):
        state = _game(state, mode, 1)
        state = _game(state, mode, 2)
    assert state.is_tiebreak
    state = _play(state, mode, *([1] * 7))
    assert not state.is_complete
    state = _play(state, mode, 1, 1, 1)
    assert state.is_complete
    assert _sets(state) == [(6, 0), (0, 6), (7, 6)]


def _split_sets(mode, first_server=1):
    """Side 1 takes the first set 6-1, side 2 the second 6-0."""
    mode, state = _start(mode, first_server)
    state = _game(state, mode, 2)
    state = _games(state, mode, 1, 6)
    state = _games(state, mode, 2, 6)
    return mode, state


def test_match_tiebreak_continues_alternation_by_default():
    mode, state = _split_sets(ScoringMode(use_match_tiebreak=True))
    assert state.is_tiebreak
    assert state.tiebreak_kind == "match"
    # Set two opened with side 2 and had six games, so side 2 is due.
    assert state.tiebreak_first_server == 2
    assert state.serving_side == 2


def test_match_tiebreak_reset_returns_serve_to_initial_server():
    mode, state = _split_sets(
        ScoringMode(use_match_tiebreak=True, match_tiebreak_server="reset")
    )
    assert state.tiebreak_kind == "match"
    assert state.tiebreak_first_server == 1
    assert state.serving_side == 1


def test_match_tiebreak_replaces_deciding_set():
    mode, state = _split_sets(ScoringMode(use_match_tiebreak=True))
    state = _play(state, mode, *([1] * 9))
    assert not state.is_complete
    state = _play(state, mode, 2, 2, 1)
    assert state.is_complete
    assert state.winning_side == 1
    assert _sets(state) == [(6, 1), (0, 6), (10, 2)]


def test_match_tiebreak_triggered_at_tiebreak_games():
    mode = ScoringMode(use_match_tiebreak=True, match_tiebreak_trigger="tiebreak")
    mode, state = _split_sets(mode)
    assert not state.is_tiebreak
    for _ in range(6):
        state = _game(state, mode, 1)
        state = _game(state, mode, 2)
    assert state.tiebreak_kind == "match"
    state = _play(state, mode, *([2] * 10))
    assert state.is_complete
    assert state.winning_side == 2
    assert _sets(state) == [(6, 1), (0, 6), (6, 7)]


def test_single_set_match_tiebreak_opens_immediately():
    mode = ScoringMode(sets_to_win=1, use_match_tiebreak=True)
    state = engine.initialize(mode, 2, now=NOW).state
    assert state.is_tiebreak
    assert state.tiebreak_kind == "match"
    assert state.serving_side == 2


def test_points_after_completion_are_rejected():
    mode, state = _start(ScoringMode(sets_to_win=1))
    state = _games(state, mode, 2, 6)
    assert state.is_complete
    with pytest.raises(MatchAlreadyComplete):
        engine.apply_point(state, mode, 1, state.version)
    with pytest.raises(MatchAlreadyComplete):
        engine.score_ace(state, mode, state.version)


def test_undo_without_history():
    mode, state = _start()
    with pytest.raises(NothingToUndo):
        engine.undo_last_point(state, mode, state.version)


def test_undo_checks_version_first():
    mode, state = _start()
    with pytest.raises(VersionConflict):
        engine.undo_last_point(state, mode, state.version + 1)


def test_apply_then_undo_round_trip():
    mode, state = _start()
    state = _play(state, mode, 1, 2, 2)
    applied = engine.apply_point(state, mode, 1, state.version, now=NOW).state
    undone = engine.undo_last_point(applied, mode, applied.version, now=NOW).state

    assert undone.snapshot() == state.snapshot()
    assert undone.version > applied.version > state.version
    assert len(undone.history) == len(state.history)


def test_history_keeps_only_last_ten():
    mode, state = _start()
    state = _play(state, mode, *([1, 2] * 6))
    assert len(state.history) == 10
    for _ in range(10):
        state = engine.undo_last_point(state, mode, state.version).state
    # Two oldest points fell out of the ring.
    assert state.current_game_points == [1, 1]
    with pytest.raises(NothingToUndo):
        engine.undo_last_point(state, mode, state.version)


def test_undo_does_not_restore_undone_state():
    mode, state = _start()
    state = _play(state, mode, 1, 1)
    state = engine.undo_last_point(state, mode, state.version).state
    state = engine.undo_last_point(state, mode, state.version).state
    assert state.current_game_points == [0, 0]
    assert not state.history


def test_ace_scores_for_server():
    mode, state = _start(first_server=2)
    result = engine.score_ace(state, mode, state.version, now=NOW)
    assert result.state.current_game_points == [0, 1]
    assert result.state.aces == [0, 1]
    assert result.log_entry.action == "ace"
    assert result.log_entry.side == 2


def test_single_fault_then_double_fault():
    mode, state = _start(first_server=1)
    first = engine.score_fault(state, mode, state.version, now=NOW)
    assert first.state.fault_pending
    assert first.state.current_game_points == [0, 0]
    assert first.state.version == 2

    second = engine.score_fault(first.state, mode, first.state.version, now=NOW)
    assert not second.state.fault_pending
    assert second.state.current_game_points == [0, 1]
    assert second.state.double_faults == [1, 0]
    assert second.log_entry.action == "double_fault"
    assert second.log_entry.details == {"pointTo": 2}


def test_point_clears_pending_fault():
    mode, state = _start()
    state = engine.score_fault(state, mode, state.version).state
    state = _play(state, mode, 1)
    assert not state.fault_pending
    state = engine.score_fault(state, mode, state.version).state
    assert state.fault_pending
    assert state.double_faults == [0, 0]


def test_faults_rejected_for_rally_modes():
    mode, state = _start(RallyMode())
    with pytest.raises(InvalidScoringEvent):
        engine.score_fault(state, mode, state.version)
    with pytest.raises(InvalidScoringEvent):
        engine.score_ace(state, mode, state.version)


def test_set_server_correction_continues_rotation():
    mode, state = _start(first_server=1)
    state = _game(state, mode, 1)
    assert state.serving_side == 2

    state = engine.set_server(state, mode, 1, state.version).state
    assert state.serving_side == 1
    state = _game(state, mode, 1)
    assert state.serving_side == 2
    state = _game(state, mode, 1)
    assert state.serving_side == 1


def test_set_server_is_undoable():
    mode, state = _start(first_server=1)
    corrected = engine.set_server(state, mode, 2, state.version).state
    assert corrected.serving_side == 2
    undone = engine.undo_last_point(corrected, mode, corrected.version).state
    assert undone.serving_side == 1


def test_match_clock_starts_on_first_point():
    mode, state = _start()
    assert state.match_started_at is None
    state = engine.apply_point(state, mode, 1, state.version, now=NOW).state
    assert state.match_started_at == NOW


def test_log_entry_carries_running_score():
    mode, state = _start()
    state = _play(state, mode, 1)
    result = engine.apply_point(state, mode, 2, state.version, now=NOW)
    assert result.log_entry.score_before == "0-0 (15-0)"
    assert result.log_entry.score_after == "0-0 (15-15)"
    assert result.log_entry.version == result.state.version
    assert result.log_entry.timestamp == NOW


def test_state_survives_serialization():
    mode, state = _start()
    state = _play(state, mode, 1, 2, 1, 1, 2)
    restored = ScoringState.from_dict(state.to_dict())
    assert restored.to_dict() == state.to_dict()

    restored = engine.undo_last_point(restored, mode, restored.version).state
    assert restored.current_game_points == [3, 1]
