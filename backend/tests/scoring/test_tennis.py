import os, sys
import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))
from scoreforge.scoring import engine, tennis
from scoreforge.scoring.errors import InvalidScoringMode


def _start(config=None, first_server=1):
    mode = tennis.mode(config)
    return mode, engine.initialize(mode, first_server).state


def _score_game(side, state, mode):
    for _ in range(4):
        state = engine.apply_point(state, mode, side, state.version).state
    return state


def test_defaults_are_best_of_three_with_advantage():
    mode = tennis.mode()
    assert mode.sets_to_win == 2
    assert mode.use_advantage is True
    assert mode.tiebreak_at == 6
    assert mode.points_to_win_tiebreak == 7


def test_tennis_basic_game_win():
    mode, state = _start()
    state = _score_game(1, state, mode)
    assert state.current_set_games == [1, 0]
    assert state.current_game_points == [0, 0]


def test_tennis_tiebreak():
    mode, state = _start({"tiebreakTo": 7})
    for _ in range(6):
        state = _score_game(1, state, mode)
        state = _score_game(2, state, mode)
    assert state.current_set_games == [6, 6]
    assert state.is_tiebreak is True

    for side in [1] * 6 + [2] * 5 + [1]:
        state = engine.apply_point(state, mode, side, state.version).state
    assert state.to_dict()["setsWon"] == [1, 0]
    assert state.current_set_games == [0, 0]


def test_tennis_match_stops_after_set_limit():
    mode, state = _start({"sets": 3})
    for _ in range(12):
        state = _score_game(1, state, mode)
    assert state.is_complete
    assert state.to_dict()["setsWon"] == [2, 0]


def test_best_of_five():
    mode, state = _start({"sets": 5})
    assert mode.sets_to_win == 3
    for _ in range(12):
        state = _score_game(1, state, mode)
    assert not state.is_complete


def test_zero_tiebreak_to_disables_tiebreaks():
    mode = tennis.mode({"tiebreakTo": 0})
    assert mode.tiebreak_at is None


def test_rejects_unsupported_set_count():
    with pytest.raises(InvalidScoringMode):
        tennis.mode({"setsToWin": 4})
