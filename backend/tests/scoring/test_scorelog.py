import csv
import io
import os, sys
from datetime import datetime, timezone

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))
from scoreforge.scoring.scorelog import (
    CSV_HEADERS,
    ScoringLogEntry,
    describe,
    export_csv,
    format_score,
)
from scoreforge.scoring.state import ScoringState

TS = datetime(2024, 3, 9, 18, 30, 5, tzinfo=timezone.utc)


def _state(**kwargs):
    state = ScoringState(serving_side=1, first_server_of_current_set=1, initial_server=1)
    for key, value in kwargs.items():
        setattr(state, key, value)
    return state


def test_format_regular_game():
    state = _state(completed_sets=[(6, 4)], current_set_games=[3, 2], current_game_points=[2, 1])
    assert format_score(state) == "6-4 3-2 (30-15)"


def test_format_deuce_and_advantage():
    assert format_score(_state(current_game_points=[3, 3])) == "0-0 (40-40)"
    assert format_score(_state(current_game_points=[4, 3])) == "0-0 (Ad-40)"


def test_format_tiebreak_and_match_tiebreak():
    state = _state(current_set_games=[6, 6], current_game_points=[3, 2], is_tiebreak=True, tiebreak_kind="set")
    assert format_score(state) == "6-6 TB: 3-2"
    state = _state(
        completed_sets=[(6, 3), (4, 6)],
        current_game_points=[5, 4],
        is_tiebreak=True,
        tiebreak_kind="match",
    )
    assert format_score(state) == "6-3 4-6 MTB: 5-4"


def test_format_match_tiebreak_triggered_at_tiebreak_all():
    state = _state(
        completed_sets=[(6, 3), (4, 6)],
        current_set_games=[6, 6],
        current_game_points=[5, 4],
        is_tiebreak=True,
        tiebreak_kind="match",
    )
    assert format_score(state) == "6-3 4-6 6-6 MTB: 5-4"


def test_format_completed_match_shows_sets_only():
    state = _state(completed_sets=[(6, 0), (6, 0)], is_complete=True, winning_side=1)
    assert format_score(state) == "6-0 6-0"


def test_format_rally():
    state = _state(completed_sets=[(25, 20)], current_game_points=[12, 9])
    assert format_score(state, kind="rally") == "25-20 12-9"


def test_describe_actions():
    entry = ScoringLogEntry(action="point", version=2, score_before="", score_after="", timestamp=TS, side=2)
    assert describe(entry) == "Point to P2"
    undo = ScoringLogEntry(action="undo", version=3, score_before="", score_after="", timestamp=TS)
    assert describe(undo) == "Undid last action"


def test_export_csv():
    entries = [
        ScoringLogEntry(action="init", version=1, score_before="0-0", score_after="0-0", timestamp=TS, side=1),
        ScoringLogEntry(action="point", version=2, score_before="0-0", score_after="0-0 (15-0)", timestamp=TS, side=1),
    ]
    rows = list(csv.reader(io.StringIO(export_csv(entries))))
    assert tuple(rows[0]) == CSV_HEADERS
    assert rows[1] == ["2024-03-09 18:30:05", "1", "init", "1", "First server: P1", "0-0", "0-0"]
    assert rows[2][2:] == ["point", "1", "Point to P1", "0-0", "0-0 (15-0)"]


def test_entry_dict_round_trip():
    entry = ScoringLogEntry(
        action="double_fault",
        version=7,
        score_before="1-0",
        score_after="1-0 (0-15)",
        timestamp=TS,
        side=1,
        details={"pointTo": 2},
    )
    assert ScoringLogEntry.from_dict(entry.to_dict()) == entry
