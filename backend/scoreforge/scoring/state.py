"""Mutable live scoring state and its immutable history snapshots.

The serialized form uses camelCase keys and plain JSON types so it can be
stored in the ``match.scoring_state`` JSON column and sent to clients as is.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..time_utils import parse_iso, to_iso
from .arithmetic import sets_won
from .history import HISTORY_DEPTH, HistoryRing

Pair = Tuple[int, int]


@dataclass(frozen=True)
class ScoringSnapshot:
    """Deep copy of every score field, taken before an accepted mutation."""

    current_game_points: Pair
    current_set_games: Pair
    completed_sets: Tuple[Pair, ...]
    serving_side: int
    first_server_of_current_set: int
    initial_server: int
    tiebreak_first_server: Optional[int]
    is_tiebreak: bool
    tiebreak_kind: Optional[str]
    is_complete: bool
    winning_side: Optional[int]
    match_started_at: Optional[datetime]
    fault_pending: bool
    aces: Pair
    double_faults: Pair

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentGamePoints": list(self.current_game_points),
            "currentSetGames": list(self.current_set_games),
            "completedSets": [list(s) for s in self.completed_sets],
            "servingSide": self.serving_side,
            "firstServerOfCurrentSet": self.first_server_of_current_set,
            "initialServer": self.initial_server,
            "tiebreakFirstServer": self.tiebreak_first_server,
            "isTiebreak": self.is_tiebreak,
            "tiebreakKind": self.tiebreak_kind,
            "isComplete": self.is_complete,
            "winningSide": self.winning_side,
            "matchStartedAt": to_iso(self.match_started_at),
            "faultPending": self.fault_pending,
            "aces": list(self.aces),
            "doubleFaults": list(self.double_faults),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScoringSnapshot":
        return cls(
            current_game_points=_pair(data.get("currentGamePoints")),
            current_set_games=_pair(data.get("currentSetGames")),
            completed_sets=tuple(_pair(s) for s in data.get("completedSets") or []),
            serving_side=int(data["servingSide"]),
            first_server_of_current_set=int(data["firstServerOfCurrentSet"]),
            initial_server=int(data.get("initialServer") or data["servingSide"]),
            tiebreak_first_server=data.get("tiebreakFirstServer"),
            is_tiebreak=bool(data.get("isTiebreak", False)),
            tiebreak_kind=data.get("tiebreakKind"),
            is_complete=bool(data.get("isComplete", False)),
            winning_side=data.get("winningSide"),
            match_started_at=parse_iso(data.get("matchStartedAt"), field_name="matchStartedAt"),
            fault_pending=bool(data.get("faultPending", False)),
            aces=_pair(data.get("aces")),
            double_faults=_pair(data.get("doubleFaults")),
        )


def _pair(value: Any) -> Pair:
    if not value:
        return (0, 0)
    return (int(value[0]), int(value[1]))


_SNAPSHOT_FIELDS = tuple(f.name for f in fields(ScoringSnapshot))


@dataclass
class ScoringState:
    serving_side: int
    first_server_of_current_set: int
    initial_server: int
    current_game_points: List[int] = field(default_factory=lambda: [0, 0])
    current_set_games: List[int] = field(default_factory=lambda: [0, 0])
    completed_sets: List[Pair] = field(default_factory=list)
    tiebreak_first_server: Optional[int] = None
    is_tiebreak: bool = False
    tiebreak_kind: Optional[str] = None
    is_complete: bool = False
    winning_side: Optional[int] = None
    match_started_at: Optional[datetime] = None
    fault_pending: bool = False
    aces: List[int] = field(default_factory=lambda: [0, 0])
    double_faults: List[int] = field(default_factory=lambda: [0, 0])
    version: int = 1
    history: HistoryRing[ScoringSnapshot] = field(default_factory=HistoryRing)

    @property
    def sets_won(self) -> Pair:
        return sets_won(self.completed_sets)

    def snapshot(self) -> ScoringSnapshot:
        return ScoringSnapshot(
            current_game_points=tuple(self.current_game_points),
            current_set_games=tuple(self.current_set_games),
            completed_sets=tuple(tuple(s) for s in self.completed_sets),
            serving_side=self.serving_side,
            first_server_of_current_set=self.first_server_of_current_set,
            initial_server=self.initial_server,
            tiebreak_first_server=self.tiebreak_first_server,
            is_tiebreak=self.is_tiebreak,
            tiebreak_kind=self.tiebreak_kind,
            is_complete=self.is_complete,
            winning_side=self.winning_side,
            match_started_at=self.match_started_at,
            fault_pending=self.fault_pending,
            aces=tuple(self.aces),
            double_faults=tuple(self.double_faults),
        )

    def restore(self, snap: ScoringSnapshot) -> None:
        """Overwrite every score field with ``snap``; version and history are kept."""

        for name in _SNAPSHOT_FIELDS:
            value = getattr(snap, name)
            if name == "completed_sets":
                value = [tuple(s) for s in value]
            elif isinstance(value, tuple):
                value = list(value)
            setattr(self, name, value)

    def copy(self) -> "ScoringState":
        return replace(
            self,
            current_game_points=list(self.current_game_points),
            current_set_games=list(self.current_set_games),
            completed_sets=list(self.completed_sets),
            aces=list(self.aces),
            double_faults=list(self.double_faults),
            history=self.history.copy(),
        )

    def to_dict(self, include_history: bool = True) -> Dict[str, Any]:
        data = self.snapshot().to_dict()
        data["version"] = self.version
        data["setsWon"] = list(self.sets_won)
        data["historyDepth"] = len(self.history)
        if include_history:
            data["history"] = [snap.to_dict() for snap in self.history]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScoringState":
        snap = ScoringSnapshot.from_dict(data)
        state = cls(
            serving_side=snap.serving_side,
            first_server_of_current_set=snap.first_server_of_current_set,
            initial_server=snap.initial_server,
            version=int(data.get("version", 1)),
            history=HistoryRing.from_list(
                (ScoringSnapshot.from_dict(h) for h in data.get("history") or []),
                maxlen=HISTORY_DEPTH,
            ),
        )
        state.restore(snap)
        return state
