"""Append-only scoring log entries and their CSV export.

Each accepted mutation produces one entry carrying the running score before
and after it. The log is independent of the undo history: undo appends an
``undo`` entry rather than removing anything.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, Mapping, Optional

from ..time_utils import coerce_utc, parse_iso, to_iso

POINT_LABELS = ("0", "15", "30", "40", "Ad")

CSV_HEADERS = (
    "Timestamp",
    "Version",
    "Action",
    "Side",
    "Details",
    "Score Before",
    "Score After",
)


@dataclass(frozen=True)
class ScoringLogEntry:
    action: str
    version: int
    score_before: str
    score_after: str
    timestamp: datetime
    side: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "side": self.side,
            "version": self.version,
            "scoreBefore": self.score_before,
            "scoreAfter": self.score_after,
            "timestamp": to_iso(self.timestamp),
            "details": dict(self.details),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScoringLogEntry":
        return cls(
            action=data["action"],
            side=data.get("side"),
            version=int(data["version"]),
            score_before=data.get("scoreBefore") or "",
            score_after=data.get("scoreAfter") or "",
            timestamp=parse_iso(data["timestamp"]),
            details=dict(data.get("details") or {}),
        )


def point_label(points: int, opponent: int, use_advantage: bool) -> str:
    if points >= 3 and opponent >= 3:
        if use_advantage and points > opponent:
            return "Ad"
        return "40"
    return POINT_LABELS[min(points, 3)]


def format_score(state: Any, kind: str = "tennis", use_advantage: bool = True) -> str:
    """Render a running score such as ``6-4 3-2 (30-15)`` or ``6-6 TB: 3-2``.

    ``state`` is a :class:`~.state.ScoringState` or
    :class:`~.state.ScoringSnapshot`; both expose the same score fields.
    """

    parts = [f"{a}-{b}" for a, b in state.completed_sets]
    if state.is_complete:
        return " ".join(parts)

    a, b = state.current_game_points
    if kind == "rally":
        parts.append(f"{a}-{b}")
        return " ".join(parts)

    games_a, games_b = state.current_set_games
    current = f"{games_a}-{games_b}"
    if state.is_tiebreak and state.tiebreak_kind == "match":
        # An immediate match tiebreak replaces the set, so it has no games.
        prefix = "" if not (games_a or games_b) else current + " "
        current = f"{prefix}MTB: {a}-{b}"
    elif state.is_tiebreak:
        current += f" TB: {a}-{b}"
    elif a or b:
        current += (
            f" ({point_label(a, b, use_advantage)}-{point_label(b, a, use_advantage)})"
        )
    parts.append(current)
    return " ".join(parts)


def describe(entry: ScoringLogEntry) -> str:
    side = entry.side
    if entry.action == "point":
        return f"Point to P{side}"
    if entry.action == "ace":
        return f"Ace by P{side}"
    if entry.action == "fault":
        return f"Fault (P{side} serving)"
    if entry.action == "double_fault":
        return f"Double fault by P{side}"
    if entry.action == "undo":
        return "Undid last action"
    if entry.action == "set_server":
        return f"Server: P{side}"
    if entry.action == "init":
        return f"First server: P{side}"
    return entry.action


def export_csv(entries: Iterable[ScoringLogEntry]) -> str:
    """Return the log as CSV text, one row per entry in the given order."""

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for entry in entries:
        ts = coerce_utc(entry.timestamp)
        writer.writerow(
            [
                ts.strftime("%Y-%m-%d %H:%M:%S") if ts else "",
                entry.version,
                entry.action,
                entry.side if entry.side is not None else "",
                describe(entry),
                entry.score_before,
                entry.score_after,
            ]
        )
    return buf.getvalue()
