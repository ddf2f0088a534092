"""Scoring modes: the rule-set variants the live engine is parameterised by.

Two variants exist. ``ScoringMode`` covers tennis-style sports (points ->
games -> sets with tiebreaks); ``RallyMode`` covers points-race sports where
each set is a single race to N points. Both are immutable once a match starts.

Modes are built from the camelCase JSON config stored on rulesets and matches,
e.g. ``{"useAdvantage": false, "setsToWin": 2, "tiebreakTo": 7}``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Mapping, Optional, Union

from .errors import InvalidScoringMode

MatchTiebreakTrigger = Literal["immediate", "tiebreak"]
MatchTiebreakServer = Literal["continue", "reset"]
RallyService = Literal["winner", "alternate"]


@dataclass(frozen=True)
class ScoringMode:
    use_advantage: bool = True
    sets_to_win: int = 2
    games_per_set: int = 6
    tiebreak_at: Optional[int] = 6
    points_to_win_tiebreak: int = 7
    final_set_tiebreak_points: Optional[int] = None
    use_match_tiebreak: bool = False
    match_tiebreak_points: int = 10
    match_tiebreak_trigger: MatchTiebreakTrigger = "immediate"
    match_tiebreak_server: MatchTiebreakServer = "continue"

    kind = "tennis"

    def __post_init__(self) -> None:
        _require_positive("setsToWin", self.sets_to_win)
        if self.sets_to_win not in (1, 2, 3):
            raise InvalidScoringMode("setsToWin must be 1, 2 or 3")
        _require_positive("gamesPerSet", self.games_per_set)
        _require_positive("pointsToWinTiebreak", self.points_to_win_tiebreak)
        _require_positive("matchTiebreakPoints", self.match_tiebreak_points)
        if self.final_set_tiebreak_points is not None:
            _require_positive("finalSetTiebreakTo", self.final_set_tiebreak_points)
        if self.tiebreak_at is not None:
            _require_positive("tiebreakAt", self.tiebreak_at)
            if self.tiebreak_at > self.games_per_set:
                raise InvalidScoringMode("tiebreakAt cannot exceed gamesPerSet")
        if self.match_tiebreak_trigger not in ("immediate", "tiebreak"):
            raise InvalidScoringMode(
                "matchTiebreakTrigger must be 'immediate' or 'tiebreak'"
            )
        if self.match_tiebreak_server not in ("continue", "reset"):
            raise InvalidScoringMode(
                "matchTiebreakServer must be 'continue' or 'reset'"
            )
        if (
            self.use_match_tiebreak
            and self.match_tiebreak_trigger == "tiebreak"
            and self.tiebreak_at is None
        ):
            raise InvalidScoringMode(
                "a match tiebreak triggered at tiebreakAt requires tiebreakAt"
            )

    def to_config(self) -> Dict[str, Any]:
        return {
            "useAdvantage": self.use_advantage,
            "setsToWin": self.sets_to_win,
            "gamesPerSet": self.games_per_set,
            "tiebreakAt": self.tiebreak_at,
            "tiebreakTo": self.points_to_win_tiebreak,
            "finalSetTiebreakTo": self.final_set_tiebreak_points,
            "useMatchTiebreak": self.use_match_tiebreak,
            "matchTiebreakPoints": self.match_tiebreak_points,
            "matchTiebreakTrigger": self.match_tiebreak_trigger,
            "matchTiebreakServer": self.match_tiebreak_server,
        }


@dataclass(frozen=True)
class RallyMode:
    sets_to_win: int = 3
    points_per_set: int = 25
    points_per_deciding_set: int = 15
    min_lead: int = 2
    point_cap: Optional[int] = None
    service: RallyService = "winner"
    serves_per_turn: int = 2

    kind = "rally"

    def __post_init__(self) -> None:
        _require_positive("setsToWin", self.sets_to_win)
        if self.sets_to_win not in (1, 2, 3):
            raise InvalidScoringMode("setsToWin must be 1, 2 or 3")
        _require_positive("pointsTo", self.points_per_set)
        _require_positive("decidingSetPointsTo", self.points_per_deciding_set)
        _require_positive("winBy", self.min_lead)
        _require_positive("servesPerTurn", self.serves_per_turn)
        if self.point_cap is not None:
            _require_positive("maxPoint", self.point_cap)
            if self.point_cap < max(self.points_per_set, self.points_per_deciding_set):
                raise InvalidScoringMode("maxPoint cannot be below pointsTo")
        if self.service not in ("winner", "alternate"):
            raise InvalidScoringMode("service must be 'winner' or 'alternate'")

    def to_config(self) -> Dict[str, Any]:
        return {
            "setsToWin": self.sets_to_win,
            "pointsTo": self.points_per_set,
            "decidingSetPointsTo": self.points_per_deciding_set,
            "winBy": self.min_lead,
            "maxPoint": self.point_cap,
            "service": self.service,
            "servesPerTurn": self.serves_per_turn,
        }


AnyMode = Union[ScoringMode, RallyMode]


def _require_positive(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidScoringMode(f"{name} must be a positive integer")


def _int_or_none(cfg: Mapping[str, Any], key: str) -> Optional[int]:
    value = cfg.get(key)
    if value is None or value is False or value == 0:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidScoringMode(f"{key} must be an integer")
    return value


_ALIASES = ("sets", "bestOf", "goldenPoint")


def _first_present(cfg: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if cfg.get(key) is not None:
            return cfg[key]
    return None


def canonical_config(cfg: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Rewrite option aliases in one config layer to their canonical keys.

    ``sets``/``bestOf`` (best-of counts) become ``setsToWin`` and
    ``goldenPoint`` becomes ``useAdvantage``. Merging canonical layers lets a
    later layer override an earlier one whichever name either used. Within a
    single layer the canonical key beats its aliases.
    """

    cfg = cfg or {}
    out = {k: v for k, v in cfg.items() if k not in _ALIASES}
    for key in ("setsToWin", "useAdvantage"):
        if out.get(key) is None:
            out.pop(key, None)

    if "setsToWin" not in out:
        # Legacy rulesets store the best-of count instead.
        best_of = _first_present(cfg, "sets", "bestOf")
        if best_of is not None:
            if isinstance(best_of, bool) or not isinstance(best_of, int) or best_of <= 0:
                raise InvalidScoringMode("best-of must be a positive integer")
            out["setsToWin"] = best_of // 2 + 1

    if "useAdvantage" not in out and cfg.get("goldenPoint") is not None:
        out["useAdvantage"] = not cfg["goldenPoint"]
    return out


def tennis_mode_from_config(cfg: Mapping[str, Any]) -> ScoringMode:
    """Build a :class:`ScoringMode` from a camelCase config mapping."""

    cfg = canonical_config(cfg)
    games_per_set = cfg.get("gamesPerSet", 6)
    if "tiebreakAt" in cfg:
        tiebreak_at = _int_or_none(cfg, "tiebreakAt")
    elif "tiebreakTo" in cfg and not cfg["tiebreakTo"]:
        # A falsy tiebreakTo means sets are played out by two games.
        tiebreak_at = None
    else:
        tiebreak_at = games_per_set
    return ScoringMode(
        use_advantage=bool(cfg.get("useAdvantage", True)),
        sets_to_win=cfg.get("setsToWin", 2),
        games_per_set=games_per_set,
        tiebreak_at=tiebreak_at,
        points_to_win_tiebreak=cfg.get("tiebreakTo") or 7,
        final_set_tiebreak_points=_int_or_none(cfg, "finalSetTiebreakTo"),
        use_match_tiebreak=bool(cfg.get("useMatchTiebreak", False)),
        match_tiebreak_points=cfg.get("matchTiebreakPoints", 10),
        match_tiebreak_trigger=cfg.get("matchTiebreakTrigger", "immediate"),
        match_tiebreak_server=cfg.get("matchTiebreakServer", "continue"),
    )


def rally_mode_from_config(cfg: Mapping[str, Any]) -> RallyMode:
    """Build a :class:`RallyMode` from a camelCase config mapping."""

    cfg = canonical_config(cfg)
    points_to = cfg.get("pointsTo", 25)
    return RallyMode(
        sets_to_win=cfg.get("setsToWin", 3),
        points_per_set=points_to,
        points_per_deciding_set=cfg.get("decidingSetPointsTo", points_to),
        min_lead=cfg.get("winBy", 2),
        point_cap=_int_or_none(cfg, "maxPoint"),
        service=cfg.get("service", "winner"),
        serves_per_turn=cfg.get("servesPerTurn", 2),
    )


def mode_from_config(kind: str, cfg: Mapping[str, Any] | None) -> AnyMode:
    cfg = dict(cfg or {})
    if kind == "tennis":
        return tennis_mode_from_config(cfg)
    if kind == "rally":
        return rally_mode_from_config(cfg)
    raise InvalidScoringMode(f"unknown scoring kind {kind!r}")
