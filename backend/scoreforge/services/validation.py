from typing import Any, Dict, Mapping, Optional

from ..scoring import SPORTS, mode_for_sport
from ..scoring.errors import InvalidScoringMode
from ..scoring.modes import AnyMode, canonical_config

_SHARED_KEYS = frozenset({"sets", "bestOf", "setsToWin"})

CONFIG_KEYS: dict[str, frozenset[str]] = {
    "tennis": _SHARED_KEYS
    | {
        "useAdvantage",
        "goldenPoint",
        "gamesPerSet",
        "tiebreakAt",
        "tiebreakTo",
        "finalSetTiebreakTo",
        "useMatchTiebreak",
        "matchTiebreakPoints",
        "matchTiebreakTrigger",
        "matchTiebreakServer",
    },
    "rally": _SHARED_KEYS
    | {
        "pointsTo",
        "decidingSetPointsTo",
        "winBy",
        "maxPoint",
        "service",
        "servesPerTurn",
    },
}


def validate_scoring_config(
    sport_id: str,
    config: Optional[Mapping[str, Any]] = None,
) -> AnyMode:
    """Validate a ruleset/match scoring config and return the resolved mode.

    Rules:
    - The sport must have a scoring preset
    - ``config`` must be an object (or omitted)
    - Only keys understood by the sport's scoring kind are accepted
    - Values must satisfy the mode's own constraints (see ``scoring.modes``)
    """

    preset = SPORTS.get(sport_id)
    if preset is None:
        raise InvalidScoringMode(f"sport '{sport_id}' has no live scoring support")
    if config is None:
        config = {}
    if not isinstance(config, Mapping):
        raise InvalidScoringMode("scoring config must be an object")

    unknown = sorted(set(config) - CONFIG_KEYS[preset.KIND])
    if unknown:
        raise InvalidScoringMode(
            f"unknown scoring option(s) for {preset.NAME}: {', '.join(unknown)}"
        )

    try:
        return mode_for_sport(sport_id, dict(config))
    except (TypeError, ValueError) as exc:
        if isinstance(exc, InvalidScoringMode):
            raise
        raise InvalidScoringMode(f"invalid scoring config: {exc}") from exc


def merge_configs(*configs: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Shallow-merge configs left to right; later values win.

    Each layer is first rewritten to canonical option names, so a later
    ``sets`` overrides an earlier ``setsToWin`` and a later ``goldenPoint``
    overrides an earlier ``useAdvantage``.
    """

    merged: Dict[str, Any] = {}
    for cfg in configs:
        if cfg:
            merged.update(canonical_config(cfg))
    return merged
