"""Padel scoring preset.
Tennis rules, optionally with a golden point at deuce.

``config`` may contain ``tiebreakTo`` – the number of tiebreak points
required to win a set (default ``7``) – ``sets`` – the best-of value for the
match – and ``goldenPoint`` – sudden death at 40-40 instead of advantage.
Doubles formats commonly replace the third set with a match tiebreak via
``useMatchTiebreak``.
"""

from typing import Dict, Optional

from .modes import ScoringMode, canonical_config, tennis_mode_from_config

SPORT_ID = "padel"
NAME = "Padel"
KIND = "tennis"

DEFAULT_CONFIG: Dict = {
    "sets": 3,
    "goldenPoint": False,
    "tiebreakTo": 7,
}


def mode(config: Optional[Dict] = None) -> ScoringMode:
    return tennis_mode_from_config(
        {**canonical_config(DEFAULT_CONFIG), **canonical_config(config)}
    )
