"""Tennis scoring preset.
Tracks points → games → sets with tiebreaks at 6-6, best of three by default."""

from typing import Dict, Optional

from .modes import ScoringMode, canonical_config, tennis_mode_from_config

SPORT_ID = "tennis"
NAME = "Tennis"
KIND = "tennis"

DEFAULT_CONFIG: Dict = {
    "sets": 3,
    "tiebreakTo": 7,
}


def mode(config: Optional[Dict] = None) -> ScoringMode:
    """Build the scoring mode, overriding defaults with ``config``."""
    return tennis_mode_from_config(
        {**canonical_config(DEFAULT_CONFIG), **canonical_config(config)}
    )
