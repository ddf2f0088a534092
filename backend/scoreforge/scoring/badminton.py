"""Badminton scoring preset.

Rally scoring to 21 points with a win-by-2 requirement and a 30-point cap.
Matches default to best-of-3 games; the rally winner serves.
"""

from typing import Dict, Optional

from .modes import RallyMode, canonical_config, rally_mode_from_config

SPORT_ID = "badminton"
NAME = "Badminton"
KIND = "rally"

DEFAULT_CONFIG: Dict = {
    "pointsTo": 21,
    "winBy": 2,
    "bestOf": 3,
    "maxPoint": 30,
    "service": "winner",
}


def mode(config: Optional[Dict] = None) -> RallyMode:
    """Build the scoring mode, overriding defaults with ``config``."""

    return rally_mode_from_config(
        {**canonical_config(DEFAULT_CONFIG), **canonical_config(config)}
    )
