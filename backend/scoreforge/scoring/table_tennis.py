"""Table tennis scoring preset.

Rally-point scoring to 11 points with a win-by-2 requirement.
Matches default to best-of-5 games. Service changes every two points, and
every point from 10-10.
"""

from typing import Dict, Optional

from .modes import RallyMode, canonical_config, rally_mode_from_config

SPORT_ID = "table_tennis"
NAME = "Table Tennis"
KIND = "rally"

DEFAULT_CONFIG: Dict = {
    "pointsTo": 11,
    "winBy": 2,
    "bestOf": 5,
    "service": "alternate",
    "servesPerTurn": 2,
}


def mode(config: Optional[Dict] = None) -> RallyMode:
    """Build the scoring mode, overriding defaults with ``config``."""
    return rally_mode_from_config(
        {**canonical_config(DEFAULT_CONFIG), **canonical_config(config)}
    )
