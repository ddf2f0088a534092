"""Volleyball scoring preset.

Sets to 25 (deciding set to 15) with a two point lead, best of five.
The team winning a rally serves the next one.
"""

from typing import Dict, Optional

from .modes import RallyMode, canonical_config, rally_mode_from_config

SPORT_ID = "volleyball"
NAME = "Volleyball"
KIND = "rally"

DEFAULT_CONFIG: Dict = {
    "bestOf": 5,
    "pointsTo": 25,
    "decidingSetPointsTo": 15,
    "winBy": 2,
    "service": "winner",
}


def mode(config: Optional[Dict] = None) -> RallyMode:
    return rally_mode_from_config(
        {**canonical_config(DEFAULT_CONFIG), **canonical_config(config)}
    )
