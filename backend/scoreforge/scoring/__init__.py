"""Live scoring engine and the sport presets that parameterise it."""

from typing import Dict, Optional

from . import badminton, padel, table_tennis, tennis, volleyball
from .errors import InvalidScoringMode
from .modes import AnyMode

SPORTS = {
    preset.SPORT_ID: preset
    for preset in (badminton, padel, table_tennis, tennis, volleyball)
}


def mode_for_sport(sport_id: str, config: Optional[Dict] = None) -> AnyMode:
    """Resolve the scoring mode for ``sport_id`` with ``config`` overrides."""

    preset = SPORTS.get(sport_id)
    if preset is None:
        raise InvalidScoringMode(f"unknown sport {sport_id!r}")
    return preset.mode(config)


__all__ = [
    "SPORTS",
    "mode_for_sport",
    "badminton",
    "padel",
    "table_tennis",
    "tennis",
    "volleyball",
]
