"""Internal application services."""

from .validation import merge_configs, validate_scoring_config
from .lifecycle import on_match_completed, on_match_reopened

__all__ = [
    "merge_configs",
    "validate_scoring_config",
    "on_match_completed",
    "on_match_reopened",
]
