"""Errors raised by the live scoring engine.

All of these are expected, caller-recoverable conditions. The HTTP layer maps
them onto problem responses using ``code``.
"""


class ScoringError(Exception):
    """Base class for scoring engine errors."""

    code = "scoring_error"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class AlreadyInitialized(ScoringError):
    code = "scoring_already_initialized"

    def __init__(self) -> None:
        super().__init__("scoring has already been initialized for this match")


class ScoringNotInitialized(ScoringError):
    code = "scoring_not_initialized"

    def __init__(self) -> None:
        super().__init__("scoring has not been initialized for this match")


class MatchAlreadyComplete(ScoringError):
    code = "match_already_complete"

    def __init__(self) -> None:
        super().__init__("match is already complete")


class VersionConflict(ScoringError):
    code = "scoring_version_conflict"

    def __init__(self, expected: int, actual: int | None = None) -> None:
        if actual is None:
            detail = f"version {expected} is stale; refresh and try again"
        else:
            detail = (
                f"version {expected} does not match current version {actual}; "
                "refresh and try again"
            )
        super().__init__(detail)
        self.expected = expected
        self.actual = actual


class NothingToUndo(ScoringError):
    code = "scoring_nothing_to_undo"

    def __init__(self) -> None:
        super().__init__("no history available to undo")


class InvalidScoringEvent(ScoringError):
    code = "scoring_event_invalid"


class InvalidScoringMode(ScoringError, ValueError):
    code = "scoring_mode_invalid"
