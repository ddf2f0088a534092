from fastapi import HTTPException
from pydantic import BaseModel
from typing import Optional

from .scoring.errors import (
    AlreadyInitialized,
    InvalidScoringEvent,
    InvalidScoringMode,
    MatchAlreadyComplete,
    NothingToUndo,
    ScoringError,
    ScoringNotInitialized,
    VersionConflict,
)


class ProblemDetail(BaseModel):
    """RFC 7807 compliant error response."""

    type: str = "about:blank"
    title: str
    detail: Optional[str] = None
    status: int
    instance: Optional[str] = None
    code: str


class DomainException(Exception):
    """Base class for domain-specific exceptions."""

    def __init__(
        self,
        status_code: int,
        title: str,
        *,
        code: str,
        detail: str | None = None,
        type_: str = "about:blank",
    ) -> None:
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type = type_
        self.code = code


class MatchNotFound(DomainException):
    def __init__(self, match_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Match not found",
            detail=f"match '{match_id}' not found",
            code="match_not_found",
        )


class RuleSetNotFound(DomainException):
    def __init__(self, ruleset_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Ruleset not found",
            detail=f"ruleset '{ruleset_id}' not found",
            code="ruleset_not_found",
        )


def http_problem(
    status_code: int,
    detail: str,
    code: str,
    *,
    headers: Optional[dict[str, str]] = None,
) -> HTTPException:
    """Create an HTTPException with an attached problem code."""

    exc = HTTPException(status_code=status_code, detail=detail, headers=headers)
    setattr(exc, "code", code)
    return exc


# Conflicts are surfaced so the scorer can refresh and decide again; they are
# never retried server-side.
_SCORING_STATUS: dict[type, int] = {
    VersionConflict: 409,
    MatchAlreadyComplete: 409,
    AlreadyInitialized: 409,
    NothingToUndo: 409,
    ScoringNotInitialized: 409,
    InvalidScoringMode: 422,
    InvalidScoringEvent: 400,
}


def scoring_problem(exc: ScoringError) -> HTTPException:
    """Translate a scoring engine error into an HTTP problem."""

    status_code = 400
    for cls in type(exc).__mro__:
        if cls in _SCORING_STATUS:
            status_code = _SCORING_STATUS[cls]
            break
    return http_problem(status_code=status_code, detail=exc.detail, code=exc.code)
