from typing import Any, Dict, List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator, ConfigDict


class SportOut(BaseModel):
    id: str
    name: str
    kind: Literal["tennis", "rally"]
    defaultConfig: Dict[str, Any] = Field(default_factory=dict)


class RuleSetOut(BaseModel):
    id: str
    sport_id: str
    name: str
    config: dict


class RuleSetCreate(BaseModel):
    sport_id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=200)
    config: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        if not isinstance(value, str):
            raise TypeError("name must be a string")
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("name must not be empty")
        return trimmed


class MatchCreate(BaseModel):
    sport: str
    rulesetId: Optional[str] = None
    config: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="forbid")


class MatchIdOut(BaseModel):
    """Schema returned after creating a match."""

    id: str


class InitIn(BaseModel):
    first_server: int = Field(..., alias="firstServer", ge=1, le=2, strict=True)

    model_config = ConfigDict(populate_by_name=True)


class VersionIn(BaseModel):
    """Every mutation carries the version the scorer last saw."""

    version: int = Field(..., ge=1, strict=True)


class PointIn(VersionIn):
    side: int = Field(..., ge=1, le=2, strict=True)


class ServerIn(VersionIn):
    side: int = Field(..., ge=1, le=2, strict=True)


class ScoringOut(BaseModel):
    """Derived scoring view of a live match."""

    version: int
    servingSide: int
    currentGamePoints: List[int]
    currentSetGames: List[int]
    completedSets: List[List[int]]
    setsWon: List[int]
    isTiebreak: bool
    tiebreakKind: Optional[str] = None
    isComplete: bool
    winningSide: Optional[int] = None
    faultPending: bool = False
    aces: List[int] = Field(default_factory=lambda: [0, 0])
    doubleFaults: List[int] = Field(default_factory=lambda: [0, 0])
    matchStartedAt: Optional[datetime] = None
    historyDepth: int = 0
    score: str = ""


class MatchOut(BaseModel):
    """Detailed match information returned by the API."""

    id: str
    sport: str
    rulesetId: Optional[str] = None
    status: Literal["scheduled", "live", "completed"]
    winnerSide: Optional[int] = None
    createdAt: Optional[datetime] = None
    completedAt: Optional[datetime] = None
    config: Dict[str, Any]
    scoring: Optional[ScoringOut] = None
