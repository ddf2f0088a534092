from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    JSON,
    Integer,
    Index,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from .db import Base

class Sport(Base):
    __tablename__ = "sport"
    id = Column(String, primary_key=True)   # e.g., "tennis", "volleyball"
    name = Column(String, nullable=False, unique=True)

class RuleSet(Base):
    __tablename__ = "ruleset"
    id = Column(String, primary_key=True)
    sport_id = Column(String, ForeignKey("sport.id"), nullable=False)
    name = Column(String, nullable=False)
    config = Column(JSON, nullable=False)

class Match(Base):
    __tablename__ = "match"
    id = Column(String, primary_key=True)
    sport_id = Column(String, ForeignKey("sport.id"), nullable=False)
    ruleset_id = Column(String, ForeignKey("ruleset.id"), nullable=True)
    # Normalised scoring mode, frozen when the match is created.
    scoring_config = Column(JSON, nullable=False)
    scoring_state = Column(JSON, nullable=True)
    # Mirrors scoring_state["version"]; NULL until scoring is initialised.
    scoring_version = Column(Integer, nullable=True)
    status = Column(String, nullable=False, default="scheduled")  # "scheduled" | "live" | "completed"
    winner_side = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

class ScoringLog(Base):
    """Append-only audit trail, one row per accepted scoring mutation."""

    __tablename__ = "scoring_log"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    version = Column(Integer, nullable=False)
    action = Column(String, nullable=False)
    side = Column(Integer, nullable=True)
    score_before = Column(String, nullable=False, default="")
    score_after = Column(String, nullable=False, default="")
    details = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("match_id", "version", name="uq_scoring_log_match_id_version"),
        Index("ix_scoring_log_match_id", "match_id"),
    )
