"""
SQLAlchemy database models for the recommender state.
"""

from sqlalchemy import Column, Integer, String, JSON, DateTime
from sqlalchemy.sql import func

from .database import Base


class RecommenderStateRecord(Base):
    """Persisted recommender state, one row per handle."""
    __tablename__ = "recommender_state"

    handle = Column(String(64), primary_key=True)

    # Peak rating reported by Codeforces, refreshed on every load
    max_rating = Column(Integer, nullable=False)

    # Elo-style estimate of the user's solving strength
    recommended_diff = Column(Integer, nullable=False)

    # Bound problem record; the unbound state is stored as Problem.unit()
    bind_problem = Column(JSON, nullable=False)

    # Signed count of consecutive same-outcome resolutions
    streak = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
