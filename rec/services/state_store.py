"""
Recommender state persistence.
The recommender talks to a StateStore; the SQL store is the default backend.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import CorruptLocalStateError
from ..models import RecommenderStateRecord
from .problem_service import Problem


@dataclass
class RecommenderState:
    """Mutable practice state for one handle."""
    handle: str
    max_rating: int
    recommended_diff: int
    bind_problem: Optional[Problem] = None
    streak: int = 0

    @property
    def is_bound(self) -> bool:
        return self.bind_problem is not None

    def to_dict(self) -> Dict[str, Any]:
        """Wire form; an empty binding is written as ``Problem.unit()``."""
        bound = self.bind_problem if self.bind_problem is not None else Problem.unit()
        return {
            "handle": self.handle,
            "max_rating": self.max_rating,
            "recommended_diff": self.recommended_diff,
            "bind_problem": bound.to_dict(),
            "streak": self.streak,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecommenderState":
        try:
            bound = Problem.from_dict(data["bind_problem"])
            return cls(
                handle=data["handle"],
                max_rating=int(data["max_rating"]),
                recommended_diff=int(data["recommended_diff"]),
                bind_problem=None if bound.is_unit else bound,
                streak=int(data["streak"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CorruptLocalStateError("recommender state", f"{type(e).__name__}: {e}") from e


class StateStore(Protocol):
    """Protocol for recommender state storage."""

    def load(self, handle: str) -> Optional[RecommenderState]:
        """Return the stored state for ``handle``, or None if there is none."""
        ...

    def save(self, state: RecommenderState) -> None:
        """Persist ``state``, replacing any previous state for its handle."""
        ...


class InMemoryStateStore:
    """State store kept in a dict of wire records."""

    def __init__(self):
        self.records: Dict[str, Dict[str, Any]] = {}

    def load(self, handle: str) -> Optional[RecommenderState]:
        record = self.records.get(handle)
        return RecommenderState.from_dict(record) if record is not None else None

    def save(self, state: RecommenderState) -> None:
        self.records[state.handle] = state.to_dict()


class SqlStateStore:
    """State store backed by the recommender_state table."""

    def __init__(self, session_factory=None):
        if session_factory is None:
            from ..database import SessionLocal, init_db
            try:
                init_db()
            except SQLAlchemyError as e:
                raise CorruptLocalStateError("recommender state", str(e)) from e
            session_factory = SessionLocal
        self.session_factory = session_factory

    def load(self, handle: str) -> Optional[RecommenderState]:
        db = self.session_factory()
        try:
            row = db.query(RecommenderStateRecord).filter(
                RecommenderStateRecord.handle == handle,
            ).first()
            if row is None:
                return None
            return RecommenderState.from_dict({
                "handle": row.handle,
                "max_rating": row.max_rating,
                "recommended_diff": row.recommended_diff,
                "bind_problem": row.bind_problem,
                "streak": row.streak,
            })
        except SQLAlchemyError as e:
            raise CorruptLocalStateError("recommender state", str(e)) from e
        finally:
            db.close()

    def save(self, state: RecommenderState) -> None:
        record = state.to_dict()
        db = self.session_factory()
        try:
            row = db.get(RecommenderStateRecord, state.handle)
            if row is None:
                row = RecommenderStateRecord(handle=state.handle)
                db.add(row)
            row.max_rating = record["max_rating"]
            row.recommended_diff = record["recommended_diff"]
            row.bind_problem = record["bind_problem"]
            row.streak = record["streak"]
            db.commit()
            logger.debug(f"Saved recommender state for {state.handle}")
        except SQLAlchemyError as e:
            db.rollback()
            raise CorruptLocalStateError("recommender state", str(e)) from e
        finally:
            db.close()
