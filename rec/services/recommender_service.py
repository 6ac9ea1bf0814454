"""
Problem recommender service.
Binds one problem near the user's estimated strength and updates the estimate
when the problem is resolved.
"""

import random
from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from ..exceptions import NoEligibleProblemError
from .problem_service import Division, FilterOptions, Problem, filter_problems
from .rating_service import RatingService, get_rating_service
from .state_store import RecommenderState, StateStore
from .user_service import UserSnapshot


@dataclass(frozen=True)
class BindResult:
    """Outcome of a bind call."""
    problem: Problem
    created: bool


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving the bound problem."""
    problem: Problem
    solved: bool
    old_rating: int
    new_rating: int
    streak: int

    @property
    def delta(self) -> int:
        return self.new_rating - self.old_rating


class ProblemRecommender:
    """
    Practice state machine for a single handle.

    Idle (nothing bound) -> bind -> Bound -> solved/unsolved/drop -> Idle.
    Every transition is saved to the store before returning.
    """

    # New users start above their peak rating
    INITIAL_OFFSET = 200

    # A streak of this length shifts the requested difficulty by STREAK_STEP
    STREAK_THRESHOLD = 2
    STREAK_STEP = 100

    # Primary pool: recent Div. 1 level rounds around the requested difficulty
    OLDEST_ROUND = 1480
    BAND = 50
    PRIMARY_DIVISIONS = (Division.DIV1, Division.DIV12, Division.GLOBAL_ROUND)

    # Fallback pool: Div. 2 rounds, searched in a harder nominal band
    FALLBACK_DIVISIONS = (Division.DIV2,)
    FALLBACK_MIN_OFFSET = 50
    FALLBACK_MAX_OFFSET = 150

    def __init__(
        self,
        state: RecommenderState,
        store: StateStore,
        rating_service: Optional[RatingService] = None,
        rng: Optional[random.Random] = None,
    ):
        self.state = state
        self.store = store
        self.rating_service = rating_service or get_rating_service()
        self.rng = rng or random.Random()

    @classmethod
    def load(
        cls,
        handle: str,
        max_rating: int,
        store: StateStore,
        **kwargs,
    ) -> "ProblemRecommender":
        """
        Load the recommender for ``handle``, creating it on first use.

        ``max_rating`` is the peak rating currently reported by Codeforces;
        the stored copy is refreshed from it.
        """
        state = store.load(handle)
        if state is None:
            state = RecommenderState(
                handle=handle,
                max_rating=max_rating,
                recommended_diff=max_rating + cls.INITIAL_OFFSET,
            )
            store.save(state)
            logger.info(f"Created recommender for {handle} at {state.recommended_diff}")
        elif state.max_rating != max_rating:
            logger.debug(f"Peak rating for {handle} changed: {state.max_rating} -> {max_rating}")
            state.max_rating = max_rating

        return cls(state, store, **kwargs)

    @property
    def bound_problem(self) -> Optional[Problem]:
        return self.state.bind_problem

    def request_difficulty(self) -> int:
        """Recommended difficulty adjusted for the current streak."""
        base = self.state.recommended_diff
        if self.state.streak <= -self.STREAK_THRESHOLD:
            return base - self.STREAK_STEP
        if self.state.streak >= self.STREAK_THRESHOLD:
            return base + self.STREAK_STEP
        return base

    def generate_problem_pool(self, problems: List[Problem], user: Optional[UserSnapshot]) -> List[Problem]:
        """Candidates from the primary pool, or from the fallback pool if that is empty."""
        request_diff = self.request_difficulty()

        pool = filter_problems(problems, FilterOptions(
            min_diff=request_diff - self.BAND,
            max_diff=request_diff + self.BAND,
            oldest_round=self.OLDEST_ROUND,
            divisions=self.PRIMARY_DIVISIONS,
            user=user,
        ))
        if pool:
            logger.debug(f"Primary pool at {request_diff}: {len(pool)} problems")
            return pool

        pool = filter_problems(problems, FilterOptions(
            min_diff=request_diff + self.FALLBACK_MIN_OFFSET,
            max_diff=request_diff + self.FALLBACK_MAX_OFFSET,
            oldest_round=self.OLDEST_ROUND,
            divisions=self.FALLBACK_DIVISIONS,
            user=user,
        ))
        logger.debug(f"Fallback pool at {request_diff}: {len(pool)} problems")
        return pool

    def bind(self, problems: List[Problem], user: Optional[UserSnapshot] = None) -> BindResult:
        """
        Bind a random problem from the pool.

        If a problem is already bound it is returned unchanged. Raises
        NoEligibleProblemError when both pools are empty.
        """
        if self.state.is_bound:
            return BindResult(problem=self.state.bind_problem, created=False)

        pool = self.generate_problem_pool(problems, user)
        if not pool:
            raise NoEligibleProblemError(self.request_difficulty())

        self.state.bind_problem = self.rng.choice(pool)
        self.store.save(self.state)
        logger.info(f"Bound {self.state.bind_problem.combined_id} ({self.state.bind_problem.rating})")
        return BindResult(problem=self.state.bind_problem, created=True)

    def resolve(self, solved: bool) -> Optional[Resolution]:
        """Apply the rating update for the bound problem and unbind it. None if nothing is bound."""
        if not self.state.is_bound:
            return None

        problem = self.state.bind_problem
        old_rating = self.state.recommended_diff
        self.state.recommended_diff = self.rating_service.rating_change(old_rating, problem.rating, solved)
        self.state.streak = self.rating_service.update_streak(self.state.streak, solved)
        self.state.bind_problem = None
        self.store.save(self.state)

        logger.info(
            f"{'Solved' if solved else 'Unsolved'} {problem.combined_id}: "
            f"{old_rating} -> {self.state.recommended_diff}, streak {self.state.streak}"
        )
        return Resolution(
            problem=problem,
            solved=solved,
            old_rating=old_rating,
            new_rating=self.state.recommended_diff,
            streak=self.state.streak,
        )

    def solve(self) -> Optional[Resolution]:
        return self.resolve(True)

    def unsolve(self) -> Optional[Resolution]:
        return self.resolve(False)

    def drop(self) -> Optional[Problem]:
        """Unbind without touching the rating or streak. None if nothing is bound."""
        if not self.state.is_bound:
            return None

        problem = self.state.bind_problem
        self.state.bind_problem = None
        self.store.save(self.state)
        logger.info(f"Dropped {problem.combined_id}")
        return problem

    def describe(self) -> str:
        bound = str(self.state.bind_problem) if self.state.is_bound else "nan"
        return "\n".join([
            f"handle: {self.state.handle}",
            f"max_rating: {self.state.max_rating}",
            f"recommended_diff: {self.state.recommended_diff}",
            f"bind_problem: {bound}",
            f"streak: {self.state.streak}",
        ])
