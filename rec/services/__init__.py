from .catalog_service import CodeforcesCatalog
from .problem_service import (
    CompetitionSystem, Division, FilterOptions, Problem, ProblemService,
    build_problems, determine_division, filter_problems,
)
from .rating_service import RatingService, get_rating_service
from .recommender_service import BindResult, ProblemRecommender, Resolution
from .state_store import InMemoryStateStore, RecommenderState, SqlStateStore, StateStore
from .user_service import UserSnapshot, build_user_snapshot

__all__ = [
    "BindResult",
    "CodeforcesCatalog",
    "CompetitionSystem",
    "Division",
    "FilterOptions",
    "InMemoryStateStore",
    "Problem",
    "ProblemRecommender",
    "ProblemService",
    "RatingService",
    "RecommenderState",
    "Resolution",
    "SqlStateStore",
    "StateStore",
    "UserSnapshot",
    "build_problems",
    "build_user_snapshot",
    "determine_division",
    "filter_problems",
    "get_rating_service",
]
