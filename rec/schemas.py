"""
Pydantic schemas for Codeforces API payloads.
Cached responses are validated through these models before use.
"""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List


# =============================================================================
# Catalog Schemas
# =============================================================================

class ProblemDTO(BaseModel):
    contest_id: Optional[int] = Field(default=None, alias="contestId")
    index: str
    name: str
    rating: Optional[int] = Field(default=None, ge=0)

    model_config = ConfigDict(populate_by_name=True)

    @property
    def is_rated(self) -> bool:
        """Entries without a rating or a contest never become problems."""
        return self.rating is not None and self.contest_id is not None


class ContestDTO(BaseModel):
    id: int
    name: str
    type: str


class ProblemsetResult(BaseModel):
    problems: List[ProblemDTO] = []


# =============================================================================
# User Schemas
# =============================================================================

class SubmissionDTO(BaseModel):
    # Submissions still in the judging queue carry no verdict
    verdict: Optional[str] = None
    problem: ProblemDTO


class UserInfoDTO(BaseModel):
    handle: str
    rank: str = "unrated"
    rating: int = 0
    max_rank: str = Field(default="unrated", alias="maxRank")
    max_rating: int = Field(default=0, alias="maxRating")

    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Response Envelopes
# =============================================================================

class ApiResponse(BaseModel):
    status: str
    comment: Optional[str] = None


class ProblemsetResponse(ApiResponse):
    result: ProblemsetResult


class ContestListResponse(ApiResponse):
    result: List[ContestDTO]


class UserStatusResponse(ApiResponse):
    result: List[SubmissionDTO]


class UserInfoResponse(ApiResponse):
    result: List[UserInfoDTO] = Field(..., min_length=1)
