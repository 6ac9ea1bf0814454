"""
Problem catalog service.
Builds classified problems from raw Codeforces catalog data and filters them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Collection, Dict, List, Optional

from loguru import logger

from ..schemas import ContestDTO, ProblemDTO
from .user_service import UserSnapshot

PROBLEM_URL_BASE = "https://codeforces.com/problemset/problem"


class CompetitionSystem(str, Enum):
    """Contest scoring system as reported by contest.list."""
    CF = "CF"
    ICPC = "ICPC"
    IOI = "IOI"


class Division(str, Enum):
    """Normalized contest tier."""
    DIV1 = "Div1"
    DIV2 = "Div2"
    DIV12 = "Div12"
    GLOBAL_ROUND = "GlobalRound"
    EDUCATIONAL = "Educational"
    OTHER = "Other"

    @property
    def label(self) -> str:
        return DIVISION_LABELS[self]


DIVISION_LABELS = {
    Division.DIV1: "Div. 1",
    Division.DIV2: "Div. 2",
    Division.DIV12: "Div. 1 + 2",
    Division.GLOBAL_ROUND: "Global Round",
    Division.EDUCATIONAL: "Educational",
    Division.OTHER: "Other",
}

# Ordered: "Div. 1 + Div. 2" must be checked before the bare "Div. 2"
DIVISION_RULES = [
    (CompetitionSystem.CF, "(Div. 1)", Division.DIV1),
    (CompetitionSystem.CF, "Div. 1 + Div. 2", Division.DIV12),
    (CompetitionSystem.CF, "Div. 2", Division.DIV2),
    (CompetitionSystem.CF, "Global Round", Division.GLOBAL_ROUND),
    (CompetitionSystem.ICPC, "Educational", Division.EDUCATIONAL),
]


def determine_division(contest_name: str, contest_type: CompetitionSystem) -> Division:
    """Classify a contest from its name and scoring system, first rule wins."""
    for system, marker, division in DIVISION_RULES:
        if contest_type == system and marker in contest_name:
            return division
    return Division.OTHER


@dataclass(frozen=True)
class Problem:
    """A rated catalog problem with its contest classification."""
    contest_id: int
    contest_name: str
    contest_type: CompetitionSystem
    division: Division
    index: str
    name: str
    rating: int

    @property
    def combined_id(self) -> str:
        return f"{self.contest_id}{self.index}"

    @property
    def url(self) -> str:
        return f"{PROBLEM_URL_BASE}/{self.contest_id}/{self.index}"

    def __str__(self) -> str:
        return f"{self.combined_id} - {self.name}\n{self.url}"

    @classmethod
    def unit(cls) -> "Problem":
        """The "no problem" record used on the wire for an empty binding."""
        return cls(
            contest_id=0,
            contest_name="",
            contest_type=CompetitionSystem.CF,
            division=Division.OTHER,
            index="",
            name="",
            rating=0,
        )

    @property
    def is_unit(self) -> bool:
        return self.name == ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contest_id": self.contest_id,
            "contest_name": self.contest_name,
            "contest_type": self.contest_type.value,
            "div": self.division.value,
            "index": self.index,
            "name": self.name,
            "rating": self.rating,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Problem":
        return cls(
            contest_id=int(data["contest_id"]),
            contest_name=data["contest_name"],
            contest_type=CompetitionSystem(data["contest_type"]),
            division=Division(data["div"]),
            index=data["index"],
            name=data["name"],
            rating=int(data["rating"]),
        )


def build_problems(
    problem_dtos: List[ProblemDTO],
    contest_dtos: List[ContestDTO],
) -> List[Problem]:
    """
    Join raw problems with their contests and classify them.

    Problems without a rating or contest id are dropped. Problems whose
    contest is missing from the contest list, or whose contest has an
    unrecognized type, are skipped with a warning.
    """
    contests = {contest.id: contest for contest in contest_dtos}
    problems = []
    skipped = 0

    for dto in problem_dtos:
        if not dto.is_rated:
            continue

        contest = contests.get(dto.contest_id)
        if contest is None:
            skipped += 1
            logger.warning(f"Skipping {dto.contest_id}{dto.index}: contest {dto.contest_id} not in contest list")
            continue

        try:
            contest_type = CompetitionSystem(contest.type)
        except ValueError:
            skipped += 1
            logger.warning(f"Skipping {dto.contest_id}{dto.index}: unknown contest type {contest.type!r}")
            continue

        problems.append(Problem(
            contest_id=dto.contest_id,
            contest_name=contest.name,
            contest_type=contest_type,
            division=determine_division(contest.name, contest_type),
            index=dto.index,
            name=dto.name,
            rating=dto.rating,
        ))

    logger.debug(f"Built {len(problems)} problems ({skipped} skipped)")
    return problems


@dataclass
class FilterOptions:
    """Constraints for selecting problems from the catalog."""
    min_diff: int
    max_diff: int
    divisions: Collection[Division] = field(default_factory=list)
    oldest_round: Optional[int] = None
    user: Optional[UserSnapshot] = None
    pool_size: Optional[int] = None


def filter_problems(problems: List[Problem], options: FilterOptions) -> List[Problem]:
    """
    Return the problems matching every constraint in ``options``.

    Input order is preserved. ``pool_size`` stops accumulation once reached,
    so the earliest matches survive.
    """
    divisions = set(options.divisions)
    result = []

    for problem in problems:
        if options.pool_size is not None and len(result) >= options.pool_size:
            break
        if not options.min_diff <= problem.rating <= options.max_diff:
            continue
        if options.oldest_round is not None and problem.contest_id < options.oldest_round:
            continue
        if problem.division not in divisions:
            continue
        if options.user is not None and options.user.has_seen(problem.combined_id):
            continue
        result.append(problem)

    return result


class ProblemService:
    """Service for loading the classified problem catalog."""

    def __init__(self, catalog):
        """Initialize the problem service on top of a catalog provider."""
        self.catalog = catalog
        self._problems: List[Problem] = []
        self._loaded = False

    def load_problems(self) -> List[Problem]:
        """Build problems from the cached catalog, once per service."""
        if self._loaded:
            return self._problems

        self._problems = build_problems(
            self.catalog.get_problems(),
            self.catalog.get_contests(),
        )
        self._loaded = True
        logger.info(f"Loaded {len(self._problems)} problems")
        return self._problems

    def query(self, options: FilterOptions) -> List[Problem]:
        """Filter the loaded catalog."""
        return filter_problems(self.load_problems(), options)
