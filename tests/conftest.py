import json
import random

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from rec.schemas import ContestDTO, ProblemDTO, SubmissionDTO, UserInfoDTO
from rec.services.problem_service import CompetitionSystem, Division, Problem
from rec.services.state_store import InMemoryStateStore


def make_problem(contest_id=1500, index="A", rating=1500, division=Division.DIV1, name=None):
    return Problem(
        contest_id=contest_id,
        contest_name=f"Codeforces Round #{contest_id}",
        contest_type=CompetitionSystem.CF,
        division=division,
        index=index,
        name=name or f"Problem {contest_id}{index}",
        rating=rating,
    )


class FakeCatalog:
    """Catalog provider serving in-memory DTOs."""

    def __init__(self, problems=None, contests=None, submissions=None, max_rating=1700, data_dir=""):
        self.problems = problems or []
        self.contests = contests or []
        self.submissions = submissions or []
        self.user_info = UserInfoDTO(handle="tourist", rating=1600, max_rating=max_rating)
        self.data_dir = data_dir
        self.updated = []

    def get_problems(self):
        return self.problems

    def get_contests(self):
        return self.contests

    def get_submissions(self, handle):
        return self.submissions

    def get_user_info(self, handle):
        return self.user_info

    def update_all(self, handle):
        self.updated.append(handle)


@pytest.fixture
def problem_factory():
    return make_problem


@pytest.fixture
def memory_store():
    return InMemoryStateStore()


@pytest.fixture
def rng():
    return random.Random(7)


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'test_rec.db'}")
    from rec.database import init_db
    init_db(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def broken_database(tmp_path, monkeypatch):
    """Point the default engine at a file that is not a SQLite database."""
    path = tmp_path / "rec.db"
    path.write_bytes(b"this is not a database" * 64)

    import rec.database
    engine = create_engine(f"sqlite:///{path}")
    monkeypatch.setattr(rec.database, "engine", engine)
    monkeypatch.setattr(rec.database, "SessionLocal",
                        sessionmaker(autocommit=False, autoflush=False, bind=engine))
    return path


@pytest.fixture
def contest_dtos():
    return [
        ContestDTO(id=1500, name="Codeforces Round #715 (Div. 1)", type="CF"),
        ContestDTO(id=1501, name="Codeforces Round #715 (Div. 2)", type="CF"),
        ContestDTO(id=1610, name="Codeforces Global Round 17", type="CF"),
        ContestDTO(id=1615, name="Codeforces Round #761 (Div. 1 + Div. 2)", type="CF"),
        ContestDTO(id=1598, name="Educational Codeforces Round 115 (Rated for Div. 2)", type="ICPC"),
        ContestDTO(id=1578, name="ICPC WF Moscow Invitational Contest", type="ICPC"),
    ]


@pytest.fixture
def problem_dtos():
    return [
        ProblemDTO(contestId=1500, index="A", name="Going Home", rating=1800),
        ProblemDTO(contestId=1501, index="C", name="Going Home", rating=1800),
        ProblemDTO(contestId=1610, index="B", name="Kalindrome Array", rating=1100),
        ProblemDTO(contestId=1615, index="D", name="X(or)-mas Tree", rating=2200),
        ProblemDTO(contestId=1598, index="E", name="Staircases", rating=2100),
        ProblemDTO(contestId=1578, index="J", name="Just Kingdom", rating=None),
        ProblemDTO(contestId=None, index="A", name="Acm", rating=1000),
    ]


@pytest.fixture
def submission_dtos():
    return [
        SubmissionDTO(verdict="OK", problem=ProblemDTO(contestId=1500, index="A", name="Going Home", rating=1800)),
        SubmissionDTO(verdict="WRONG_ANSWER", problem=ProblemDTO(contestId=1615, index="D", name="X(or)-mas Tree", rating=2200)),
        SubmissionDTO(verdict="ok", problem=ProblemDTO(contestId=1610, index="B", name="Kalindrome Array", rating=1100)),
        SubmissionDTO(verdict="OK", problem=ProblemDTO(contestId=1578, index="J", name="Just Kingdom", rating=None)),
        SubmissionDTO(verdict=None, problem=ProblemDTO(contestId=1598, index="E", name="Staircases", rating=2100)),
    ]


@pytest.fixture
def fake_catalog(problem_dtos, contest_dtos, submission_dtos, tmp_path):
    return FakeCatalog(problem_dtos, contest_dtos, submission_dtos, data_dir=str(tmp_path))


@pytest.fixture
def api_payloads():
    """Raw Codeforces API responses as written to the cache."""
    return {
        "problems.json": {
            "status": "OK",
            "result": {
                "problems": [
                    {"contestId": 1500, "index": "A", "name": "Going Home", "type": "PROGRAMMING",
                     "rating": 1800, "tags": ["hashing"]},
                    {"contestId": 1578, "index": "J", "name": "Just Kingdom", "type": "PROGRAMMING",
                     "tags": []},
                ],
                "problemStatistics": [],
            },
        },
        "contests.json": {
            "status": "OK",
            "result": [
                {"id": 1500, "name": "Codeforces Round #715 (Div. 1)", "type": "CF", "phase": "FINISHED"},
            ],
        },
        "submissions_tourist.json": {
            "status": "OK",
            "result": [
                {"id": 1, "verdict": "OK",
                 "problem": {"contestId": 1500, "index": "A", "name": "Going Home", "rating": 1800}},
            ],
        },
        "user_info_tourist.json": {
            "status": "OK",
            "result": [
                {"handle": "tourist", "rank": "legendary grandmaster", "rating": 3700,
                 "maxRank": "legendary grandmaster", "maxRating": 3979},
            ],
        },
    }


@pytest.fixture
def cached_data_dir(tmp_path, api_payloads):
    for filename, payload in api_payloads.items():
        (tmp_path / filename).write_text(json.dumps(payload), encoding="utf-8")
    return tmp_path
