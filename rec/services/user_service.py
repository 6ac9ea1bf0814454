"""
User snapshot service.
Collects what the user has already solved or excluded, plus their peak rating.
"""

import json
import os
from dataclasses import dataclass, field
from typing import FrozenSet, List, Set

from loguru import logger

from ..exceptions import CorruptLocalStateError
from ..schemas import SubmissionDTO

ACCEPTED_VERDICT = "OK"


@dataclass(frozen=True)
class UserSnapshot:
    """Read-only view of a user for one invocation."""
    handle: str
    max_rating: int
    accepted: FrozenSet[str] = field(default_factory=frozenset)
    excluded: FrozenSet[str] = field(default_factory=frozenset)

    def has_seen(self, combined_id: str) -> bool:
        """True if the problem is solved or excluded."""
        return combined_id in self.accepted or combined_id in self.excluded


def accepted_problem_ids(submissions: List[SubmissionDTO]) -> Set[str]:
    """Combined ids of accepted submissions on rated contest problems."""
    accepted = set()
    for submission in submissions:
        if submission.verdict != ACCEPTED_VERDICT or not submission.problem.is_rated:
            continue
        accepted.add(f"{submission.problem.contest_id}{submission.problem.index}")
    return accepted


def load_excluded(path: str) -> Set[str]:
    """Read the excluded list; a missing file means nothing is excluded."""
    if not os.path.exists(path):
        return set()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise CorruptLocalStateError(path, str(e)) from e

    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        raise CorruptLocalStateError(path, "expected a JSON array of problem ids")
    return set(data)


def save_excluded(path: str, excluded: Set[str]) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(sorted(excluded), f, indent=2)


def add_excluded(path: str, combined_id: str) -> bool:
    """Exclude a problem from recommendations. Returns False if already excluded."""
    excluded = load_excluded(path)
    if combined_id in excluded:
        return False
    excluded.add(combined_id)
    save_excluded(path, excluded)
    logger.info(f"Excluded {combined_id}")
    return True


def remove_excluded(path: str, combined_id: str) -> bool:
    """Allow a previously excluded problem again. Returns False if it was not excluded."""
    excluded = load_excluded(path)
    if combined_id not in excluded:
        return False
    excluded.discard(combined_id)
    save_excluded(path, excluded)
    logger.info(f"Included {combined_id}")
    return True


def build_user_snapshot(handle: str, catalog, excluded_path: str) -> UserSnapshot:
    """Build the snapshot for ``handle`` from cached submissions and profile."""
    accepted = accepted_problem_ids(catalog.get_submissions(handle))
    excluded = load_excluded(excluded_path)
    user_info = catalog.get_user_info(handle)

    logger.debug(f"{handle}: {len(accepted)} accepted, {len(excluded)} excluded, max rating {user_info.max_rating}")
    return UserSnapshot(
        handle=handle,
        max_rating=user_info.max_rating,
        accepted=frozenset(accepted),
        excluded=frozenset(excluded),
    )
