"""
Codeforces catalog provider.
Fetches problems, contests, submissions and user info from the Codeforces API
and keeps each response as a JSON file. Cached files are used when present.
"""

import json
import os
import time
from typing import Any, Dict, List, Optional, Type

import requests
from loguru import logger
from pydantic import ValidationError

from .. import config
from ..exceptions import CatalogFetchError, CorruptLocalStateError
from ..schemas import (
    ApiResponse, ContestDTO, ContestListResponse, ProblemDTO, ProblemsetResponse,
    SubmissionDTO, UserInfoDTO, UserInfoResponse, UserStatusResponse,
)

MAX_RETRIES = 3


def fetch_with_retry(
    session: requests.Session,
    url: str,
    params: Optional[Dict[str, str]] = None,
    max_retries: int = MAX_RETRIES,
    delay: float = config.REQUEST_DELAY,
) -> Dict[str, Any]:
    """Fetch a Codeforces API URL and return the decoded OK payload."""
    last_error = "no attempt made"
    for attempt in range(max_retries):
        try:
            response = session.get(url, params=params, timeout=30)
            if response.status_code == 200:
                data = response.json()
                if data.get("status") != "OK":
                    raise CatalogFetchError(f"API error for {url}: {data.get('comment', 'Unknown error')}")
                return data
            # 400 means a bad request (e.g. unknown handle), retrying won't help
            if response.status_code == 400:
                try:
                    comment = response.json().get("comment", "bad request")
                except ValueError:
                    comment = "bad request"
                raise CatalogFetchError(f"API error for {url}: {comment}")
            last_error = f"status {response.status_code}"
        except (requests.RequestException, ValueError) as e:
            last_error = str(e)

        logger.warning(f"Attempt {attempt + 1}: {last_error} for {url}")
        if attempt < max_retries - 1:
            time.sleep(delay * 2)

    raise CatalogFetchError(f"Failed to fetch {url}: {last_error}")


class CodeforcesCatalog:
    """Fetch-or-use-cached access to the Codeforces API."""

    PROBLEMS_FILE = "problems.json"
    CONTESTS_FILE = "contests.json"

    def __init__(
        self,
        data_dir: str = None,
        api_base: str = None,
        session: Optional[requests.Session] = None,
        request_delay: float = None,
    ):
        self.data_dir = data_dir or config.DATA_DIR
        self.api_base = (api_base or config.CODEFORCES_API_BASE).rstrip("/")
        self.session = session or requests.Session()
        self.request_delay = config.REQUEST_DELAY if request_delay is None else request_delay

    # -------------------------------------------------------------------------
    # Cache files
    # -------------------------------------------------------------------------

    def _path(self, filename: str) -> str:
        return os.path.join(self.data_dir, filename)

    @staticmethod
    def submissions_file(handle: str) -> str:
        return f"submissions_{handle}.json"

    @staticmethod
    def user_info_file(handle: str) -> str:
        return f"user_info_{handle}.json"

    def _fetch(self, method: str, filename: str, params: Optional[Dict[str, str]] = None) -> None:
        """Call an API method and store the raw response under ``filename``."""
        url = f"{self.api_base}/{method}"
        logger.info(f"Fetching {method}...")
        time.sleep(self.request_delay)
        data = fetch_with_retry(self.session, url, params=params, delay=self.request_delay)

        os.makedirs(self.data_dir, exist_ok=True)
        with open(self._path(filename), "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
        logger.debug(f"Saved: {self._path(filename)}")

    def _load(self, filename: str, model: Type[ApiResponse], fetch) -> ApiResponse:
        """Validate a cached response, fetching it first when missing."""
        path = self._path(filename)
        if not os.path.exists(path):
            fetch()

        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = f.read()
            return model.model_validate_json(raw)
        except OSError as e:
            raise CorruptLocalStateError(path, str(e)) from e
        except ValidationError as e:
            raise CorruptLocalStateError(path, f"{e.error_count()} validation error(s)") from e

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    def update_problems(self) -> None:
        self._fetch("problemset.problems", self.PROBLEMS_FILE)

    def update_contests(self) -> None:
        self._fetch("contest.list", self.CONTESTS_FILE)

    def update_submissions(self, handle: str) -> None:
        self._fetch("user.status", self.submissions_file(handle), {"handle": handle})

    def update_user_info(self, handle: str) -> None:
        self._fetch("user.info", self.user_info_file(handle), {"handles": handle})

    def update_all(self, handle: str) -> None:
        """Refresh every cached artifact for ``handle``."""
        self.update_problems()
        self.update_contests()
        self.update_submissions(handle)
        self.update_user_info(handle)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_problems(self) -> List[ProblemDTO]:
        response = self._load(self.PROBLEMS_FILE, ProblemsetResponse, self.update_problems)
        return response.result.problems

    def get_contests(self) -> List[ContestDTO]:
        response = self._load(self.CONTESTS_FILE, ContestListResponse, self.update_contests)
        return response.result

    def get_submissions(self, handle: str) -> List[SubmissionDTO]:
        response = self._load(
            self.submissions_file(handle),
            UserStatusResponse,
            lambda: self.update_submissions(handle),
        )
        return response.result

    def get_user_info(self, handle: str) -> UserInfoDTO:
        response = self._load(
            self.user_info_file(handle),
            UserInfoResponse,
            lambda: self.update_user_info(handle),
        )
        return response.result[0]
