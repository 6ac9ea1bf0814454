"""Exceptions raised by the recommender and its data layer."""


class RecError(Exception):
    """Base class for all rec errors."""

    pass


class CorruptLocalStateError(RecError):
    """A cached catalog, profile, excluded list or state row could not be read."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Corrupt local data in {source}: {reason}")


class CatalogFetchError(RecError):
    """Codeforces API request failed or returned a non-OK status."""

    pass


class NoEligibleProblemError(RecError):
    """No catalog problem survived filtering during bind."""

    def __init__(self, request_diff: int):
        self.request_diff = request_diff
        super().__init__(
            f"No problem available around difficulty {request_diff}, "
            "loosen constraints or run `rec update`"
        )
