"""
Rating calculation service.
Elo-style update of the recommended difficulty, with the problem as opponent.
"""

import math
from typing import Optional


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero."""
    magnitude = abs(value)
    whole = math.floor(magnitude)
    # the fractional part is exact, unlike magnitude + 0.5
    if magnitude - whole >= 0.5:
        whole += 1
    return int(math.copysign(whole, value))


class RatingService:
    """Service for rating and streak updates."""

    # Elo constants
    K_FACTOR = 24
    SCALE = 400

    def expected_score(self, rating: int, problem_rating: int) -> float:
        """Probability of solving a problem of ``problem_rating`` at ``rating``."""
        return 1.0 / (1.0 + 10.0 ** ((problem_rating - rating) / self.SCALE))

    def rating_change(self, rating: int, problem_rating: int, solved: bool) -> int:
        """Return the new rating after a solved/unsolved attempt."""
        score = 1.0 if solved else 0.0
        expected = self.expected_score(rating, problem_rating)
        return rating + round_half_away(self.K_FACTOR * (score - expected))

    def update_streak(self, streak: int, solved: bool) -> int:
        """A reversal restarts the streak at +1/-1 instead of counting back to zero."""
        if solved:
            return max(streak + 1, 1)
        return min(streak - 1, -1)


# Singleton instance
_rating_service: Optional[RatingService] = None


def get_rating_service() -> RatingService:
    """Get the singleton rating service instance."""
    global _rating_service
    if _rating_service is None:
        _rating_service = RatingService()
    return _rating_service
