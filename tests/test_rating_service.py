import pytest

from rec.services.rating_service import RatingService, get_rating_service, round_half_away


@pytest.fixture
def service():
    return RatingService()


def test_even_match_solved(service):
    # expected 0.5, delta round(24 * 0.5) = 12
    assert service.expected_score(1500, 1500) == 0.5
    assert service.rating_change(1500, 1500, True) == 1512


def test_even_match_unsolved(service):
    assert service.rating_change(1500, 1500, False) == 1488


def test_hard_problem_unsolved(service):
    # expected ~0.909, delta round(-21.8) = -22
    assert service.expected_score(1500, 1900) == pytest.approx(0.0909, abs=1e-3)
    assert service.rating_change(1500, 1900, False) == 1478


def test_hard_problem_solved(service):
    # 24 * (1 - 0.0909) = 21.8
    assert service.rating_change(1500, 1900, True) == 1522


def test_solved_never_decreases(service):
    for problem_rating in range(800, 3600, 100):
        assert service.rating_change(1500, problem_rating, True) >= 1500


def test_unsolved_never_increases(service):
    for problem_rating in range(800, 3600, 100):
        assert service.rating_change(1500, problem_rating, False) <= 1500


def test_solving_much_easier_problem_barely_moves(service):
    assert service.rating_change(2400, 800, True) == 2400


def test_gain_grows_with_problem_rating(service):
    gains = [service.rating_change(1500, r, True) - 1500 for r in range(1000, 2600, 100)]
    assert gains == sorted(gains)


def test_expected_score_monotonic(service):
    scores = [service.expected_score(1500, r) for r in range(800, 3600, 100)]
    assert scores == sorted(scores, reverse=True)


@pytest.mark.parametrize("value,expected", [
    (0.5, 1),
    (-0.5, -1),
    (1.5, 2),
    (2.5, 3),
    (-2.5, -3),
    (12.0, 12),
    (-21.8, -22),
    (21.4, 21),
    (0.0, 0),
    (0.49999999999999994, 0),
    (-0.49999999999999994, 0),
    (4503599627370497.0, 4503599627370497),
])
def test_round_half_away(value, expected):
    assert round_half_away(value) == expected


def test_streak_counts_consecutive_outcomes(service):
    assert service.update_streak(0, True) == 1
    assert service.update_streak(1, True) == 2
    assert service.update_streak(0, False) == -1
    assert service.update_streak(-1, False) == -2


def test_streak_reversal_resets(service):
    assert service.update_streak(-3, True) == 1
    assert service.update_streak(4, False) == -1


def test_singleton():
    assert get_rating_service() is get_rating_service()
