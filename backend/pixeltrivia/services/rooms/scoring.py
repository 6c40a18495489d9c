import math

BASE_SCORE = 100
TIME_BONUS_MULTIPLIER = 0.5


def calculate_score(is_correct: bool, elapsed_ms: float, time_limit_ms: float,
                    base_score: int = BASE_SCORE,
                    time_bonus_multiplier: float = TIME_BONUS_MULTIPLIER) -> int:
    """Points for one answer.

    Incorrect answers score 0. Correct answers score ``base_score`` plus a
    bonus proportional to the unused share of the time limit, so an instant
    answer earns ``base_score * (1 + time_bonus_multiplier)`` and one at (or
    past) the limit still earns ``base_score``. Halves round up.
    """
    if not is_correct:
        return 0
    if time_limit_ms > 0:
        remaining_fraction = 1 - min(elapsed_ms, time_limit_ms) / time_limit_ms
    else:
        remaining_fraction = 0.0
    return int(math.floor(base_score * (1 + remaining_fraction * time_bonus_multiplier) + 0.5))
