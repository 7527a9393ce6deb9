from typing import NamedTuple

STROKE_POINTS = 100
TIME_WINDOW_SEC = 60
TIME_BONUS_PER_SEC = 10


class GuessScore(NamedTuple):
    correct: bool
    score: int
    base_score: int
    time_bonus: int


def calculate_base_score(total_strokes: int, viewed_strokes: float) -> int:
    """Points for every stroke still hidden when the guess came in.

    ``viewed_strokes`` may be fractional (a stroke half drawn at guess
    time). Over-counted progress is clamped so the result is never negative.
    """
    remaining = total_strokes - viewed_strokes
    return max(0, int(round(remaining * STROKE_POINTS)))


def calculate_time_bonus(elapsed_sec: float) -> int:
    return max(0, int(round((TIME_WINDOW_SEC - elapsed_sec) * TIME_BONUS_PER_SEC)))


def normalize_answer(text) -> str:
    return (text or '').strip().lower()


def is_correct_guess(guess, answer) -> bool:
    normalized = normalize_answer(guess)
    return bool(normalized) and normalized == normalize_answer(answer)


def score_guess(correct: bool, total_strokes: int, viewed_strokes: float, elapsed_sec: float) -> GuessScore:
    """Score one guess; an incorrect guess is worth nothing at all."""
    if not correct:
        return GuessScore(False, 0, 0, 0)
    base_score = calculate_base_score(total_strokes, viewed_strokes)
    time_bonus = calculate_time_bonus(elapsed_sec)
    return GuessScore(True, base_score + time_bonus, base_score, time_bonus)
