from typing import Iterable, Tuple

from quizpool.models import Answer, Question

BASE_POINTS = 100
MAX_SPEED_BONUS = 50
BONUS_DECAY_PER_SECOND = 5
BONUS_WINDOW_SEC = 10
NO_ANSWER = -1


def speed_bonus(time_spent: float) -> int:
    """Bonus for a correct answer: 5 points lost per second, none from 10s on."""
    if time_spent >= BONUS_WINDOW_SEC:
        return 0
    return int(max(0, MAX_SPEED_BONUS - time_spent * BONUS_DECAY_PER_SECOND))


def score_answer(question: Question, selected_index: int, time_spent: float) -> Tuple[bool, int]:
    """Return ``(is_correct, points)`` for one submitted answer.

    A negative ``selected_index`` marks a timeout and is always wrong.
    Correct answers earn 100 points plus the speed bonus (100 to 150).
    """
    is_correct = selected_index >= 0 and selected_index == question.correct_index
    if not is_correct:
        return False, 0
    return True, BASE_POINTS + speed_bonus(time_spent)


def total_score(answers: Iterable[Answer]) -> int:
    return sum(a.points for a in answers)


def correct_count(answers: Iterable[Answer]) -> int:
    return sum(1 for a in answers if a.is_correct)
