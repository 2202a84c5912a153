from dataclasses import dataclass
import logging
import math
from numbers import Real
from typing import Optional

from quizpool.errors import (
    AlreadyAnswered,
    GameNotActive,
    InvalidInput,
    InvalidQuestionIndex,
    PlayerNotFound,
)
from quizpool.models import PLAYING, Answer
from quizpool.services.lifecycle import require_address
from quizpool.services.registry import RoomRegistry
from quizpool.services.scoring import NO_ANSWER, score_answer, speed_bonus

logger = logging.getLogger(__name__)

# longer reported times score the same and must stay JSON-serializable
MAX_RECORDED_TIME_SEC = 24 * 60 * 60


@dataclass(frozen=True)
class SubmissionResult:
    is_correct: bool
    points: int
    player_score: int
    correct_index: int
    explanation: Optional[str] = None

    def to_dict(self):
        return {
            'correct': self.is_correct,
            'points': self.points,
            'playerScore': self.player_score,
            'correctAnswer': self.correct_index,
            'explanation': self.explanation,
        }


def _require_int(value, field):
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f'{field} must be an integer')
    return value


def _parse_time_spent(value):
    """Non-negative seconds, capped at ``MAX_RECORDED_TIME_SEC``."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidInput('timeTaken must be a non-negative number of seconds')
    try:
        seconds = float(value)
    except OverflowError:
        # ints past the float range
        seconds = math.inf if value > 0 else -math.inf
    if math.isnan(seconds) or seconds < 0:
        raise InvalidInput('timeTaken must be a non-negative number of seconds')
    if seconds > MAX_RECORDED_TIME_SEC:
        return MAX_RECORDED_TIME_SEC
    return value


class AnswerHandler:
    """The only write path into a player's answer history."""

    def __init__(self, registry: RoomRegistry, default_time_spent: float = 30):
        self.registry = registry
        self.default_time_spent = default_time_spent

    def submit_answer(self, room_id, player_address, question_index, selected_index, time_spent=None) -> SubmissionResult:
        address = require_address(player_address)
        question_index = _require_int(question_index, 'questionIndex')
        selected_index = _require_int(selected_index, 'answerIndex')
        if time_spent is None:
            time_spent = self.default_time_spent
        time_spent = _parse_time_spent(time_spent)
        if selected_index < 0:
            selected_index = NO_ANSWER

        with self.registry.edit(room_id) as room:
            if room.status != PLAYING:
                raise GameNotActive(status=room.status)
            player = room.find_player(address)
            if player is None:
                raise PlayerNotFound(player=address)
            if not 0 <= question_index < len(room.questions):
                raise InvalidQuestionIndex(question_index=question_index, total=len(room.questions))
            if player.has_answered(question_index):
                raise AlreadyAnswered(question_index=question_index)

            question = room.questions[question_index]
            is_correct, points = score_answer(question, selected_index, time_spent)
            player.record_answer(
                Answer(
                    question_id=question.id,
                    question_index=question_index,
                    selected_index=selected_index,
                    time_spent=time_spent,
                    is_correct=is_correct,
                    points=points,
                ),
                time_bonus=speed_bonus(time_spent) if is_correct else 0,
            )
            room.advance_question_pointer()

        logger.info(
            f"[answer] room={room.id} player={address} q={question_index} correct={is_correct} "
            f"points={points} score={player.score}"
        )
        return SubmissionResult(
            is_correct=is_correct,
            points=points,
            player_score=player.score,
            correct_index=question.correct_index,
            explanation=question.explanation,
        )
