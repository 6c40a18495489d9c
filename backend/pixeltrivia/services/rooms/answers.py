from dataclasses import dataclass
from numbers import Real

from flask import current_app

from pixeltrivia.errors import ConflictError, InvalidStateError, ServerError, ValidationError
from pixeltrivia.models import MAX_DB_INTEGER
from . import store
from .lifecycle import config_value, require_player, require_player_id, require_room, require_room_code
from .scoring import BASE_SCORE, TIME_BONUS_MULTIPLIER, calculate_score


@dataclass
class AnswerResult:
    accepted: bool
    correct: bool
    score_gained: int
    total_score: int

    def to_dict(self):
        return {
            'accepted': self.accepted,
            'correct': self.correct,
            'scoreGained': self.score_gained,
            'totalScore': self.total_score,
        }


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def submit_answer(code, player_id, answer_index, elapsed_ms) -> AnswerResult:
    """Score one answer to the room's current question.

    A player gets one answer per question: the stored ``current_answer`` is
    checked right before the write and stays set until the host advances.
    Answers after the time limit are still accepted; they just earn no
    time bonus.
    """
    code = require_room_code(code)
    player_id = require_player_id(player_id)
    if not isinstance(answer_index, int) or isinstance(answer_index, bool) or answer_index < 0:
        raise ValidationError('Answer index is required', field='answer')
    if answer_index > MAX_DB_INTEGER:
        raise ValidationError('Answer index is out of range', field='answer')
    if not _is_number(elapsed_ms) or elapsed_ms < 0:
        raise ValidationError('Time taken is required', field='timeMs')

    room = require_room(code)
    if room.status != 'active':
        raise InvalidStateError('Game is not in progress', field='status')

    player = require_player(code, player_id)
    if player.current_answer is not None:
        raise ConflictError('You have already answered this question', field='answer')

    question_index = int(room.current_question or 0)
    question = store.find_game_question(code, question_index)
    if question is None:
        current_app.logger.error(f"[answer] room={code} active without game question index={question_index}")
        raise ServerError('Question not found')

    is_correct = answer_index == question.correct_answer
    score_gained = calculate_score(
        is_correct,
        elapsed_ms,
        room.time_limit_ms,
        base_score=config_value('BASE_SCORE', BASE_SCORE),
        time_bonus_multiplier=config_value('TIME_BONUS_MULTIPLIER', TIME_BONUS_MULTIPLIER),
    )
    record = {
        'questionIndex': question_index,
        'answer': answer_index,
        'timeMs': elapsed_ms,
        'correct': is_correct,
        'score': score_gained,
    }
    player = store.record_answer(player, record, score_gained)
    current_app.logger.info(
        f"[answer] room={code} player={player_id} question={question_index} correct={is_correct} gained={score_gained}"
    )
    return AnswerResult(accepted=True, correct=is_correct, score_gained=score_gained, total_score=int(player.score))
