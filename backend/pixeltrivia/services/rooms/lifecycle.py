"""Room lifecycle: create, join, start, advance, leave.

Room state machine::

    waiting --start--> active --advance (last question)--> finished
    waiting/active --host leaves--> finished

``finished`` is terminal. Every check below is a read followed by a
separate write against the store, so two requests racing for the same
room can both pass a check before either write lands.
"""

import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from flask import current_app

from pixeltrivia.errors import (
    AuthorizationError,
    CapacityError,
    ConflictError,
    DatabaseError,
    ExhaustedError,
    InsufficientPlayersError,
    InvalidStateError,
    NoContentError,
    NotFoundError,
    ValidationError,
)
from pixeltrivia.models import MAX_DB_INTEGER, GameQuestion, Player, Room, utcnow
from . import store
from .codes import generate_room_code, is_valid_room_code

DEFAULT_AVATAR = 'knight'
DEFAULT_GAME_MODE = 'quick'


def config_value(name: str, default):
    value = current_app.config.get(name, default)
    return type(default)(value)


def _clamp(value, low: int, high: int, default: int) -> int:
    if value is None:
        return default
    return int(min(max(low, value), high))


def require_room_code(code, field_name: str = 'code') -> str:
    if not is_valid_room_code(code):
        raise ValidationError('Invalid room code format', field=field_name)
    return code


def require_player_id(player_id) -> int:
    if isinstance(player_id, bool) or not isinstance(player_id, int) or player_id <= 0:
        raise ValidationError('Player ID is required', field='playerId')
    if player_id > MAX_DB_INTEGER:
        # No row can carry this id
        raise NotFoundError('player', player_id)
    return player_id


def _require_player_name(name) -> str:
    name = name.strip() if isinstance(name, str) else ''
    low = config_value('MIN_NICKNAME_LENGTH', 1)
    high = config_value('MAX_NICKNAME_LENGTH', 20)
    if not low <= len(name) <= high:
        raise ValidationError(f'Player name must be between {low} and {high} characters', field='playerName')
    return name


def require_player(code: str, player_id: int) -> Player:
    player = store.find_player(player_id, code)
    if player is None:
        raise NotFoundError('player', player_id)
    return player


def require_room(code: str) -> Room:
    room = store.find_room(code)
    if room is None:
        raise NotFoundError('room', code)
    return room


def _require_host(code: str, player_id, action: str) -> Tuple[Player, Room]:
    code = require_room_code(code)
    player = require_player(code, require_player_id(player_id))
    if not player.is_host:
        raise AuthorizationError(f'Only the host can {action}', field='playerId')
    return player, require_room(code)


def _reserve_room_code(rng=None) -> str:
    max_attempts = config_value('ROOM_CODE_MAX_ATTEMPTS', 10)
    for attempt in range(1, max_attempts + 1):
        candidate = generate_room_code(rng)
        if not store.room_code_exists(candidate):
            return candidate
        current_app.logger.info(f"[create_room] code collision {candidate} attempt={attempt}")
    current_app.logger.error(f"[create_room] no unique room code after {max_attempts} attempts")
    raise ExhaustedError('Unable to generate unique room code after multiple attempts')


def create_room(host_name, avatar=None, game_mode=None, category=None,
                max_players=None, time_limit=None, question_count=None, rng=None) -> Tuple[Room, Player]:
    """Create a waiting room with its host as the first player.

    Numeric options are clamped into their configured ranges and fall back
    to the defaults when omitted. If the host row cannot be written, the
    just-created room is deleted again so no room is left without a host.
    """
    host_name = _require_player_name(host_name)
    avatar = (avatar or '').strip() or DEFAULT_AVATAR
    game_mode = (game_mode or '').strip() or DEFAULT_GAME_MODE
    category = (category or '').strip() or None

    max_players = _clamp(max_players, 2, config_value('MAX_PLAYERS', 16), config_value('DEFAULT_MAX_PLAYERS', 8))
    time_limit = _clamp(time_limit, config_value('MIN_TIME_LIMIT', 5), config_value('MAX_TIME_LIMIT', 120),
                        config_value('DEFAULT_TIME_LIMIT', 30))
    question_count = _clamp(question_count, config_value('MIN_QUESTIONS', 1), config_value('MAX_QUESTIONS', 50),
                            config_value('DEFAULT_QUESTION_COUNT', 10))

    code = _reserve_room_code(rng)
    room = store.insert_room(
        code=code,
        status='waiting',
        max_players=max_players,
        total_questions=question_count,
        time_limit=time_limit,
        game_mode=game_mode,
        category=category,
        created_at=utcnow(),
    )
    try:
        host = store.insert_player(room_code=code, name=host_name, avatar=avatar, is_host=True)
    except DatabaseError:
        current_app.logger.warning(f"[create_room] host insert failed, removing room={code}")
        try:
            store.delete_room(room)
        except DatabaseError:
            current_app.logger.error(f"[create_room] orphaned room={code} could not be removed")
        raise DatabaseError('Failed to add host player')

    current_app.logger.info(f"[create_room] room={code} host={host.id} max_players={max_players} questions={question_count}")
    return room, host


def join_room(code, player_name, avatar=None) -> Tuple[Player, Room, List[Player]]:
    code = require_room_code(code, 'roomCode')
    player_name = _require_player_name(player_name)
    avatar = (avatar or '').strip() or DEFAULT_AVATAR

    room = require_room(code)
    if room.status != 'waiting':
        raise InvalidStateError(
            'This room is no longer accepting players. The game may have already started.', field='roomCode'
        )
    if store.count_players(code) >= room.max_players:
        raise CapacityError('Room is full', field='roomCode')
    if store.find_player_by_name(code, player_name) is not None:
        raise ConflictError('A player with this name is already in the room', field='playerName')

    player = store.insert_player(room_code=code, name=player_name, avatar=avatar, is_host=False)
    current_app.logger.info(f"[join_room] room={code} player={player.id}")
    return player, room, store.list_players(code)


def get_room_state(code) -> Tuple[Room, List[Player]]:
    code = require_room_code(code)
    room = require_room(code)
    return room, store.list_players(code)


def get_current_question(code, player_id) -> Tuple[Room, GameQuestion, Player, List[Player]]:
    code = require_room_code(code)
    player = require_player(code, require_player_id(player_id))
    room = require_room(code)
    if room.status != 'active':
        raise InvalidStateError('Game is not in progress', field='status')
    question = store.find_game_question(code, room.current_question)
    if question is None:
        raise NotFoundError('question', room.current_question)
    return room, question, player, store.list_players(code, by_score=True)


def start_game(code, player_id) -> Tuple[Room, GameQuestion]:
    """Copy a shuffled selection of bank questions into the room and go active."""
    _, room = _require_host(code, player_id, 'start the game')
    code = room.code
    if room.status != 'waiting':
        raise InvalidStateError('Game has already started or finished', field='status')

    min_players = config_value('MIN_PLAYERS', 2)
    if store.count_players(code) < min_players:
        raise InsufficientPlayersError(f'Need at least {min_players} players to start', field='players')

    pool = store.select_bank_questions(room.category, config_value('QUESTION_POOL_SIZE', 50))
    if not pool:
        current_app.logger.warning(f"[start_game] room={code} no questions for category={room.category!r}")
        raise NoContentError('No questions available for this game configuration')
    random.shuffle(pool)
    selected = pool[:room.total_questions or config_value('DEFAULT_QUESTION_COUNT', 10)]

    game_questions = store.insert_game_questions(code, selected)
    store.update_room(
        room,
        status='active',
        current_question=0,
        total_questions=len(game_questions),
        question_start_time=utcnow(),
    )
    store.reset_players(code, reset_score=True)
    current_app.logger.info(f"[start_game] room={code} questions={len(game_questions)}")
    return room, game_questions[0]


@dataclass
class QuestionResult:
    player_id: int
    player_name: str
    answer: Optional[int]
    correct: bool
    score_gained: int
    total_score: int

    def to_dict(self):
        return {
            'playerId': self.player_id,
            'playerName': self.player_name,
            'answer': self.answer,
            'correct': self.correct,
            'scoreGained': self.score_gained,
            'totalScore': self.total_score,
        }


@dataclass
class AdvanceResult:
    game_over: bool
    correct_answer: Optional[int]
    question_results: List[QuestionResult] = field(default_factory=list)
    next_question: Optional[GameQuestion] = None
    question_start_time: Optional[datetime] = None
    final_scores: List[QuestionResult] = field(default_factory=list)

    def to_dict(self):
        payload = {
            'gameOver': self.game_over,
            'correctAnswer': self.correct_answer,
            'questionResults': [r.to_dict() for r in self.question_results],
        }
        if self.game_over:
            payload['finalScores'] = [
                {'playerId': r.player_id, 'playerName': r.player_name, 'totalScore': r.total_score}
                for r in self.final_scores
            ]
        else:
            payload['nextQuestion'] = self.next_question.to_public_dict() if self.next_question else None
            payload['questionStartTime'] = self.question_start_time.isoformat() if self.question_start_time else None
        return payload


def _question_results(players: List[Player], question_index: int) -> List[QuestionResult]:
    results = []
    for p in players:
        record = p.answer_for(question_index)
        results.append(QuestionResult(
            player_id=p.id,
            player_name=p.name,
            answer=record.get('answer') if record else None,
            correct=bool(record.get('correct')) if record else False,
            score_gained=int(record.get('score', 0)) if record else 0,
            total_score=int(p.score or 0),
        ))
    return results


def advance_question(code, player_id) -> AdvanceResult:
    """Close the current question and move to the next one, or finish the game."""
    _, room = _require_host(code, player_id, 'advance questions')
    code = room.code
    if room.status != 'active':
        raise InvalidStateError('Game is not in progress', field='status')

    index = int(room.current_question or 0)
    question = store.find_game_question(code, index)
    if question is None:
        current_app.logger.warning(f"[advance] room={code} missing game question index={index}")
    correct_answer = question.correct_answer if question else None

    players = store.list_players(code, by_score=True)
    results = _question_results(players, index)

    if index + 1 >= int(room.total_questions or 0):
        store.update_room(room, status='finished', question_start_time=None)
        current_app.logger.info(f"[finish] room={code} finished at question={index}")
        return AdvanceResult(
            game_over=True,
            correct_answer=correct_answer,
            question_results=results,
            final_scores=results,
        )

    started_at = utcnow()
    store.update_room(room, current_question=index + 1, question_start_time=started_at)
    store.reset_players(code)
    next_question = store.find_game_question(code, index + 1)
    current_app.logger.info(f"[advance] room={code} question {index} -> {index + 1}")
    return AdvanceResult(
        game_over=False,
        correct_answer=correct_answer,
        question_results=results,
        next_question=next_question,
        question_start_time=started_at,
    )


def leave_room(code, player_id) -> str:
    """Remove a player; the host leaving closes the room for everyone."""
    code = require_room_code(code)
    player = require_player(code, require_player_id(player_id))
    if player.is_host:
        room = require_room(code)
        store.update_room(room, status='finished', question_start_time=None)
        current_app.logger.info(f"[leave_room] room={code} closed by host={player.id}")
        return 'room_closed'

    store.delete_player(player)
    current_app.logger.info(f"[leave_room] room={code} player={player_id} left")
    return 'player_left'


def purge_stale_rooms(hours: Optional[int] = None) -> int:
    """Delete waiting rooms older than ``hours`` along with their players."""
    hours = config_value('STALE_ROOM_HOURS', 24) if hours is None else hours
    cutoff = utcnow() - timedelta(hours=hours)
    stale = store.find_stale_rooms(cutoff)
    for room in stale:
        store.delete_room(room)
    current_app.logger.info(f"[cleanup] removed {len(stale)} rooms older than {hours}h")
    return len(stale)
