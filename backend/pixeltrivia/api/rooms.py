import math
from flask import Blueprint, jsonify, request, current_app
from pixeltrivia.errors import GameError, ValidationError
from pixeltrivia.services.rooms import answers, lifecycle
from pixeltrivia.services.rooms.codes import format_room_code


rooms = Blueprint('rooms', __name__)


def _success(data, message=None, status=200):
    payload = {'success': True, 'data': data}
    if message:
        payload['message'] = message
    return jsonify(payload), status


def _body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _number(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _text(value):
    return value if isinstance(value, str) else None


@rooms.errorhandler(GameError)
def handle_game_error(exc: GameError):
    if exc.status_code >= 500:
        original = getattr(exc, 'original', None)
        current_app.logger.error(f"[{request.endpoint}] {exc.code}: {exc.message}" + (f" ({original})" if original else ''))
    return jsonify(exc.to_dict()), exc.status_code


@rooms.route('/create', methods=['POST'])
def create_room():
    data = _body()
    room, host = lifecycle.create_room(
        _text(data.get('playerName')),
        avatar=_text(data.get('avatar')),
        game_mode=_text(data.get('gameMode')),
        category=_text(data.get('category')),
        max_players=_number(data.get('maxPlayers')),
        time_limit=_number(data.get('timeLimit')),
        question_count=_number(data.get('questionCount')),
    )
    return _success({
        'roomCode': room.code,
        'displayCode': format_room_code(room.code),
        'playerId': host.id,
        'createdAt': room.created_at.isoformat() if room.created_at else None,
        'status': room.status,
        'maxPlayers': room.max_players,
        'timeLimit': room.time_limit,
        'questionCount': room.total_questions,
        'gameMode': room.game_mode,
    }, 'Room created successfully', 201)


@rooms.route('/join', methods=['POST'])
def join_room():
    data = _body()
    room_code = (_text(data.get('roomCode')) or '').strip().upper()
    player, room, players = lifecycle.join_room(
        room_code,
        _text(data.get('playerName')),
        avatar=_text(data.get('avatar')),
    )
    return _success({
        'playerId': player.id,
        'displayCode': format_room_code(room.code),
        'room': room.to_dict(players),
    }, 'Joined room successfully')


@rooms.route('/<string:code>', methods=['GET'])
def get_room_state(code):
    room, players = lifecycle.get_room_state(code.upper())
    return _success(room.to_dict(players))


@rooms.route('/<string:code>', methods=['DELETE'])
def leave_room(code):
    data = _body()
    action = lifecycle.leave_room(code.upper(), data.get('playerId'))
    return _success({'action': action}, 'Room closed' if action == 'room_closed' else 'Left room')


@rooms.route('/<string:code>/start', methods=['POST'])
def start_game(code):
    data = _body()
    room, first_question = lifecycle.start_game(code.upper(), data.get('playerId'))
    return _success({
        'started': True,
        'totalQuestions': room.total_questions,
        'currentQuestion': first_question.to_public_dict(),
        'questionStartTime': room.question_start_time.isoformat() if room.question_start_time else None,
    }, 'Game started')


@rooms.route('/<string:code>/question', methods=['GET'])
def get_current_question(code):
    player_id = request.args.get('playerId', type=int)
    room, question, player, players = lifecycle.get_current_question(code.upper(), player_id)
    return _success({
        'question': question.to_public_dict(),
        'totalQuestions': room.total_questions,
        'questionStartTime': room.question_start_time.isoformat() if room.question_start_time else None,
        'timeLimit': room.time_limit,
        'hasAnswered': player.has_answered,
        'players': [p.to_dict() for p in players],
    })


@rooms.route('/<string:code>/answer', methods=['POST'])
def submit_answer(code):
    data = _body()
    result = answers.submit_answer(
        code.upper(),
        data.get('playerId'),
        data.get('answer'),
        _number(data.get('timeMs')),
    )
    return _success(result.to_dict(), 'Correct!' if result.correct else 'Incorrect')


@rooms.route('/<string:code>/next', methods=['POST'])
def advance_question(code):
    data = _body()
    result = lifecycle.advance_question(code.upper(), data.get('playerId'))
    return _success(result.to_dict(), 'Game over' if result.game_over else None)
