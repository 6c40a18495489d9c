import random
from datetime import timedelta

import pytest

from pixeltrivia import db
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
    ServerError,
    ValidationError,
)
from pixeltrivia.models import GameQuestion, Player, Room, utcnow
from pixeltrivia.services.rooms import answers, lifecycle, store


def _room_with_players(*names, **options):
    room, host = lifecycle.create_room(names[0] if names else 'Alice', **options)
    others = [lifecycle.join_room(room.code, n)[0] for n in names[1:]]
    return room.code, host.id, [p.id for p in others]


def test_create_room_starts_waiting_with_host(flask_app):
    room, host = lifecycle.create_room('  Alice  ', avatar='mage', max_players=4)
    assert room.status == 'waiting'
    assert room.max_players == 4
    assert host.is_host is True
    assert host.score == 0
    assert host.name == 'Alice'
    assert host.avatar == 'mage'
    assert host.room_code == room.code


def test_create_room_name_bounds(flask_app):
    with pytest.raises(ValidationError):
        lifecycle.create_room('')
    with pytest.raises(ValidationError):
        lifecycle.create_room('x' * 21)
    assert lifecycle.create_room('x' * 20)[1].name == 'x' * 20


def test_create_room_retries_on_collision(flask_app, monkeypatch):
    taken = lifecycle.create_room('Alice', rng=random.Random(1))[0].code
    calls = []
    real_exists = store.room_code_exists

    def exists(code):
        calls.append(code)
        return real_exists(code)

    monkeypatch.setattr(store, 'room_code_exists', exists)
    # Same seed yields the taken code first, then a fresh one
    room, _ = lifecycle.create_room('Bob', rng=random.Random(1))
    assert calls[0] == taken
    assert room.code != taken
    assert len(calls) == 2


def test_create_room_gives_up_after_bounded_attempts(flask_app, monkeypatch):
    calls = []

    def always_taken(code):
        calls.append(code)
        return True

    monkeypatch.setattr(store, 'room_code_exists', always_taken)
    with pytest.raises(ExhaustedError):
        lifecycle.create_room('Alice')
    assert len(calls) == 10
    assert Room.query.count() == 0


def test_create_room_removes_room_when_host_insert_fails(flask_app, monkeypatch):
    def broken_insert(**fields):
        raise DatabaseError('Failed to add player')

    monkeypatch.setattr(store, 'insert_player', broken_insert)
    with pytest.raises(DatabaseError):
        lifecycle.create_room('Alice')
    assert Room.query.count() == 0


def test_only_one_host_per_room(flask_app):
    code, host_id, _ = _room_with_players('Alice', 'Bob', 'Cara')
    hosts = Player.query.filter_by(room_code=code, is_host=True).all()
    assert [h.id for h in hosts] == [host_id]


def test_join_rules(flask_app):
    code, _, _ = _room_with_players('Alice', 'Bob', max_players=3)
    with pytest.raises(ConflictError):
        lifecycle.join_room(code, 'Bob')
    lifecycle.join_room(code, 'Cara')
    with pytest.raises(CapacityError):
        lifecycle.join_room(code, 'Dan')
    with pytest.raises(NotFoundError):
        lifecycle.join_room('AAAAAA', 'Dan')
    with pytest.raises(ValidationError):
        lifecycle.join_room('aaaaaa', 'Dan')


def test_start_game_copies_questions_in_order(flask_app, seeded_bank):
    code, host_id, (bob,) = _room_with_players('Alice', 'Bob', question_count=5)
    room, first = lifecycle.start_game(code, host_id)
    assert room.status == 'active'
    assert room.current_question == 0
    assert room.total_questions == 5
    assert room.question_start_time is not None

    rows = GameQuestion.query.filter_by(room_code=code).order_by(GameQuestion.question_index).all()
    assert [r.question_index for r in rows] == [0, 1, 2, 3, 4]
    assert first.question_index == 0
    assert first.question_text == rows[0].question_text
    assert 'correctAnswer' not in first.to_public_dict()

    with pytest.raises(InvalidStateError):
        lifecycle.start_game(code, host_id)


def test_start_game_uses_fewer_questions_when_bank_is_small(flask_app, uniform_bank):
    code, host_id, _ = _room_with_players('Alice', 'Bob', question_count=20)
    room, _ = lifecycle.start_game(code, host_id)
    assert room.total_questions == uniform_bank == 5


def test_start_game_filters_by_category(flask_app, seeded_bank):
    code, host_id, _ = _room_with_players('Alice', 'Bob', category='geo')
    lifecycle.start_game(code, host_id)
    categories = {q.category for q in GameQuestion.query.filter_by(room_code=code)}
    assert categories == {'Geography'}


def test_start_game_guards(flask_app, seeded_bank):
    code, host_id, _ = _room_with_players('Alice')
    with pytest.raises(InsufficientPlayersError):
        lifecycle.start_game(code, host_id)
    bob = lifecycle.join_room(code, 'Bob')[0].id
    with pytest.raises(AuthorizationError):
        lifecycle.start_game(code, bob)
    with pytest.raises(NotFoundError):
        lifecycle.start_game(code, 4242)


def test_start_game_without_matching_questions(flask_app, seeded_bank):
    code, host_id, _ = _room_with_players('Alice', 'Bob', category='Astrology')
    with pytest.raises(NoContentError):
        lifecycle.start_game(code, host_id)
    assert store.find_room(code).status == 'waiting'


def test_start_game_resets_scores(flask_app, uniform_bank):
    code, host_id, (bob,) = _room_with_players('Alice', 'Bob')
    player = store.find_player(bob, code)
    player.score = 40
    db.session.commit()
    lifecycle.start_game(code, host_id)
    assert store.find_player(bob, code).score == 0


def test_one_answer_per_question(flask_app, uniform_bank):
    code, host_id, (bob,) = _room_with_players('Alice', 'Bob', question_count=3)
    lifecycle.start_game(code, host_id)

    first = answers.submit_answer(code, bob, 1, 0)
    assert first.accepted and first.correct and first.score_gained == 150
    for _ in range(2):
        with pytest.raises(ConflictError):
            answers.submit_answer(code, bob, 0, 10)

    lifecycle.advance_question(code, host_id)
    again = answers.submit_answer(code, bob, 0, 10)
    assert again.accepted and again.correct is False
    assert again.total_score == 150

    history = store.find_player(bob, code).answer_history
    assert [r['questionIndex'] for r in history] == [0, 1]
    assert history[0] == {'questionIndex': 0, 'answer': 1, 'timeMs': 0, 'correct': True, 'score': 150}


def test_late_answers_are_accepted_without_bonus(flask_app, uniform_bank):
    code, host_id, (bob,) = _room_with_players('Alice', 'Bob', time_limit=10)
    lifecycle.start_game(code, host_id)
    result = answers.submit_answer(code, bob, 1, 60000)
    assert result.accepted is True
    assert result.score_gained == 100


def test_submit_answer_validation(flask_app, uniform_bank):
    code, host_id, _ = _room_with_players('Alice', 'Bob')
    lifecycle.start_game(code, host_id)
    with pytest.raises(ValidationError):
        answers.submit_answer(code, host_id, -1, 0)
    with pytest.raises(ValidationError):
        answers.submit_answer(code, host_id, 0, -5)
    with pytest.raises(ValidationError):
        answers.submit_answer(code, host_id, True, 0)


def test_submit_answer_missing_question_is_server_error(flask_app, uniform_bank):
    code, host_id, _ = _room_with_players('Alice', 'Bob')
    lifecycle.start_game(code, host_id)
    GameQuestion.query.filter_by(room_code=code, question_index=0).delete()
    db.session.commit()
    with pytest.raises(ServerError):
        answers.submit_answer(code, host_id, 1, 0)


def test_advance_moves_one_question_at_a_time(flask_app, uniform_bank):
    code, host_id, (bob,) = _room_with_players('Alice', 'Bob', question_count=3)
    lifecycle.start_game(code, host_id)

    scores = []
    for expected in (1, 2):
        answers.submit_answer(code, bob, 1, 1000)
        result = lifecycle.advance_question(code, host_id)
        assert result.game_over is False
        assert result.next_question.question_index == expected
        room = store.find_room(code)
        assert room.current_question == expected
        assert all(p.current_answer is None for p in store.list_players(code))
        scores.append(store.find_player(bob, code).score)

    answers.submit_answer(code, bob, 1, 1000)
    scores.append(store.find_player(bob, code).score)
    result = lifecycle.advance_question(code, host_id)
    assert result.game_over is True
    room = store.find_room(code)
    assert room.status == 'finished'
    assert room.current_question == 2
    assert room.question_start_time is None
    assert scores == sorted(scores)

    final = result.to_dict()['finalScores']
    assert [s['playerId'] for s in final] == [bob, host_id]

    with pytest.raises(InvalidStateError):
        lifecycle.advance_question(code, host_id)
    assert store.find_room(code).current_question == 2


def test_advance_reports_unanswered_players(flask_app, uniform_bank):
    code, host_id, (bob,) = _room_with_players('Alice', 'Bob', question_count=2)
    lifecycle.start_game(code, host_id)
    answers.submit_answer(code, host_id, 2, 100)
    payload = lifecycle.advance_question(code, host_id).to_dict()
    results = {r['playerId']: r for r in payload['questionResults']}
    assert results[bob] == {
        'playerId': bob, 'playerName': 'Bob', 'answer': None,
        'correct': False, 'scoreGained': 0, 'totalScore': 0,
    }
    assert results[host_id]['answer'] == 2
    assert payload['correctAnswer'] == 1
    assert payload['nextQuestion']['index'] == 1


def test_advance_tolerates_missing_question(flask_app, uniform_bank):
    code, host_id, _ = _room_with_players('Alice', 'Bob', question_count=2)
    lifecycle.start_game(code, host_id)
    GameQuestion.query.filter_by(room_code=code, question_index=0).delete()
    db.session.commit()
    result = lifecycle.advance_question(code, host_id)
    assert result.correct_answer is None
    assert result.game_over is False


def test_leave_room(flask_app):
    code, host_id, (bob,) = _room_with_players('Alice', 'Bob')
    assert lifecycle.leave_room(code, bob) == 'player_left'
    assert store.find_player(bob, code) is None
    assert lifecycle.leave_room(code, host_id) == 'room_closed'
    assert store.find_room(code).status == 'finished'
    # The host row stays behind in the closed room
    assert store.find_player(host_id, code) is not None
    with pytest.raises(NotFoundError):
        lifecycle.leave_room(code, bob)


def test_host_leaving_active_game_finishes_it(flask_app, uniform_bank):
    code, host_id, (bob,) = _room_with_players('Alice', 'Bob')
    lifecycle.start_game(code, host_id)
    lifecycle.leave_room(code, host_id)
    with pytest.raises(InvalidStateError):
        answers.submit_answer(code, bob, 1, 0)


def test_current_question(flask_app, uniform_bank):
    code, host_id, (bob,) = _room_with_players('Alice', 'Bob')
    with pytest.raises(InvalidStateError):
        lifecycle.get_current_question(code, bob)
    lifecycle.start_game(code, host_id)
    answers.submit_answer(code, host_id, 1, 0)
    room, question, player, players = lifecycle.get_current_question(code, bob)
    assert question.question_index == 0
    assert player.has_answered is False
    assert [p.id for p in players] == [host_id, bob]


def test_purge_stale_rooms(flask_app, uniform_bank):
    old_code, _, _ = _room_with_players('Alice', 'Bob')
    store.update_room(store.find_room(old_code), created_at=utcnow() - timedelta(hours=30))
    fresh_code, _, _ = _room_with_players('Cara')
    started_code, started_host, _ = _room_with_players('Dan', 'Eve')
    lifecycle.start_game(started_code, started_host)
    store.update_room(store.find_room(started_code), created_at=utcnow() - timedelta(hours=30))

    assert lifecycle.purge_stale_rooms() == 1
    assert store.find_room(old_code) is None
    assert Player.query.filter_by(room_code=old_code).count() == 0
    assert store.find_room(fresh_code) is not None
    assert store.find_room(started_code) is not None


def test_player_ids_beyond_column_range_are_unknown(flask_app):
    code, _, _ = _room_with_players('Alice')
    with pytest.raises(NotFoundError):
        lifecycle.leave_room(code, 2 ** 64)
    with pytest.raises(NotFoundError):
        lifecycle.require_player_id(2 ** 31)
    assert lifecycle.require_player_id(2 ** 31 - 1) == 2 ** 31 - 1


def test_answer_index_beyond_column_range_is_rejected(flask_app, uniform_bank):
    code, host_id, _ = _room_with_players('Alice', 'Bob')
    lifecycle.start_game(code, host_id)
    with pytest.raises(ValidationError) as excinfo:
        answers.submit_answer(code, host_id, 2 ** 63, 0)
    assert excinfo.value.field == 'answer'
    assert store.find_player(host_id, code).current_answer is None
