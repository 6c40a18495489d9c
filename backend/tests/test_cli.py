from datetime import timedelta

from pixeltrivia.models import Question, Room
from pixeltrivia.seed import SAMPLE_QUESTIONS
from pixeltrivia.services.rooms import lifecycle, store


def test_seed_questions_is_idempotent(flask_app):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['seed-questions'])
    assert result.exit_code == 0
    assert f'Added {len(SAMPLE_QUESTIONS)} questions' in result.output
    result = runner.invoke(args=['seed-questions'])
    assert 'Added 0 questions' in result.output
    assert Question.query.count() == len(SAMPLE_QUESTIONS)


def test_cleanup_rooms_command(flask_app):
    room, _ = lifecycle.create_room('Alice')
    store.update_room(room, created_at=room.created_at - timedelta(hours=2))
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['cleanup-rooms'])
    assert 'Removed 0 stale rooms' in result.output
    result = runner.invoke(args=['cleanup-rooms', '--hours', '1'])
    assert result.exit_code == 0
    assert 'Removed 1 stale rooms' in result.output
    assert Room.query.count() == 0
