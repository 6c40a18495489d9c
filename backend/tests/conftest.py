import os
import sys
import pytest

# Ensure the backend root (containing the `pixeltrivia` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from pixeltrivia import create_app, db
from config import Config


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = 'DEBUG'
    MIN_PLAYERS = 2
    MAX_PLAYERS = 16
    DEFAULT_MAX_PLAYERS = 8
    MIN_NICKNAME_LENGTH = 1
    MAX_NICKNAME_LENGTH = 20
    DEFAULT_TIME_LIMIT = 30
    DEFAULT_QUESTION_COUNT = 10
    BASE_SCORE = 100
    TIME_BONUS_MULTIPLIER = 0.5
    ROOM_CODE_MAX_ATTEMPTS = 10
    STALE_ROOM_HOURS = 24


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import pixeltrivia.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def seeded_bank(flask_app):
    from pixeltrivia.seed import seed_question_bank
    return seed_question_bank()


@pytest.fixture()
def uniform_bank(flask_app):
    """Five questions whose correct option is always index 1."""
    from pixeltrivia.seed import seed_question_bank
    questions = [
        (f'Test question {i}?', ['zero', 'one', 'two', 'three'], 1, 'Testing', 'easy')
        for i in range(5)
    ]
    return seed_question_bank(questions)


@pytest.fixture()
def make_room(client):
    """Create a room over HTTP and return (code, host_id)."""
    def _make(name='Alice', **options):
        body = {'playerName': name, 'avatar': 'knight'}
        body.update(options)
        res = client.post('/api/room/create', json=body)
        assert res.status_code == 201, res.get_json()
        data = res.get_json()['data']
        return data['roomCode'], data['playerId']
    return _make


@pytest.fixture()
def join(client):
    def _join(code, name, avatar='wizard'):
        return client.post('/api/room/join', json={'roomCode': code, 'playerName': name, 'avatar': avatar})
    return _join
