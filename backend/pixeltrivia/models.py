from pixeltrivia import db
from datetime import datetime, timezone
import json

# Largest value an Integer column holds on every supported backend
MAX_DB_INTEGER = 2 ** 31 - 1


def utcnow():
    return datetime.now(timezone.utc)


def _isoformat(value):
    return value.isoformat() if value else None


class Room(db.Model):
    __tablename__ = 'rooms'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(6), unique=True, nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default='waiting') # waiting, active, finished
    max_players = db.Column(db.Integer, nullable=False, default=8)
    # Only meaningful while status == 'active'
    current_question = db.Column(db.Integer, nullable=False, default=0)
    total_questions = db.Column(db.Integer, nullable=False, default=10)
    question_start_time = db.Column(db.DateTime(timezone=True), nullable=True)
    time_limit = db.Column(db.Integer, nullable=False, default=30)  # seconds per question
    category = db.Column(db.String(50), nullable=True)
    game_mode = db.Column(db.String(20), nullable=False, default='quick')
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    players = db.relationship('Player', back_populates='room', cascade='all, delete-orphan', order_by='Player.id')
    game_questions = db.relationship('GameQuestion', cascade='all, delete-orphan', order_by='GameQuestion.question_index')

    @property
    def time_limit_ms(self):
        return int(self.time_limit or 0) * 1000

    def to_dict(self, players=None):
        return {
            'code': self.code,
            'status': self.status,
            'currentQuestion': self.current_question,
            'totalQuestions': self.total_questions,
            'questionStartTime': _isoformat(self.question_start_time),
            'timeLimit': self.time_limit,
            'maxPlayers': self.max_players,
            'gameMode': self.game_mode,
            'category': self.category,
            'createdAt': _isoformat(self.created_at),
            'players': [p.to_dict() for p in (players if players is not None else self.players)],
        }


class Player(db.Model):
    __tablename__ = 'players'
    id = db.Column(db.Integer, primary_key=True)
    room_code = db.Column(db.String(6), db.ForeignKey('rooms.code', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(50), nullable=False)
    avatar = db.Column(db.String(20), nullable=False, default='knight')
    is_host = db.Column(db.Boolean, nullable=False, default=False)
    score = db.Column(db.Integer, nullable=False, default=0)
    # Option index chosen for the current question; None until answered
    current_answer = db.Column(db.Integer, nullable=True)
    answers = db.Column(db.Text, nullable=False, default='[]')  # JSON-encoded list of answer records
    joined_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    room = db.relationship('Room', back_populates='players')

    @property
    def answer_history(self):
        return json.loads(self.answers) if self.answers else []

    def answer_for(self, question_index):
        """Return this player's answer record for the given question, if any."""
        for record in self.answer_history:
            if record.get('questionIndex') == question_index:
                return record
        return None

    @property
    def has_answered(self):
        return self.current_answer is not None

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'avatar': self.avatar,
            'isHost': self.is_host,
            'score': self.score,
            'hasAnswered': self.has_answered,
            'joinedAt': _isoformat(self.joined_at),
        }


class GameQuestion(db.Model):
    __tablename__ = 'game_questions'
    __table_args__ = (
        db.UniqueConstraint('room_code', 'question_index', name='uq_game_questions_room_index'),
    )
    id = db.Column(db.Integer, primary_key=True)
    room_code = db.Column(db.String(6), db.ForeignKey('rooms.code', ondelete='CASCADE'), nullable=False, index=True)
    question_index = db.Column(db.Integer, nullable=False)
    question_text = db.Column(db.Text, nullable=False)
    options = db.Column(db.Text, nullable=False)  # JSON-encoded list of 4 strings
    correct_answer = db.Column(db.Integer, nullable=False)
    category = db.Column(db.String(50), nullable=True)
    difficulty = db.Column(db.String(20), nullable=True)

    @property
    def option_list(self):
        return json.loads(self.options)

    def to_public_dict(self):
        # The correct answer never leaves the server with the question
        return {
            'index': self.question_index,
            'questionText': self.question_text,
            'options': self.option_list,
            'category': self.category,
            'difficulty': self.difficulty,
        }


class Question(db.Model):
    __tablename__ = 'questions'
    id = db.Column(db.Integer, primary_key=True)
    question_text = db.Column(db.Text, nullable=False)
    options = db.Column(db.Text, nullable=False)  # JSON-encoded list of 4 strings
    correct_answer = db.Column(db.Integer, nullable=False)
    category = db.Column(db.String(50), nullable=True)
    difficulty = db.Column(db.String(20), nullable=False, default='medium')
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    @property
    def option_list(self):
        return json.loads(self.options)
