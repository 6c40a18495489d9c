"""Reads and writes the room engine issues against the database.

Every function here is a single round-trip that commits on its own. There
is no transaction spanning several calls: callers check state with one call
and write with the next, so concurrent requests can race.
"""

import functools
import json
from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from pixeltrivia import db
from pixeltrivia.errors import DatabaseError
from pixeltrivia.models import GameQuestion, Player, Question, Room


def _guarded(action: str):
    """Roll back and re-raise store failures as ``DatabaseError``."""
    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except SQLAlchemyError as exc:
                db.session.rollback()
                current_app.logger.exception(f"[store] {action} failed")
                raise DatabaseError(f'Failed to {action}', original=exc) from exc
        return wrapper
    return decorator


# Rooms

@_guarded('load room')
def find_room(code: str) -> Optional[Room]:
    return Room.query.filter_by(code=code).first()


@_guarded('check room code')
def room_code_exists(code: str) -> bool:
    return db.session.query(Room.id).filter_by(code=code).first() is not None


@_guarded('create room')
def insert_room(**fields) -> Room:
    room = Room(**fields)
    db.session.add(room)
    db.session.commit()
    return room


@_guarded('update room')
def update_room(room: Room, **fields) -> Room:
    for key, value in fields.items():
        setattr(room, key, value)
    db.session.add(room)
    db.session.commit()
    return room


@_guarded('delete room')
def delete_room(room: Room) -> None:
    db.session.delete(room)
    db.session.commit()


@_guarded('load stale rooms')
def find_stale_rooms(cutoff) -> List[Room]:
    return Room.query.filter(Room.status == 'waiting', Room.created_at < cutoff).all()


# Players

@_guarded('count players')
def count_players(code: str) -> int:
    return Player.query.filter_by(room_code=code).count()


@_guarded('load player')
def find_player(player_id: int, code: str) -> Optional[Player]:
    return Player.query.filter_by(id=player_id, room_code=code).first()


@_guarded('load player')
def find_player_by_name(code: str, name: str) -> Optional[Player]:
    return Player.query.filter_by(room_code=code, name=name).first()


@_guarded('list players')
def list_players(code: str, by_score: bool = False) -> List[Player]:
    query = Player.query.filter_by(room_code=code)
    if by_score:
        query = query.order_by(Player.score.desc(), Player.id.asc())
    else:
        query = query.order_by(Player.id.asc())
    return query.all()


@_guarded('add player')
def insert_player(**fields) -> Player:
    player = Player(**fields)
    db.session.add(player)
    db.session.commit()
    return player


@_guarded('remove player')
def delete_player(player: Player) -> None:
    db.session.delete(player)
    db.session.commit()


@_guarded('reset players')
def reset_players(code: str, reset_score: bool = False) -> None:
    values = {Player.current_answer: None}
    if reset_score:
        values[Player.score] = 0
    Player.query.filter_by(room_code=code).update(values, synchronize_session='fetch')
    db.session.commit()


@_guarded('record answer')
def record_answer(player: Player, record: dict, score_gained: int) -> Player:
    """Append ``record`` to the history, mark the answer and add the points in one commit."""
    history = player.answer_history
    history.append(record)
    player.answers = json.dumps(history)
    player.current_answer = record['answer']
    player.score = int(player.score or 0) + score_gained
    db.session.add(player)
    db.session.commit()
    return player


# Questions

@_guarded('load question bank')
def select_bank_questions(category: Optional[str], limit: int) -> List[Question]:
    query = Question.query
    if category:
        query = query.filter(Question.category.ilike(f"%{category}%"))
    return query.order_by(Question.id.asc()).limit(limit).all()


@_guarded('store game questions')
def insert_game_questions(code: str, questions: List[Question]) -> List[GameQuestion]:
    rows = [
        GameQuestion(
            room_code=code,
            question_index=index,
            question_text=q.question_text,
            options=q.options,
            correct_answer=q.correct_answer,
            category=q.category,
            difficulty=q.difficulty,
        )
        for index, q in enumerate(questions)
    ]
    db.session.add_all(rows)
    db.session.commit()
    return rows


@_guarded('load game question')
def find_game_question(code: str, index: int) -> Optional[GameQuestion]:
    return GameQuestion.query.filter_by(room_code=code, question_index=index).first()
