"""Typed failures raised by the room engine.

Each error kind maps to exactly one status code and error code. Messages of
caller-fixable errors are shown to the client; server-side failures keep
their detail in the log and surface a generic message instead.
"""

from typing import Optional


class GameError(Exception):
    code = 'GAME_ERROR'
    status_code = 400
    expose = True
    public_message = 'Request could not be completed'

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message
        self.field = field

    def to_dict(self) -> dict:
        payload = {
            'success': False,
            'error': self.message if self.expose else self.public_message,
            'code': self.code,
        }
        if self.field and self.expose:
            payload['field'] = self.field
        return payload


class ValidationError(GameError):
    code = 'VALIDATION_ERROR'


class AuthorizationError(GameError):
    code = 'AUTHORIZATION_ERROR'
    public_message = 'You do not have permission to perform this action'


class InvalidStateError(GameError):
    code = 'INVALID_STATE'


class CapacityError(GameError):
    code = 'ROOM_FULL'
    public_message = 'Room is full'


class ConflictError(GameError):
    code = 'CONFLICT'


class InsufficientPlayersError(GameError):
    code = 'INSUFFICIENT_PLAYERS'


class NotFoundError(GameError):
    code = 'NOT_FOUND'
    status_code = 404

    def __init__(self, resource: str, identifier=None):
        message = f"{resource} '{identifier}' not found" if identifier is not None else f"{resource} not found"
        super().__init__(message)
        self.resource = resource


class NoContentError(GameError):
    code = 'NO_CONTENT'
    status_code = 500
    public_message = 'No questions available for this game configuration'


class ExhaustedError(GameError):
    code = 'CODE_EXHAUSTED'
    status_code = 500
    expose = False
    public_message = 'Unable to create a room right now, please try again'


class DatabaseError(GameError):
    code = 'DATABASE_ERROR'
    status_code = 500
    expose = False
    public_message = 'A database error occurred'

    def __init__(self, message: Optional[str] = None, original: Optional[BaseException] = None):
        super().__init__(message)
        self.original = original


class ServerError(GameError):
    code = 'SERVER_ERROR'
    status_code = 500
    expose = False
    public_message = 'An unexpected error occurred'
