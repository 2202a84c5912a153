"""Game errors raised by the room services.

Every error carries a ``kind`` (how a caller should react), a stable ``code``
the frontend can switch on, and the HTTP status used by the API layer.
"""

NOT_FOUND = 'not_found'
INVALID_STATE = 'invalid_state'
CONFLICT = 'conflict'
UNAUTHORIZED = 'unauthorized'
VALIDATION = 'validation'

_STATUS_BY_KIND = {
    NOT_FOUND: 404,
    INVALID_STATE: 400,
    CONFLICT: 409,
    UNAUTHORIZED: 403,
    VALIDATION: 400,
}


class GameError(Exception):
    kind = VALIDATION
    code = 'GAME_ERROR'
    message = 'Game error'

    def __init__(self, message=None, **context):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.context = context

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self.kind]

    def to_dict(self):
        payload = {'error': self.message, 'code': self.code}
        if self.context:
            payload['details'] = self.context
        return payload


# Not found

class RoomNotFound(GameError):
    kind = NOT_FOUND
    code = 'ROOM_NOT_FOUND'
    message = 'Room not found'


class PlayerNotFound(GameError):
    kind = NOT_FOUND
    code = 'PLAYER_NOT_FOUND'
    message = 'Player not found in this room'


class CategoryNotFound(GameError):
    kind = NOT_FOUND
    code = 'CATEGORY_NOT_FOUND'
    message = 'Not enough questions for this category'


# Invalid state

class InvalidState(GameError):
    kind = INVALID_STATE
    code = 'INVALID_STATE'
    message = 'Game already started or finished'


class GameAlreadyStarted(InvalidState):
    code = 'GAME_ALREADY_STARTED'
    message = 'Room is not accepting players'


class GameNotActive(InvalidState):
    code = 'GAME_NOT_ACTIVE'
    message = 'Game is not active'


class NotEnoughPlayers(InvalidState):
    code = 'NOT_ENOUGH_PLAYERS'
    message = 'Need at least 2 players to start'


class GameNotFinished(InvalidState):
    code = 'GAME_NOT_FINISHED'
    message = 'Game not finished yet'


# Conflicts

class RoomFull(GameError):
    kind = CONFLICT
    code = 'ROOM_FULL'
    message = 'Room is full'


class AlreadyJoined(GameError):
    kind = CONFLICT
    code = 'ALREADY_JOINED'
    message = 'Already joined this room'


class AlreadyAnswered(GameError):
    kind = CONFLICT
    code = 'ALREADY_ANSWERED'
    message = 'Already answered this question'


# Authorization

class NotHost(GameError):
    kind = UNAUTHORIZED
    code = 'NOT_HOST'
    message = 'Only host can start the game'


# Validation

class InvalidInput(GameError):
    kind = VALIDATION
    code = 'INVALID_INPUT'
    message = 'Missing required fields'


class InvalidQuestionIndex(GameError):
    kind = VALIDATION
    code = 'INVALID_QUESTION_INDEX'
    message = 'Invalid question index'
