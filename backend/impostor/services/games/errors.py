"""Failure taxonomy surfaced by the lifecycle controller and the store.

Each error carries the HTTP status the API answers with and a stable
``kind`` clients can switch on when choosing what to display.
"""


class GameError(Exception):
    status_code = 400
    kind = 'game_error'
    default_message = 'Something went wrong'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {'error': self.message, 'kind': self.kind}


class StoreUnavailable(GameError):
    status_code = 503
    kind = 'store_unavailable'
    default_message = 'The game server could not be reached, please try again'


class SessionNotFound(GameError):
    status_code = 404
    kind = 'session_not_found'
    default_message = 'Session not found'


class InsufficientPlayers(GameError):
    status_code = 400
    kind = 'insufficient_players'
    default_message = 'At least 2 players are required to start'


class NotAuthorized(GameError):
    status_code = 403
    kind = 'not_authorized'
    default_message = 'Only the host can do that'


class ValidationError(GameError):
    status_code = 400
    kind = 'validation_error'
    default_message = 'Invalid request'


class RoundConflict(GameError):
    status_code = 409
    kind = 'round_conflict'
    default_message = 'The round changed while starting a new one, please retry'
