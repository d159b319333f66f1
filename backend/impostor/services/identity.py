"""Client-local identity cache.

Four scalars a client keeps so a reload can restore who it is without
creating a new session: session code, player id, player name and host flag.
Over HTTP they live in the signed Flask session cookie; tests and
server-side consumers can use the in-memory variant.
"""

from dataclasses import asdict, dataclass
from typing import Optional

from flask import session as flask_session

_KEYS = ('session_code', 'player_id', 'player_name', 'is_host')


@dataclass
class LocalIdentity:
    session_code: Optional[str] = None
    player_id: Optional[str] = None
    player_name: Optional[str] = None
    is_host: bool = False

    @property
    def has_session(self) -> bool:
        return bool(self.session_code)

    def to_dict(self):
        return asdict(self)


class IdentityCache:
    """Read/write/clear contract shared by every cache implementation."""

    def read(self) -> LocalIdentity:
        raise NotImplementedError

    def write(self, identity: LocalIdentity) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class MemoryIdentityCache(IdentityCache):
    def __init__(self, identity: Optional[LocalIdentity] = None):
        self._identity = identity or LocalIdentity()

    def read(self) -> LocalIdentity:
        return LocalIdentity(**asdict(self._identity))

    def write(self, identity: LocalIdentity) -> None:
        self._identity = LocalIdentity(**asdict(identity))

    def clear(self) -> None:
        self._identity = LocalIdentity()


class FlaskSessionIdentityCache(IdentityCache):
    """Identity stored in the request's signed session cookie."""

    def read(self) -> LocalIdentity:
        return LocalIdentity(
            session_code=flask_session.get('session_code'),
            player_id=flask_session.get('player_id'),
            player_name=flask_session.get('player_name'),
            is_host=bool(flask_session.get('is_host', False)),
        )

    def write(self, identity: LocalIdentity) -> None:
        for key, value in asdict(identity).items():
            flask_session[key] = value
        flask_session.permanent = True

    def clear(self) -> None:
        for key in _KEYS:
            flask_session.pop(key, None)
