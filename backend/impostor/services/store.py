"""Session store adapter.

Row-level access to the ``sessions`` and ``players`` tables plus change
subscriptions. Every committed write publishes a fresh snapshot of the
session (``GameSession.to_dict()``) to in-process subscriptions and to the
Socket.IO room of that session, which is how remote clients observe state.
"""

import json
import queue
import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from impostor import db, socketio
from impostor.models import GameSession, Player, normalize_code
from impostor.services.games.errors import StoreUnavailable

UPDATABLE_FIELDS = {'current_word', 'impostors', 'round_number', 'first_player_id', 'impostor_count'}

_CLOSED = object()
_subscribers: Dict[int, List['Subscription']] = defaultdict(list)
_subscribers_lock = threading.Lock()


def session_room(code: str) -> str:
    return f"session:{normalize_code(code)}"


class DuplicateKey(Exception):
    """A unique key (session code or player id) is already taken."""


class Subscription:
    """Cancellable stream of session snapshots.

    Iterating blocks until the next snapshot and stops after ``unsubscribe``.
    An optional ``on_change`` callback is invoked for every snapshot as well.
    """

    def __init__(self, session_id: int, on_change: Optional[Callable[[dict], None]] = None):
        self.session_id = session_id
        self.on_change = on_change
        self._queue: 'queue.Queue' = queue.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, snapshot: dict) -> None:
        if self._closed:
            return
        self._queue.put(snapshot)
        if self.on_change is not None:
            try:
                self.on_change(snapshot)
            except Exception:
                current_app.logger.exception(f"[subscription] session={self.session_id} on_change failed")

    def get(self, timeout: Optional[float] = None) -> Optional[dict]:
        """Next snapshot, or None if closed or nothing arrived within ``timeout``."""
        if self._closed and self._queue.empty():
            return None
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        return None if item is _CLOSED else item

    def drain(self) -> List[dict]:
        items = []
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return items
            if item is not _CLOSED:
                items.append(item)

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        with _subscribers_lock:
            subs = _subscribers.get(self.session_id, [])
            if self in subs:
                subs.remove(self)
            if not subs:
                _subscribers.pop(self.session_id, None)
        self._queue.put(_CLOSED)

    def __iter__(self):
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield item

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.unsubscribe()
        return False


class SessionStore:
    def __init__(self, timeout: float = 5.0, broadcast: bool = True):
        self.timeout = timeout
        self.broadcast = broadcast

    @classmethod
    def from_config(cls, cfg) -> 'SessionStore':
        return cls(timeout=float(cfg.get('STORE_TIMEOUT_SEC', 5)))

    @contextmanager
    def _op(self, name: str):
        started = time.monotonic()
        try:
            yield
        except DuplicateKey:
            raise
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.error(f"[store-error] op={name} error={exc.__class__.__name__}: {exc}")
            raise StoreUnavailable() from exc
        finally:
            elapsed = time.monotonic() - started
            if elapsed > self.timeout:
                current_app.logger.warning(f"[store-slow] op={name} took {elapsed:.2f}s (limit {self.timeout}s)")

    # ---- sessions ----

    def create_session(self, record: dict, host: Optional[dict] = None) -> dict:
        """Insert a session row, and the host's player row in the same transaction."""
        with self._op('create_session'):
            if host is not None and db.session.get(Player, host['id']) is not None:
                raise DuplicateKey(f"player {host['id']} exists")
            session = GameSession(
                code=normalize_code(record['code']),
                host_id=record['host_id'],
                impostor_count=int(record.get('impostor_count', 1)),
                round_number=0,
                impostors='[]',
            )
            db.session.add(session)
            try:
                db.session.flush()
                if host is not None:
                    db.session.add(Player(id=host['id'], name=host['name'], session_id=session.id))
                db.session.commit()
            except IntegrityError as exc:
                db.session.rollback()
                raise DuplicateKey(str(exc.orig)) from exc
            session_id = session.id
        return self._publish(session_id)

    def get_session(self, session_id: int) -> Optional[dict]:
        with self._op('get_session'):
            session = db.session.get(GameSession, session_id)
            return session.to_dict() if session else None

    def get_session_by_code(self, code: str) -> Optional[dict]:
        with self._op('get_session_by_code'):
            session = GameSession.query.filter_by(code=normalize_code(code)).first()
            return session.to_dict() if session else None

    def update_session(self, session_id: int, fields: dict, expected_round: Optional[int] = None) -> Optional[dict]:
        """Replace ``fields`` on the session row in a single UPDATE.

        With ``expected_round`` the update only applies while ``round_number``
        still equals it. Returns the new snapshot, or None if no row matched.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update session fields: {sorted(unknown)}")
        values = dict(fields)
        if 'impostors' in values:
            values['impostors'] = json.dumps(sorted(values['impostors']))
        values['updated_at'] = datetime.now(timezone.utc)
        with self._op('update_session'):
            query = GameSession.query.filter_by(id=session_id)
            if expected_round is not None:
                query = query.filter_by(round_number=expected_round)
            matched = query.update(values, synchronize_session=False)
            db.session.commit()
        if not matched:
            return None
        return self._publish(session_id)

    def expire_sessions(self, older_than) -> int:
        """Delete sessions (and their players) not updated within ``older_than``."""
        cutoff = datetime.now(timezone.utc) - older_than
        with self._op('expire_sessions'):
            stale = GameSession.query.filter(GameSession.updated_at < cutoff).all()
            stale_ids = [session.id for session in stale]
            for session in stale:
                db.session.delete(session)
            db.session.commit()
        # Followers of a removed session stop instead of waiting forever
        for session_id in stale_ids:
            with _subscribers_lock:
                subs = list(_subscribers.get(session_id, []))
            for sub in subs:
                sub.unsubscribe()
        if stale:
            current_app.logger.info(f"[expire] removed {len(stale)} session(s) idle since before {cutoff.isoformat()}")
        return len(stale)

    # ---- players ----

    def insert_player(self, record: dict) -> dict:
        with self._op('insert_player'):
            if db.session.get(Player, record['id']) is not None:
                raise DuplicateKey(f"player {record['id']} exists")
            player = Player(id=record['id'], name=record['name'], session_id=record['session_id'])
            db.session.add(player)
            try:
                db.session.commit()
            except IntegrityError as exc:
                db.session.rollback()
                raise DuplicateKey(str(exc.orig)) from exc
            data = player.to_dict()
        self._publish(data['session_id'])
        return data

    def get_player(self, player_id: str) -> Optional[dict]:
        if not player_id:
            return None
        with self._op('get_player'):
            player = db.session.get(Player, player_id)
            return player.to_dict() if player else None

    def list_players(self, session_id: int) -> List[dict]:
        with self._op('list_players'):
            players = (
                Player.query.filter_by(session_id=session_id)
                .order_by(Player.joined_at, Player.id)
                .all()
            )
            return [p.to_dict() for p in players]

    def rename_player(self, player_id: str, name: str) -> Optional[dict]:
        with self._op('rename_player'):
            player = db.session.get(Player, player_id)
            if player is None:
                return None
            player.name = name
            db.session.commit()
            data = player.to_dict()
        self._publish(data['session_id'])
        return data

    def delete_player(self, player_id: str) -> bool:
        with self._op('delete_player'):
            player = db.session.get(Player, player_id)
            if player is None:
                return False
            session_id = player.session_id
            db.session.delete(player)
            db.session.commit()
        self._publish(session_id)
        return True

    # ---- change notification ----

    def subscribe(self, session_id: int, on_change: Optional[Callable[[dict], None]] = None) -> Subscription:
        sub = Subscription(session_id, on_change)
        with _subscribers_lock:
            _subscribers[session_id].append(sub)
        return sub

    def _publish(self, session_id: int) -> Optional[dict]:
        snapshot = self.get_session(session_id)
        if snapshot is None:
            return None
        with _subscribers_lock:
            subs = list(_subscribers.get(session_id, []))
        for sub in subs:
            sub.push(snapshot)
        if self.broadcast:
            socketio.emit('state_update', snapshot, to=session_room(snapshot['code']), namespace='/ws')
        return snapshot
