from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from impostor.models import normalize_code
from impostor.services.games.errors import GameError, ValidationError
from impostor.services.store import SessionStore, session_room
from typing import Dict


# sid -> session code the socket is following
_sid_to_code: Dict[str, str] = {}


def _get_sid() -> str:
    return request.sid  # type: ignore[attr-defined]


def _payload_code(data) -> str:
    code = data.get('code') if isinstance(data, dict) else None
    return normalize_code(code) if isinstance(code, str) else ''


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*_args):
    _sid_to_code.pop(_get_sid(), None)


def handle_join_session(data):
    """Subscribe this socket to a session's changes.

    The current snapshot is sent right away so a reconnecting client catches
    up on anything it missed while offline.
    """
    code = _payload_code(data)
    if not code:
        emit('error', ValidationError('A session code is required').to_dict())
        return
    try:
        snapshot = SessionStore.from_config(current_app.config).get_session_by_code(code)
    except GameError as exc:
        emit('error', exc.to_dict())
        return
    if snapshot is None:
        emit('error', {'error': 'Session not found', 'kind': 'session_not_found'})
        return
    room = session_room(code)
    join_room(room)
    _sid_to_code[_get_sid()] = code
    emit('joined', {'room': room})
    emit('state_update', snapshot)


def handle_leave_session(data):
    code = _payload_code(data)
    if not code:
        emit('error', ValidationError('A session code is required').to_dict())
        return
    room = session_room(code)
    leave_room(room)
    if _sid_to_code.get(_get_sid()) == code:
        _sid_to_code.pop(_get_sid(), None)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    from impostor import socketio

    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
        socketio.on_event('join_session', handle_join_session, namespace=namespace)
        socketio.on_event('leave_session', handle_leave_session, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
