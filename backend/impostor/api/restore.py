from flask import Blueprint, jsonify, request, current_app
from impostor.services.games.restore import RestoreGuard
from impostor.services.identity import FlaskSessionIdentityCache
from impostor.services.store import SessionStore


restore = Blueprint('restore', __name__)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@restore.route('/restore', methods=['POST'])
def resolve_navigation():
    """Where a client should land when navigating to ``path``.

    Front-end routers call this before rendering a route. It always answers
    200; if the session lookup fails the client is sent to a lobby view.
    """
    data = _json_body()
    query = data.get('query') if isinstance(data.get('query'), dict) else {}
    guard = RestoreGuard(SessionStore.from_config(current_app.config), FlaskSessionIdentityCache())
    return jsonify(guard.resolve(data.get('path') or '/', query).to_dict())
