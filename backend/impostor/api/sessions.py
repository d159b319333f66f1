from flask import Blueprint, jsonify, request, current_app
from impostor.services.games.errors import GameError
from impostor.services.games.lifecycle import SessionLifecycle
from impostor.services.identity import FlaskSessionIdentityCache


sessions = Blueprint('sessions', __name__)


def _lifecycle() -> SessionLifecycle:
    return SessionLifecycle.from_config(current_app.config, FlaskSessionIdentityCache())


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@sessions.errorhandler(GameError)
def handle_game_error(exc):
    return jsonify(exc.to_dict()), exc.status_code


@sessions.route('/create', methods=['POST'])
def create_session():
    data = _json_body()
    lifecycle = _lifecycle()
    session = lifecycle.create_session(data.get('host_name'), data.get('impostor_count', 1))
    payload = dict(session)
    payload['player'] = next(p for p in session['players'] if p['id'] == session['host_id'])
    return jsonify(payload), 201


@sessions.route('/join', methods=['POST'])
def join_session():
    data = _json_body()
    player = _lifecycle().join_session(data.get('code'), data.get('name'), data.get('player_id'))
    return jsonify(player), 201


@sessions.route('/me', methods=['GET'])
def whoami():
    return jsonify(FlaskSessionIdentityCache().read().to_dict())


@sessions.route('/<string:code>/state', methods=['GET'])
def get_state(code):
    return jsonify(_lifecycle().get_state(code))


@sessions.route('/<string:code>/view', methods=['GET'])
def get_view(code):
    return jsonify(_lifecycle().view(code).to_dict())


@sessions.route('/<string:code>/start', methods=['POST'])
def start_round(code):
    lifecycle = _lifecycle()
    session = lifecycle.get_state(code)
    return jsonify(lifecycle.start_round(session['id']))


@sessions.route('/<string:code>/next', methods=['POST'])
def start_next_round(code):
    lifecycle = _lifecycle()
    session = lifecycle.get_state(code)
    return jsonify(lifecycle.start_next_round(session['id']))


@sessions.route('/<string:code>/card', methods=['GET'])
def reveal_card(code):
    lifecycle = _lifecycle()
    session = lifecycle.get_state(code)
    return jsonify(lifecycle.reveal_card(session['id']).to_dict())


@sessions.route('/<string:code>/players/me', methods=['PATCH'])
def rename_player(code):
    data = _json_body()
    lifecycle = _lifecycle()
    session = lifecycle.get_state(code)
    return jsonify(lifecycle.rename_player(session['id'], data.get('name')))


@sessions.route('/exit', methods=['POST'])
def exit_session():
    _lifecycle().exit_session()
    return jsonify({'ok': True})
