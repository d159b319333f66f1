import os
import sys
import itertools
import random
import pytest

# Ensure the backend root (containing the `impostor` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from impostor import create_app, db, socketio
from impostor.services import store as store_module
from impostor.services.games.lifecycle import SessionLifecycle
from impostor.services.identity import MemoryIdentityCache
from impostor.services.store import SessionStore


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = ['http://localhost:5173']
    MIN_PLAYERS = 2
    SESSION_CODE_LENGTH = 5
    SESSION_CODE_ATTEMPTS = 10
    STORE_TIMEOUT_SEC = 5
    ROUND_START_CAS = True
    REMOVE_PLAYER_ON_EXIT = False


@pytest.fixture(autouse=True)
def _reset_subscriptions():
    # Session ids restart at 1 with every fresh database
    store_module._subscribers.clear()
    yield
    store_module._subscribers.clear()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import impostor.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_client(flask_app):
    """Independent HTTP clients, each with its own cookie jar (its own identity)."""
    def _make():
        return flask_app.test_client()
    return _make


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except RuntimeError:
        pass


@pytest.fixture()
def store(flask_app):
    return SessionStore(timeout=5)


@pytest.fixture()
def make_lifecycle(store):
    """Lifecycle controllers sharing one store, one per simulated client."""
    seeds = itertools.count(1)

    def _make(cache=None, seed=None, **kwargs):
        rng = random.Random(next(seeds) if seed is None else seed)
        return SessionLifecycle(store, cache or MemoryIdentityCache(), rng=rng, **kwargs)
    return _make
