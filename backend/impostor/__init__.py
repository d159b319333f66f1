from datetime import timedelta

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def _engine_options(cfg):
    """Driver level timeouts so no store call can hang past STORE_TIMEOUT_SEC."""
    uri = cfg.get('SQLALCHEMY_DATABASE_URI') or ''
    timeout = float(cfg.get('STORE_TIMEOUT_SEC', 5))
    if uri.startswith('sqlite'):
        return {'connect_args': {'timeout': timeout}}
    if uri.startswith('postgresql'):
        return {
            'pool_pre_ping': True,
            'pool_timeout': timeout,
            'connect_args': {
                'connect_timeout': max(1, int(timeout)),
                'options': f'-c statement_timeout={int(timeout * 1000)}',
            },
        }
    return {}


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.config.setdefault('SQLALCHEMY_ENGINE_OPTIONS', _engine_options(flask_app.config))

    origins = flask_app.config.get('CORS_ORIGINS') or []
    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    from impostor.main import main
    flask_app.register_blueprint(main)

    from impostor.api.sessions import sessions
    flask_app.register_blueprint(sessions, url_prefix='/api/sessions')

    from impostor.api.restore import restore
    flask_app.register_blueprint(restore, url_prefix='/api')

    from impostor.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the database."""
        import impostor.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    @click.command('expire-sessions')
    @click.option('--hours', type=int, default=None, help='Idle time before a session expires.')
    def expire_sessions_command(hours):
        """Deletes sessions (and their players) idle for longer than SESSION_TTL_HOURS."""
        from impostor.services.store import SessionStore
        ttl = hours if hours is not None else int(flask_app.config.get('SESSION_TTL_HOURS', 12))
        with flask_app.app_context():
            removed = SessionStore.from_config(flask_app.config).expire_sessions(timedelta(hours=ttl))
            print(f'Expired {removed} session(s).')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(expire_sessions_command)

    return flask_app
