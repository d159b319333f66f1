from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from impostor import db

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Impostor game server!'})


@main.route('/health')
def health():
    try:
        db.session.execute(text('SELECT 1'))
        store = 'ok'
    except SQLAlchemyError as exc:
        db.session.rollback()
        return jsonify({'status': 'degraded', 'store': exc.__class__.__name__}), 503
    return jsonify({'status': 'ok', 'store': store})
