from impostor import db
from datetime import datetime, timezone
import json
import random
import string
import time

# No 0/O, 1/I/L: codes are read aloud and typed from a phone screen
CODE_ALPHABET = ''.join(c for c in string.ascii_uppercase + string.digits if c not in '0O1IL')
_ID_ALPHABET = string.ascii_lowercase + string.digits


def _utcnow():
    return datetime.now(timezone.utc)


def generate_session_code(length=5, rng=None):
    """Generate a short join code. Uniqueness is enforced by the store."""
    rng = rng or random
    return ''.join(rng.choice(CODE_ALPHABET) for _ in range(length))


def generate_player_id(rng=None):
    """Collision resistant player id: `player_<epoch ms>_<7 base36 chars>`."""
    rng = rng or random
    suffix = ''.join(rng.choice(_ID_ALPHABET) for _ in range(7))
    return f"player_{int(time.time() * 1000)}_{suffix}"


def normalize_code(code):
    return (code or '').strip().upper()


class Player(db.Model):
    __tablename__ = 'players'
    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    session_id = db.Column(db.Integer, db.ForeignKey('sessions.id'), nullable=False, index=True)
    joined_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    session = db.relationship('GameSession', back_populates='players')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'session_id': self.session_id,
            'joined_at': self.joined_at.isoformat() if self.joined_at else None,
        }


class GameSession(db.Model):
    __tablename__ = 'sessions'
    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(8), unique=True, index=True, nullable=False)
    host_id = db.Column(db.String(64), nullable=False)
    impostor_count = db.Column(db.Integer, nullable=False, default=1)
    current_word = db.Column(db.String(128), nullable=True)
    round_number = db.Column(db.Integer, nullable=False, default=0)
    impostors = db.Column(db.Text, nullable=False, default='[]')  # JSON-encoded list of player ids
    first_player_id = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
    players = db.relationship(
        'Player',
        back_populates='session',
        order_by=[Player.joined_at, Player.id],
        cascade='all, delete-orphan',
    )

    @property
    def impostor_ids(self):
        try:
            return list(json.loads(self.impostors or '[]'))
        except ValueError:
            return []

    def to_dict(self, include_players=True):
        data = {
            'id': self.id,
            'code': self.code,
            'host_id': self.host_id,
            'impostor_count': self.impostor_count,
            'current_word': self.current_word,
            'round_number': self.round_number or 0,
            'impostors': self.impostor_ids,
            'first_player_id': self.first_player_id,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_players:
            data['players'] = [p.to_dict() for p in self.players]
            data['player_count'] = len(data['players'])
        return data
