"""Navigation-time restore of a client's session.

Given the cached identity and the route a client is about to render,
decide where it should actually go. Runs once per navigation, performs at
most one authoritative read per navigation, and never fails: a store error
counts as "no round in progress".
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

from flask import current_app

from impostor.models import normalize_code
from impostor.services.games.errors import GameError

_ROUTE = re.compile(r'^/(lobby|host|join|game)/([^/?#]+)/?$')
# Redirects chain (e.g. lobby -> join -> game); a route is re-checked after each
MAX_HOPS = 5


@dataclass(frozen=True)
class Destination:
    path: str
    query: dict = field(default_factory=dict)
    redirected: bool = False

    def to_dict(self):
        return {'path': self.path, 'query': dict(self.query), 'redirected': self.redirected}


def parse_route(path: str) -> Tuple[Optional[str], Optional[str]]:
    match = _ROUTE.match(path if isinstance(path, str) else '')
    if not match:
        return None, None
    return match.group(1), normalize_code(match.group(2))


class RestoreGuard:
    def __init__(self, store, cache):
        self.store = store
        self.cache = cache
        self._rounds = {}

    def _round_number(self, code: str) -> int:
        # One read per navigation; later hops reuse it
        if code in self._rounds:
            return self._rounds[code]
        try:
            session = self.store.get_session_by_code(code)
        except GameError as exc:
            current_app.logger.warning(f"[restore] session={code} lookup failed ({exc.kind}), failing open")
            session = None
        self._rounds[code] = int(session['round_number']) if session else 0
        return self._rounds[code]

    def resolve(self, path: str, query: Optional[dict] = None) -> Destination:
        path = path if isinstance(path, str) and path else '/'
        query = {k: v for k, v in (query or {}).items() if isinstance(v, str)}
        self._rounds = {}
        for hop in range(MAX_HOPS):
            step = self._step(path, query)
            if step is None:
                return Destination(path, query, redirected=hop > 0)
            path, query = step
        return Destination(path, query, redirected=True)

    def _step(self, path: str, query: dict):
        """Next (path, query) for this navigation, or None to let it through."""
        route, code = parse_route(path)
        if route == 'host':
            return f'/lobby/{code}', query

        identity = self.cache.read()
        saved = normalize_code(identity.session_code) or None

        if route == 'lobby':
            if saved == code:
                return None if identity.is_host else (f'/join/{code}', {})
            return '/', {'join': code}

        if path == '/' and saved and not query.get('join'):
            if self._round_number(saved) > 0:
                return f'/game/{saved}', {}
            if identity.is_host:
                return f'/lobby/{saved}', {}
            return f'/join/{saved}', {}

        if route == 'join' and saved:
            if self._round_number(saved) > 0:
                current_app.logger.info(f"[restore] session={saved} round in progress, sending player to game")
                return f'/game/{saved}', {}
            return None

        if route in ('join', 'game') and not saved:
            self.cache.clear()
            if route == 'join' and code:
                return '/', {'join': code}
            return '/', {}

        return None
