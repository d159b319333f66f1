"""Session lifecycle: create, join, start rounds, reveal cards, exit.

The controller owns the authoritative round transitions. Caller identity
comes from the injected identity cache; every shared-state change goes
through the store, whose publish is the event other clients observe.
"""

from typing import Callable, Optional

from flask import current_app

from impostor.models import generate_player_id, generate_session_code, normalize_code
from impostor.services.games.errors import (
    InsufficientPlayers,
    NotAuthorized,
    RoundConflict,
    SessionNotFound,
    StoreUnavailable,
    ValidationError,
)
from impostor.services.games.names import display_name
from impostor.services.games.selection import (
    is_impostor,
    select_first_player,
    select_impostors,
    word_for_player,
)
from impostor.services.games.view import RevealedCard, derive_view
from impostor.services.games.words import random_word
from impostor.services.identity import IdentityCache, LocalIdentity
from impostor.services.store import DuplicateKey, SessionStore


def _parse_impostor_count(value) -> int:
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise ValidationError('Impostor count must be a whole number')
    if count < 1:
        raise ValidationError('There must be at least one impostor')
    return count


def _text(value, label: str) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    raise ValidationError(f'{label} must be text')


class SessionLifecycle:
    def __init__(
        self,
        store: SessionStore,
        cache: IdentityCache,
        min_players: int = 2,
        code_length: int = 5,
        code_attempts: int = 10,
        round_cas: bool = True,
        remove_player_on_exit: bool = False,
        word_supplier: Optional[Callable[[], str]] = None,
        rng=None,
    ):
        self.store = store
        self.cache = cache
        self.min_players = min_players
        self.code_length = code_length
        self.code_attempts = code_attempts
        self.round_cas = round_cas
        self.remove_player_on_exit = remove_player_on_exit
        self.rng = rng
        self.word_supplier = word_supplier or (lambda: random_word(rng))

    @classmethod
    def from_config(cls, cfg, cache: IdentityCache, store: Optional[SessionStore] = None, **kwargs):
        return cls(
            store or SessionStore.from_config(cfg),
            cache,
            min_players=int(cfg.get('MIN_PLAYERS', 2)),
            code_length=int(cfg.get('SESSION_CODE_LENGTH', 5)),
            code_attempts=int(cfg.get('SESSION_CODE_ATTEMPTS', 10)),
            round_cas=bool(cfg.get('ROUND_START_CAS', True)),
            remove_player_on_exit=bool(cfg.get('REMOVE_PLAYER_ON_EXIT', False)),
            **kwargs,
        )

    # ---- helpers ----

    def _load(self, session_id: int) -> dict:
        session = self.store.get_session(session_id)
        if session is None:
            raise SessionNotFound()
        return session

    def _require_host(self, session: dict) -> LocalIdentity:
        identity = self.cache.read()
        if not identity.player_id or identity.player_id != session['host_id']:
            current_app.logger.warning(
                f"[auth] session={session['code']} player={identity.player_id} attempted a host-only action"
            )
            raise NotAuthorized()
        return identity

    # ---- queries ----

    def get_state(self, code: str) -> dict:
        session = self.store.get_session_by_code(code)
        if session is None:
            raise SessionNotFound()
        return session

    def view(self, code: str):
        return derive_view(self.get_state(code), self.cache.read())

    # ---- operations ----

    def create_session(self, host_name: str, impostor_count) -> dict:
        count = _parse_impostor_count(impostor_count)
        name = display_name(_text(host_name, 'Name'), self.rng)
        session = None
        for attempt in range(1, self.code_attempts + 1):
            code = generate_session_code(self.code_length, self.rng)
            host_id = generate_player_id(self.rng)
            try:
                session = self.store.create_session(
                    {'code': code, 'host_id': host_id, 'impostor_count': count},
                    host={'id': host_id, 'name': name},
                )
            except DuplicateKey:
                current_app.logger.info(f"[create] code or host id collision on attempt {attempt}, retrying")
                continue
            break
        if session is None:
            raise StoreUnavailable('Could not allocate a session code, please try again')

        self.cache.write(LocalIdentity(session['code'], host_id, name, True))
        current_app.logger.info(f"[create] session={session['code']} host={host_id} impostors={count}")
        return session

    def join_session(self, code: str, player_name: str, player_id: Optional[str] = None) -> dict:
        code = normalize_code(_text(code, 'Session code'))
        player_name = _text(player_name, 'Name')
        player_id = _text(player_id, 'Player id')
        if not code:
            raise ValidationError('Please enter a session code')
        session = self.store.get_session_by_code(code)
        if session is None:
            raise SessionNotFound()

        # Rejoin: a known identity for this session never adds a second row
        identity = self.cache.read()
        cached_id = identity.player_id if identity.session_code == code else None
        if player_id and player_id == session['host_id'] and cached_id != player_id:
            current_app.logger.warning(f"[auth] session={code} join attempted with the host's player id")
            raise NotAuthorized('That player id belongs to the host')
        for candidate in (cached_id, player_id):
            existing = self.store.get_player(candidate)
            if existing and existing['session_id'] == session['id']:
                self._remember(session, existing)
                current_app.logger.info(f"[join] session={code} player={existing['id']} rejoined")
                return existing

        name = display_name(player_name, self.rng)
        player = None
        new_id = player_id or generate_player_id(self.rng)
        for attempt in range(1, 4):
            try:
                player = self.store.insert_player({'id': new_id, 'name': name, 'session_id': session['id']})
            except DuplicateKey:
                # Id taken in another session
                current_app.logger.info(f"[join] player id collision on attempt {attempt}, retrying")
                new_id = generate_player_id(self.rng)
                continue
            break
        if player is None:
            raise StoreUnavailable('Could not allocate a player id, please try again')
        self._remember(session, player)
        current_app.logger.info(f"[join] session={code} player={player['id']} name={player['name']!r}")
        return player

    def _remember(self, session: dict, player: dict) -> None:
        self.cache.write(LocalIdentity(
            session_code=session['code'],
            player_id=player['id'],
            player_name=player['name'],
            is_host=player['id'] == session['host_id'],
        ))

    def start_round(self, session_id: int) -> dict:
        session = self._load(session_id)
        self._require_host(session)
        return self._begin_round(session)

    def start_next_round(self, session_id: int) -> dict:
        session = self._load(session_id)
        self._require_host(session)
        if session['round_number'] <= 0:
            raise ValidationError('The game has not started yet')
        return self._begin_round(session)

    def _begin_round(self, session: dict) -> dict:
        players = self.store.list_players(session['id'])
        if len(players) < self.min_players:
            raise InsufficientPlayers(f'At least {self.min_players} players are required to start')

        word = self.word_supplier()
        impostors = select_impostors(players, session['impostor_count'], self.rng)
        first_player_id = select_first_player(players, impostors, self.rng)
        observed = session['round_number']
        updated = self.store.update_session(
            session['id'],
            {
                'current_word': word,
                'impostors': impostors,
                'first_player_id': first_player_id,
                'round_number': observed + 1,
            },
            expected_round=observed if self.round_cas else None,
        )
        if updated is None:
            if self.store.get_session(session['id']) is None:
                raise SessionNotFound()
            current_app.logger.warning(
                f"[round] session={session['code']} round moved past {observed} before this start applied"
            )
            raise RoundConflict()

        current_app.logger.info(
            f"[round] session={updated['code']} round {observed} -> {updated['round_number']} "
            f"players={len(players)} impostors={len(impostors)}"
        )
        return updated

    def reveal_card(self, session_id: int, player_id: Optional[str] = None) -> RevealedCard:
        """Read-only: which card this player sees in the current round."""
        session = self._load(session_id)
        player_id = player_id or self.cache.read().player_id
        if session['round_number'] <= 0:
            raise ValidationError('No round in progress')
        if player_id not in {p['id'] for p in session['players']}:
            raise NotAuthorized('You are not part of this session')
        return RevealedCard(
            is_impostor=is_impostor(player_id, session['impostors']),
            word=word_for_player(player_id, session['current_word'], session['impostors']),
            round_number=session['round_number'],
        )

    def rename_player(self, session_id: int, name: str) -> dict:
        identity = self.cache.read()
        session = self._load(session_id)
        if identity.session_code != session['code'] or not identity.player_id:
            raise NotAuthorized('You are not part of this session')
        player = self.store.rename_player(identity.player_id, display_name(_text(name, 'Name'), self.rng))
        if player is None:
            raise NotAuthorized('You are not part of this session')
        identity.player_name = player['name']
        self.cache.write(identity)
        return player

    def exit_session(self) -> None:
        """Forget the local identity; shared state is only touched if configured."""
        identity = self.cache.read()
        self.cache.clear()
        current_app.logger.info(
            f"[exit] session={identity.session_code} player={identity.player_id} host={identity.is_host}"
        )
        if self.remove_player_on_exit and identity.player_id:
            self.store.delete_player(identity.player_id)
