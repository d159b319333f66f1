import pytest

from impostor.services.games.errors import StoreUnavailable
from impostor.services.games.restore import Destination, RestoreGuard, parse_route
from impostor.services.identity import LocalIdentity, MemoryIdentityCache


class FakeStore:
    def __init__(self, rounds=None, fail=False):
        self.rounds = rounds or {}
        self.fail = fail
        self.reads = 0

    def get_session_by_code(self, code):
        self.reads += 1
        if self.fail:
            raise StoreUnavailable()
        if code not in self.rounds:
            return None
        return {'code': code, 'round_number': self.rounds[code]}


def _guard(identity=None, **store_kwargs):
    cache = MemoryIdentityCache(identity)
    return RestoreGuard(FakeStore(**store_kwargs), cache), cache


@pytest.fixture(autouse=True)
def _app_context(flask_app):
    yield


def test_parse_route():
    assert parse_route('/game/ab12') == ('game', 'AB12')
    assert parse_route('/lobby/XYZ/') == ('lobby', 'XYZ')
    assert parse_route('/') == (None, None)
    assert parse_route('/about') == (None, None)


def test_player_returning_home_mid_game_goes_to_game():
    guard, _ = _guard(LocalIdentity('AB12', 'p1', 'Ana', False), rounds={'AB12': 2})
    assert guard.resolve('/') == Destination('/game/AB12', {}, True)


def test_host_returning_home_in_lobby_goes_to_host_lobby():
    guard, _ = _guard(LocalIdentity('AB12', 'h', 'Host', True), rounds={'AB12': 0})
    assert guard.resolve('/').path == '/lobby/AB12'


def test_player_returning_home_in_lobby_goes_to_join_view():
    guard, _ = _guard(LocalIdentity('AB12', 'p1', 'Ana', False), rounds={'AB12': 0})
    assert guard.resolve('/').path == '/join/AB12'


def test_join_link_on_home_is_not_hijacked():
    guard, _ = _guard(LocalIdentity('AB12', 'p1', 'Ana', False), rounds={'AB12': 3})
    assert guard.resolve('/', {'join': 'ZZ99'}) == Destination('/', {'join': 'ZZ99'}, False)


def test_home_without_cached_session_passes():
    guard, _ = _guard()
    assert guard.resolve('/') == Destination('/', {}, False)
    assert guard.store.reads == 0


def test_lobby_url_for_own_session():
    host_guard, _ = _guard(LocalIdentity('AB12', 'h', 'Host', True), rounds={'AB12': 0})
    assert host_guard.resolve('/lobby/AB12') == Destination('/lobby/AB12', {}, False)

    player_guard, _ = _guard(LocalIdentity('AB12', 'p1', 'Ana', False), rounds={'AB12': 0})
    assert player_guard.resolve('/lobby/AB12').path == '/join/AB12'


def test_lobby_url_for_player_mid_game_lands_in_game():
    guard, _ = _guard(LocalIdentity('AB12', 'p1', 'Ana', False), rounds={'AB12': 1})
    assert guard.resolve('/lobby/AB12').path == '/game/AB12'


def test_lobby_url_for_other_session_becomes_join_prefill():
    guard, _ = _guard(LocalIdentity('AB12', 'p1', 'Ana', False), rounds={'AB12': 0, 'CD34': 0})
    assert guard.resolve('/lobby/CD34') == Destination('/', {'join': 'CD34'}, True)


def test_legacy_host_route_goes_to_lobby():
    guard, _ = _guard(LocalIdentity('AB12', 'h', 'Host', True), rounds={'AB12': 0})
    assert guard.resolve('/host/AB12') == Destination('/lobby/AB12', {}, True)


def test_player_view_redirects_once_round_started():
    guard, _ = _guard(LocalIdentity('AB12', 'p1', 'Ana', False), rounds={'AB12': 1})
    assert guard.resolve('/join/AB12').path == '/game/AB12'


def test_player_view_in_lobby_passes():
    guard, _ = _guard(LocalIdentity('AB12', 'p1', 'Ana', False), rounds={'AB12': 0})
    assert guard.resolve('/join/AB12') == Destination('/join/AB12', {}, False)


def test_game_view_without_session_clears_stale_identity():
    guard, cache = _guard(LocalIdentity(None, 'p-old', 'Old', True))
    assert guard.resolve('/game/AB12') == Destination('/', {}, True)
    assert cache.read() == LocalIdentity()


def test_player_view_without_session_keeps_code_for_join():
    guard, _ = _guard()
    assert guard.resolve('/join/ab12') == Destination('/', {'join': 'AB12'}, True)


def test_store_failure_fails_open_to_lobby():
    guard, _ = _guard(LocalIdentity('AB12', 'p1', 'Ana', False), fail=True)
    assert guard.resolve('/').path == '/join/AB12'
    assert guard.resolve('/join/AB12').path == '/join/AB12'


def test_other_routes_pass_through():
    guard, _ = _guard(LocalIdentity('AB12', 'p1', 'Ana', False), rounds={'AB12': 2})
    assert guard.resolve('/rules', {'tab': 'faq'}) == Destination('/rules', {'tab': 'faq'}, False)
    assert guard.resolve('/game/AB12') == Destination('/game/AB12', {}, False)


def test_one_lookup_per_navigation():
    guard, _ = _guard(LocalIdentity('AB12', 'p1', 'Ana', False), rounds={'AB12': 0})
    assert guard.resolve('/').path == '/join/AB12'
    assert guard.store.reads == 1
    guard.resolve('/')
    assert guard.store.reads == 2


def test_malformed_navigation_input_is_treated_as_home():
    guard, _ = _guard()
    assert parse_route(7) == (None, None)
    assert guard.resolve(7) == Destination('/', {}, False)
    assert guard.resolve('/rules', {'join': 5, 'tab': 'faq'}) == Destination('/rules', {'tab': 'faq'}, False)
