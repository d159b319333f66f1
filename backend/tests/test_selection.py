import random
from collections import Counter
from itertools import combinations

import pytest

from impostor.services.games.selection import (
    IMPOSTOR_MESSAGE,
    is_impostor,
    select_first_player,
    select_impostors,
    word_for_player,
)


def _roster(n):
    return [{'id': f'p{i}', 'name': f'Player {i}'} for i in range(n)]


@pytest.mark.parametrize('n', range(1, 7))
def test_selects_min_count_distinct_ids_from_roster(n):
    rng = random.Random(n)
    roster = _roster(n)
    ids = {p['id'] for p in roster}
    for count in range(0, n + 2):
        chosen = select_impostors(roster, count, rng)
        assert len(chosen) == min(count, n)
        assert chosen <= ids


def test_zero_or_negative_count_selects_nobody():
    roster = _roster(4)
    assert select_impostors(roster, 0) == set()
    assert select_impostors(roster, -3) == set()


def test_count_at_or_above_roster_size_selects_everyone():
    roster = _roster(3)
    everyone = {'p0', 'p1', 'p2'}
    assert select_impostors(roster, 3) == everyone
    assert select_impostors(roster, 10) == everyone


def test_empty_roster():
    assert select_impostors([], 2) == set()
    assert select_first_player([], set()) == ''


def test_each_player_equally_likely():
    rng = random.Random(1234)
    roster = _roster(4)
    trials = 8000
    counts = Counter()
    for _ in range(trials):
        counts.update(select_impostors(roster, 1, rng))
    for p in roster:
        assert abs(counts[p['id']] / trials - 0.25) < 0.03


def test_every_subset_equally_likely():
    rng = random.Random(99)
    roster = _roster(4)
    trials = 12000
    counts = Counter(frozenset(select_impostors(roster, 2, rng)) for _ in range(trials))
    subsets = [frozenset(c) for c in combinations([p['id'] for p in roster], 2)]
    assert set(counts) == set(subsets)
    for subset in subsets:
        assert abs(counts[subset] - trials / 6) < 300


def test_membership_matches_selection():
    rng = random.Random(5)
    roster = _roster(5)
    chosen = select_impostors(roster, 2, rng)
    for p in roster:
        assert is_impostor(p['id'], chosen) == (p['id'] in chosen)


def test_accepts_objects_with_id():
    class P:
        def __init__(self, id):
            self.id = id
    chosen = select_impostors([P('a'), P('b')], 1, random.Random(0))
    assert len(chosen) == 1 and chosen <= {'a', 'b'}


def test_first_player_mostly_not_an_impostor():
    rng = random.Random(2024)
    roster = _roster(4)
    impostors = {'p0'}
    trials = 10000
    impostor_starts = sum(select_first_player(roster, impostors, rng) == 'p0' for _ in range(trials))
    assert 0.03 < impostor_starts / trials < 0.07


def test_first_player_falls_back_to_non_empty_group():
    roster = _roster(3)
    rng = random.Random(3)
    assert select_first_player(roster, {'p0', 'p1', 'p2'}, rng) in {'p0', 'p1', 'p2'}
    assert select_first_player(roster, set(), rng) in {'p0', 'p1', 'p2'}


def test_word_for_player_hides_word_from_impostors():
    assert word_for_player('p1', 'Mate', {'p1'}) == IMPOSTOR_MESSAGE
    assert word_for_player('p2', 'Mate', {'p1'}) == 'Mate'
    assert IMPOSTOR_MESSAGE == '¡Sos un IMPOSTOR!'
