"""Impostor and first-player selection.

Pure functions over a roster (any sequence of objects or dicts exposing an
``id``). They never fail; an optional ``rng`` makes them deterministic.
"""

import random
from typing import Iterable, Optional, Sequence, Set

IMPOSTOR_MESSAGE = '¡Sos un IMPOSTOR!'
# Chance that an impostor opens the discussion
IMPOSTOR_START_PROBABILITY = 0.05


def _player_id(player) -> str:
    if isinstance(player, dict):
        return player['id']
    if isinstance(player, str):
        return player
    return player.id


def select_impostors(roster: Sequence, count: int, rng: Optional[random.Random] = None) -> Set[str]:
    """Uniformly random subset of ``min(count, len(roster))`` player ids."""
    rng = rng or random
    if count <= 0 or not roster:
        return set()
    ids = [_player_id(p) for p in roster]
    # Fisher-Yates
    for i in range(len(ids) - 1, 0, -1):
        j = rng.randint(0, i)
        ids[i], ids[j] = ids[j], ids[i]
    return set(ids[:min(count, len(ids))])


def select_first_player(roster: Sequence, impostor_ids: Iterable[str], rng: Optional[random.Random] = None) -> str:
    """Pick who speaks first, favouring non-impostors. Empty roster gives ''."""
    rng = rng or random
    if not roster:
        return ''
    impostor_ids = set(impostor_ids)
    ids = [_player_id(p) for p in roster]
    impostors = [pid for pid in ids if pid in impostor_ids]
    others = [pid for pid in ids if pid not in impostor_ids]
    if not others:
        return rng.choice(impostors)
    if not impostors:
        return rng.choice(others)
    if rng.random() < IMPOSTOR_START_PROBABILITY:
        return rng.choice(impostors)
    return rng.choice(others)


def is_impostor(player_id: str, impostor_ids: Iterable[str]) -> bool:
    return player_id in set(impostor_ids)


def word_for_player(player_id: str, word: str, impostor_ids: Iterable[str]) -> str:
    """What the player's card shows: the decoy message for impostors."""
    return IMPOSTOR_MESSAGE if is_impostor(player_id, impostor_ids) else word
