from dataclasses import asdict, dataclass
from typing import Iterator, Optional

from impostor.services.games.selection import is_impostor, word_for_player


@dataclass(frozen=True)
class RevealedCard:
    is_impostor: bool
    word: str
    round_number: int

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class ClientView:
    session_code: str
    player_id: Optional[str]
    is_host: bool
    player_count: int
    round_number: int
    in_game: bool
    is_impostor: bool
    word: Optional[str]
    first_player_id: Optional[str]

    def to_dict(self):
        return asdict(self)


def derive_view(snapshot: dict, identity) -> ClientView:
    """Local view state for one client, rebuilt from scratch from a snapshot.

    Nothing from a previous view is merged in: the notified snapshot is
    authoritative for every field.
    """
    round_number = int(snapshot.get('round_number') or 0)
    impostors = snapshot.get('impostors') or []
    player_id = identity.player_id
    players = snapshot.get('players')
    player_count = snapshot.get('player_count', len(players) if players is not None else 0)
    in_game = round_number > 0
    word = None
    if in_game and player_id:
        word = word_for_player(player_id, snapshot.get('current_word'), impostors)
    return ClientView(
        session_code=snapshot['code'],
        player_id=player_id,
        is_host=bool(player_id) and player_id == snapshot.get('host_id'),
        player_count=player_count,
        round_number=round_number,
        in_game=in_game,
        is_impostor=in_game and bool(player_id) and is_impostor(player_id, impostors),
        word=word,
        first_player_id=snapshot.get('first_player_id') if in_game else None,
    )


def follow(subscription, identity) -> Iterator[ClientView]:
    """One fresh view per snapshot until the subscription is cancelled."""
    for snapshot in subscription:
        yield derive_view(snapshot, identity)
