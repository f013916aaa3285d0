import random
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, select

from wrapped import db
from wrapped.models import Song, User
from .errors import InvalidInputError
from .store import get_party, storage_errors


def assign_rounds(song_ids: Iterable[int], rng: Optional[random.Random] = None) -> Dict[int, int]:
    """Return a uniformly random play position for every song id.

    Positions are 0-based and contiguous; ``random.shuffle`` is an unbiased
    Fisher-Yates shuffle.
    """
    order = list(song_ids)
    (rng or random).shuffle(order)
    return {song_id: index for index, song_id in enumerate(order)}


def round_window(round_number: int, songs_per_round: int) -> Tuple[int, int]:
    """Half-open ``shuffle_index`` range covered by a 1-based round."""
    if round_number < 1:
        raise InvalidInputError(f"Round must be 1 or greater, got {round_number}")
    start = (round_number - 1) * songs_per_round
    return start, start + songs_per_round


def round_of(shuffle_index: int, songs_per_round: int) -> Optional[int]:
    if shuffle_index < 0:
        return None
    return shuffle_index // songs_per_round + 1


def party_songs_query(party_id: str):
    return select(Song).join(User, Song.user_id == User.id).where(User.party_id == party_id)


def get_round_songs(party_id: str, round_number: int) -> List[Song]:
    """Songs played in ``round_number``, in play order.

    An empty list means the round has no songs, which is how callers detect
    that the competition has run out of material.
    """
    with storage_errors():
        party = get_party(party_id)
        start, stop = round_window(round_number, party.songs_per_round)
        stmt = (
            party_songs_query(party_id)
            .where(Song.shuffle_index >= start, Song.shuffle_index < stop)
            .order_by(Song.shuffle_index.asc())
        )
        return list(db.session.scalars(stmt))


def get_total_songs(party_id: str) -> int:
    with storage_errors():
        get_party(party_id)
        stmt = (
            select(func.count(Song.id))
            .join(User, Song.user_id == User.id)
            .where(User.party_id == party_id)
        )
        return db.session.scalar(stmt) or 0
