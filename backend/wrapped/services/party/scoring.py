from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from flask import current_app
from sqlalchemy import select

from wrapped import db
from wrapped.models import Guess, Party, Song, User
from .errors import InvalidInputError, NotRevealedError
from .rounds import party_songs_query, round_of, round_window
from .store import get_party, storage_errors

IdentityKey = Tuple[str, object]


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: int
    user_name: str
    score: int

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class SongResult:
    id: int
    title: str
    external_id: str
    thumbnail_url: str
    owner_names: str
    round: Optional[int]

    def to_dict(self):
        return asdict(self)


def identity_key(song: Song) -> IdentityKey:
    """Songs sharing a non-empty external id count as the same song."""
    if song.external_id:
        return ('external', song.external_id)
    return ('song', song.id)


def revealed_boundary(party: Party) -> int:
    """Number of leading play positions whose owners have been revealed."""
    if not party.started:
        return 0
    if party.show_results:
        return party.current_round * party.songs_per_round
    return (party.current_round - 1) * party.songs_per_round


class _OwnerIndex:
    """Who submitted each song identity within one party."""

    def __init__(self, songs: Iterable[Song]):
        self._ids: Dict[IdentityKey, Set[int]] = {}
        self._names: Dict[IdentityKey, List[str]] = {}
        for song in songs:
            key = identity_key(song)
            self._ids.setdefault(key, set()).add(song.user_id)
            names = self._names.setdefault(key, [])
            if song.owner.name not in names:
                names.append(song.owner.name)

    def is_owner(self, song: Song, user_id: int) -> bool:
        return user_id in self._ids.get(identity_key(song), ())

    def owner_names(self, song: Song) -> str:
        return ', '.join(self._names.get(identity_key(song), [song.owner.name]))


def _load_owner_index(party_id: str) -> _OwnerIndex:
    songs = db.session.scalars(party_songs_query(party_id).order_by(Song.id)).all()
    return _OwnerIndex(songs)


def _score_window(party: Party, round_number: int) -> Tuple[int, int]:
    if round_number > 0:
        return round_window(round_number, party.songs_per_round)
    return 0, revealed_boundary(party)


def get_leaderboard(party_id: str, round_number: int = 0) -> List[LeaderboardEntry]:
    """Correct-guess counts for every participant, highest first.

    ``round_number == 0`` scores every revealed song; a positive round scores
    only that round's songs. Ties keep join order.
    """
    if round_number < 0:
        raise InvalidInputError(f"Round must be 0 or greater, got {round_number}")
    with storage_errors():
        party = get_party(party_id)
        start, stop = _score_window(party, round_number)
        users = db.session.scalars(
            select(User).where(User.party_id == party_id).order_by(User.id)
        ).all()
        scores = {user.id: 0 for user in users}
        owners = _load_owner_index(party_id)
        # Only guessers from the user read above; later joiners wait for the next call
        rows = db.session.execute(
            select(Guess, Song)
            .join(Song, Guess.song_id == Song.id)
            .where(
                Guess.guesser_id.in_(list(scores)),
                Song.shuffle_index >= start,
                Song.shuffle_index < stop,
            )
        ).all()

    for guess, song in rows:
        if guess.guesser_id in scores and owners.is_owner(song, guess.guessed_user_id):
            scores[guess.guesser_id] += 1

    entries = [LeaderboardEntry(user.id, user.name, scores[user.id]) for user in users]
    return sorted(entries, key=lambda entry: entry.score, reverse=True)


def _results(songs: Iterable[Song], owners: _OwnerIndex, songs_per_round: int) -> List[SongResult]:
    return [
        SongResult(
            id=song.id,
            title=song.title,
            external_id=song.external_id,
            thumbnail_url=song.thumbnail_url,
            owner_names=owners.owner_names(song),
            round=round_of(song.shuffle_index, songs_per_round),
        )
        for song in songs
    ]


def get_round_results(party_id: str, round_number: int) -> List[SongResult]:
    """Songs of a revealed round with everyone who submitted each of them."""
    current_app.logger.info(f"[results] party={party_id} round={round_number}")
    with storage_errors():
        party = get_party(party_id)
        start, stop = round_window(round_number, party.songs_per_round)
        if party.current_round < round_number or (
            party.current_round == round_number and not party.show_results
        ):
            raise NotRevealedError(f"Round {round_number} has not been revealed yet")
        songs = db.session.scalars(
            party_songs_query(party_id)
            .where(Song.shuffle_index >= start, Song.shuffle_index < stop)
            .order_by(Song.shuffle_index.asc())
        ).all()
        return _results(songs, _load_owner_index(party_id), party.songs_per_round)


def get_party_songs(party_id: str) -> List[SongResult]:
    """Every song of the party with its owners, in play order."""
    with storage_errors():
        party = get_party(party_id)
        songs = db.session.scalars(
            party_songs_query(party_id).order_by(Song.shuffle_index.asc(), User.name.asc(), Song.id.asc())
        ).all()
        return _results(songs, _load_owner_index(party_id), party.songs_per_round)
