"""Party lifecycle: creation, joining, start and the round reveal toggle.

A party moves through ``joining -> started -> (playing -> revealed)* ->
game over``. The round/reveal fields live on the party row and every change
to them happens inside a single transaction or statement.
"""

import secrets
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence, Tuple

from flask import current_app
from sqlalchemy import case, select, update

from wrapped import db
from wrapped.models import Party, Song, User, generate_admin_token, generate_party_id
from .errors import AlreadyStartedError, InvalidInputError, NoSongsError, NotFoundError, UnauthorizedError
from .rounds import assign_rounds, get_round_songs
from .store import atomic, get_party, storage_errors

SONGS_PER_USER = 3


@dataclass(frozen=True)
class SongInput:
    title: str
    external_id: str = ''
    thumbnail_url: str = ''

    @classmethod
    def from_dict(cls, data) -> 'SongInput':
        if not isinstance(data, dict):
            raise InvalidInputError('Each song must be an object')
        return cls(
            title=str(data.get('title') or '').strip(),
            external_id=str(data.get('external_id') or '').strip(),
            thumbnail_url=str(data.get('thumbnail_url') or '').strip(),
        )


class PartyState(NamedTuple):
    started: bool
    current_round: int
    show_results: bool


def _required_text(value, label: str) -> str:
    if value is None:
        value = ''
    if not isinstance(value, str):
        raise InvalidInputError(f'{label} must be a string')
    value = value.strip()
    if not value:
        raise InvalidInputError(f'{label} is required')
    return value


def create_party(name: str, songs_per_round: Optional[int] = None) -> Tuple[str, str]:
    """Create a party in the joining phase and return ``(party_id, admin_token)``."""
    name = _required_text(name, 'Party name')
    if songs_per_round is None:
        songs_per_round = int(current_app.config.get('SONGS_PER_ROUND', 5))
    if isinstance(songs_per_round, bool) or not isinstance(songs_per_round, int) or songs_per_round < 1:
        raise InvalidInputError(f"songs_per_round must be a positive integer, got {songs_per_round!r}")

    with atomic():
        party_id = generate_party_id()
        admin_token = generate_admin_token()
        db.session.add(Party(
            id=party_id,
            name=name,
            admin_token=admin_token,
            started=False,
            current_round=0,
            show_results=False,
            songs_per_round=songs_per_round,
        ))
    current_app.logger.info(f"[create] party={party_id} name={name!r} songs_per_round={songs_per_round}")
    return party_id, admin_token


def join_party(party_id: str, user_name: str, songs: Sequence[SongInput]) -> User:
    """Add a participant together with exactly three songs.

    Joining stays open after the competition starts; late songs keep
    ``shuffle_index = -1`` and are never played.
    """
    current_app.logger.info(f"[join] party={party_id} user={user_name!r} songs={len(songs)}")
    if len(songs) != SONGS_PER_USER:
        raise InvalidInputError(f"Exactly {SONGS_PER_USER} songs are required, got {len(songs)}")
    user_name = _required_text(user_name, 'User name')
    if any(not song.title for song in songs):
        raise InvalidInputError('Every song needs a title')

    with atomic():
        # Shared lock: a join lands entirely before or after a start
        get_party(party_id, lock='share')
        user = User(name=user_name, party_id=party_id)
        db.session.add(user)
        db.session.flush()
        for song in songs:
            db.session.add(Song(
                user_id=user.id,
                title=song.title,
                external_id=song.external_id or '',
                thumbnail_url=song.thumbnail_url or '',
                shuffle_index=-1,
            ))
    return user


def start_competition(party_id: str) -> PartyState:
    """Shuffle the whole pool into rounds and open round 1."""
    with atomic():
        party = get_party(party_id, lock='update')
        if party.started:
            raise AlreadyStartedError(f"Party {party_id} has already started")
        song_ids = list(db.session.scalars(
            select(Song.id).join(User, Song.user_id == User.id).where(User.party_id == party_id)
        ))
        songs_per_round = party.songs_per_round
        if not song_ids:
            raise NoSongsError(f"No songs found for party {party_id}")

        positions = assign_rounds(song_ids)
        db.session.execute(
            update(Song),
            [{'id': song_id, 'shuffle_index': index} for song_id, index in positions.items()],
        )
        party.started = True
        party.current_round = 1
        party.show_results = False
    current_app.logger.info(f"[start] party={party_id} songs={len(song_ids)} songs_per_round={songs_per_round}")
    return PartyState(True, 1, False)


def next_round(party_id: str) -> PartyState:
    """Advance one half-step: reveal the current round, or move past it.

    The toggle is a single UPDATE whose SET clauses all read the pre-update
    row, so concurrent calls each apply exactly one half-step.
    """
    with atomic():
        result = db.session.execute(
            update(Party)
            .where(Party.id == party_id, Party.started.is_(True))
            .values(
                current_round=case(
                    (Party.show_results.is_(True), Party.current_round + 1),
                    else_=Party.current_round,
                ),
                show_results=~Party.show_results,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            get_party(party_id)
            raise InvalidInputError(f"Party {party_id} has not started")
    state = get_party_state(party_id)
    if state.show_results:
        current_app.logger.info(f"[reveal] party={party_id} round={state.current_round}")
    else:
        current_app.logger.info(f"[next_round] party={party_id} round={state.current_round}")
    return state


def get_party_state(party_id: str) -> PartyState:
    with storage_errors():
        row = db.session.execute(
            select(Party.started, Party.current_round, Party.show_results).where(Party.id == party_id)
        ).first()
    if row is None:
        raise NotFoundError(f"Party {party_id} not found")
    return PartyState(bool(row.started), int(row.current_round), bool(row.show_results))


def is_game_over(party_id: str) -> bool:
    """True once the current round is past the last populated round."""
    state = get_party_state(party_id)
    if not state.started or state.show_results:
        return False
    return not get_round_songs(party_id, state.current_round)


def get_party_name(party_id: str) -> str:
    with storage_errors():
        return get_party(party_id).name


def get_users(party_id: str) -> List[User]:
    with storage_errors():
        get_party(party_id)
        stmt = select(User).where(User.party_id == party_id).order_by(User.name.asc(), User.id.asc())
        return list(db.session.scalars(stmt))


def verify_admin(party_id: str, token: Optional[str]) -> bool:
    """Check ``token`` against the party's admin secret; unknown parties never match."""
    with storage_errors():
        stored = db.session.scalar(select(Party.admin_token).where(Party.id == party_id))
    if stored is None or not token:
        return False
    return secrets.compare_digest(stored.encode(), str(token).encode())


def require_admin(party_id: str, token: Optional[str]) -> None:
    """Raise NotFoundError for an unknown party, UnauthorizedError for a bad token."""
    with storage_errors():
        get_party(party_id)
    if not verify_admin(party_id, token):
        raise UnauthorizedError(f"Invalid admin token for party {party_id}")
