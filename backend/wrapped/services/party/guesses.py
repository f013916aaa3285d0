from typing import Dict

from flask import current_app
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import aliased

from wrapped import db
from wrapped.models import Guess, Song, User
from .errors import NotFoundError, StorageFailureError
from .store import atomic, get_party, storage_errors

_INSERTS = {
    'postgresql': postgresql.insert,
    'sqlite': sqlite.insert,
}


def _upsert_guess_statement(guesser_id: int, song_id: int, guessed_user_id: int):
    dialect = db.session.get_bind().dialect.name
    insert = _INSERTS.get(dialect)
    if insert is None:
        raise StorageFailureError(f"Guess upsert is not supported on {dialect}")
    stmt = insert(Guess).values(guesser_id=guesser_id, song_id=song_id, guessed_user_id=guessed_user_id)
    return stmt.on_conflict_do_update(
        index_elements=[Guess.guesser_id, Guess.song_id],
        set_={'guessed_user_id': stmt.excluded.guessed_user_id},
    )


def submit_guess(guesser_id: int, song_id: int, guessed_user_id: int) -> None:
    """Record ``guesser_id``'s pick for the owner of ``song_id``.

    One live guess per (guesser, song): a later guess overwrites the earlier
    one in a single upsert statement. Party membership of the three ids is
    not cross-checked.
    """
    current_app.logger.info(
        f"[guess] guesser={guesser_id} song={song_id} guessed_owner={guessed_user_id}"
    )
    with atomic():
        if db.session.get(Song, song_id) is None:
            raise NotFoundError(f"Song {song_id} not found")
        for user_id in {guesser_id, guessed_user_id}:
            if db.session.get(User, user_id) is None:
                raise NotFoundError(f"User {user_id} not found")
        db.session.execute(_upsert_guess_statement(guesser_id, song_id, guessed_user_id))


def get_user_guesses(party_id: str, user_name: str) -> Dict[int, str]:
    """Map song id -> guessed owner name for a participant of the party."""
    guesser = aliased(User)
    guessed = aliased(User)
    with storage_errors():
        get_party(party_id)
        rows = db.session.execute(
            select(Guess.song_id, guessed.name)
            .join(guesser, Guess.guesser_id == guesser.id)
            .join(guessed, Guess.guessed_user_id == guessed.id)
            .where(guesser.party_id == party_id, guesser.name == user_name)
            .order_by(Guess.song_id)
        ).all()
    return {song_id: name for song_id, name in rows}
