from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from wrapped import db
from wrapped.models import Party
from .errors import NotFoundError, StorageFailureError


@contextmanager
def storage_errors() -> Iterator[None]:
    """Roll back and re-raise database errors as StorageFailureError."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise StorageFailureError(str(exc)) from exc


@contextmanager
def atomic() -> Iterator[None]:
    """Run the enclosed writes as one transaction.

    Commits on success. Any exception, domain or database, rolls the whole
    unit back so no partial state becomes visible.
    """
    with storage_errors():
        try:
            yield
        except Exception:
            db.session.rollback()
            raise
        db.session.commit()


def get_party(party_id: str, lock: str = None) -> Party:
    """Load a party or raise NotFoundError.

    ``lock`` is ``'update'`` for an exclusive row lock or ``'share'`` for a
    shared one; backends without row locks (SQLite) ignore it.
    """
    stmt = select(Party).where(Party.id == party_id)
    if lock == 'update':
        stmt = stmt.with_for_update()
    elif lock == 'share':
        stmt = stmt.with_for_update(read=True)
    party = db.session.scalars(stmt).first()
    if party is None:
        raise NotFoundError(f"Party {party_id} not found")
    return party
