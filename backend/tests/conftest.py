import os
import sys
import pytest

# Ensure the backend root (containing the `wrapped` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from wrapped import create_app, db
from wrapped.services.party import SongInput, create_party, join_party


class TestConfig:
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_TABLES = False
    SONGS_PER_ROUND = 5
    CORS_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import wrapped.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def make_songs(prefix, external_ids=('', '', '')):
    return [
        SongInput(title=f'{prefix} song {i}', external_id=ext, thumbnail_url=f'{prefix}-thumb{i}')
        for i, ext in enumerate(external_ids, start=1)
    ]


@pytest.fixture()
def joined_party(flask_app):
    """Alice and Bob joined with three untagged songs each, 5 songs per round."""
    party_id, token = create_party('New Year', songs_per_round=5)
    alice = join_party(party_id, 'Alice', make_songs('alice'))
    bob = join_party(party_id, 'Bob', make_songs('bob'))
    return party_id, token, alice.id, bob.id
