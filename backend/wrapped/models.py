from wrapped import db
import string
import secrets

PARTY_ID_LENGTH = 6
ADMIN_TOKEN_LENGTH = 12
_ALPHABET = string.ascii_uppercase + string.digits


def _random_string(length):
    return ''.join(secrets.choice(_ALPHABET) for _ in range(length))


def generate_admin_token(length=ADMIN_TOKEN_LENGTH):
    """Generate the shared admin secret for a party."""
    return _random_string(length)


def generate_party_id(length=PARTY_ID_LENGTH):
    """Generate a short party id not already used by an existing party."""
    while True:
        party_id = _random_string(length)
        if db.session.get(Party, party_id) is None:
            return party_id


class Party(db.Model):
    __tablename__ = 'party'
    id = db.Column(db.String(PARTY_ID_LENGTH), primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    admin_token = db.Column(db.String(ADMIN_TOKEN_LENGTH), nullable=False)
    started = db.Column(db.Boolean, default=False, nullable=False)
    current_round = db.Column(db.Integer, default=0, nullable=False)  # 0 until started
    show_results = db.Column(db.Boolean, default=False, nullable=False)
    songs_per_round = db.Column(db.Integer, default=5, nullable=False)
    users = db.relationship('User', back_populates='party', order_by='User.id')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'started': self.started,
            'current_round': self.current_round,
            'show_results': self.show_results,
            'songs_per_round': self.songs_per_round,
        }


class User(db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    party_id = db.Column(db.String(PARTY_ID_LENGTH), db.ForeignKey('party.id'), nullable=False, index=True)
    party = db.relationship('Party', back_populates='users')
    songs = db.relationship('Song', back_populates='owner', order_by='Song.id')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
        }


class Song(db.Model):
    __tablename__ = 'song'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(256), nullable=False)
    external_id = db.Column(db.String(64), default='', nullable=False, index=True)  # '' = no catalog identity
    thumbnail_url = db.Column(db.String(512), default='', nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    shuffle_index = db.Column(db.Integer, default=-1, nullable=False)  # -1 until the competition starts
    owner = db.relationship('User', back_populates='songs')

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'external_id': self.external_id,
            'thumbnail_url': self.thumbnail_url,
        }


class Guess(db.Model):
    __tablename__ = 'guess'
    __table_args__ = (db.UniqueConstraint('guesser_id', 'song_id', name='uq_guess_guesser_song'),)
    id = db.Column(db.Integer, primary_key=True)
    guesser_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    song_id = db.Column(db.Integer, db.ForeignKey('song.id'), nullable=False)
    guessed_user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)

    guesser = db.relationship('User', foreign_keys=[guesser_id])
    guessed_user = db.relationship('User', foreign_keys=[guessed_user_id])
    song = db.relationship('Song')
