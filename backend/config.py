import os

class Config:
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///wrapped.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Create tables on startup (schema is append-only, no migrations)
    AUTO_CREATE_TABLES = os.environ.get('AUTO_CREATE_TABLES', '1') not in ('0', 'false', 'False')
    # Songs played per round; fixed per party at creation
    SONGS_PER_ROUND = int(os.environ.get('SONGS_PER_ROUND', '5'))
    # Comma separated list of allowed browser origins for the JSON API
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173'
    ).split(',') if o.strip()]
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Optional: append party events to this file as well
    PARTY_LOG_FILE = os.environ.get('PARTY_LOG_FILE')
