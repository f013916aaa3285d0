import logging

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
import click
from config import Config

db = SQLAlchemy()
cors = CORS()


def _configure_logging(flask_app):
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))
    log_file = flask_app.config.get('PARTY_LOG_FILE')
    if log_file:
        handler = logging.FileHandler(log_file)
        handler.setFormatter(logging.Formatter('PARTY: %(asctime)s %(message)s'))
        flask_app.logger.addHandler(handler)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    _configure_logging(flask_app)

    db.init_app(flask_app)
    cors.init_app(flask_app, origins=flask_app.config.get('CORS_ORIGINS', []))

    from wrapped.api.parties import parties
    flask_app.register_blueprint(parties, url_prefix='/api/parties')

    # Ensure models are registered on the metadata before create_all
    from wrapped import models  # noqa: F401

    if flask_app.config.get('AUTO_CREATE_TABLES'):
        with flask_app.app_context():
            db.create_all()

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates every party table."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
