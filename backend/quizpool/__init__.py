from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=flask_app.config.get('CORS_ORIGINS') or '*')

    # Room services live on the app so handlers never share module state
    from quizpool.services.engine import EXTENSION_KEY, GameEngine
    flask_app.extensions[EXTENSION_KEY] = GameEngine.from_config(flask_app.config, db)

    from quizpool.main import main
    flask_app.register_blueprint(main)

    from quizpool.api.rooms import rooms
    # Mounted under /api to match the frontend API client
    flask_app.register_blueprint(rooms, url_prefix='/api')

    from quizpool.errors import GameError

    @flask_app.errorhandler(GameError)
    def handle_game_error(exc):
        flask_app.logger.info(f"[rejected] code={exc.code} status={exc.status_code} message={exc.message}")
        return jsonify(exc.to_dict()), exc.status_code

    @flask_app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        if isinstance(exc, HTTPException):
            return jsonify({'error': exc.description, 'code': exc.name.upper().replace(' ', '_')}), exc.code
        flask_app.logger.exception(f"[error] unhandled {type(exc).__name__}: {exc}")
        return jsonify({'error': 'Internal server error', 'code': 'INTERNAL_ERROR'}), 500

    # Ensure the room_record table is registered with SQLAlchemy metadata
    import quizpool.models  # noqa: F401

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the room tables."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    @click.command('questions')
    def questions_command():
        """Lists question bank categories and their sizes."""
        bank = flask_app.extensions[EXTENSION_KEY].bank
        for category, count in bank.counts().items():
            print(f'{category}: {count} questions')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(questions_command)

    return flask_app
