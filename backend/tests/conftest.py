import os
import sys
import pytest

# Ensure the backend root (containing the `quizpool` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from quizpool import create_app, db
from quizpool.questions import QuestionBank


HOST = '0xHost000000000000000000000000000000000001'
ALICE = '0xA11ce00000000000000000000000000000000002'
BOB = '0xB0b0000000000000000000000000000000000003'
CARA = '0xCa7a000000000000000000000000000000000004'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ROOM_STORE = 'memory'
    QUESTION_BANK_PATH = None
    DEFAULT_MAX_PLAYERS = 4
    DEFAULT_TIME_SPENT_SEC = 30
    CORS_ORIGINS = ['http://localhost:3000']
    LOG_LEVEL = 'DEBUG'


class SqlTestConfig(TestConfig):
    ROOM_STORE = 'sql'


def _make_app(config_class):
    application = create_app(config_class)
    with application.app_context():
        # Ensure models are imported so tables are created
        import quizpool.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def flask_app():
    yield from _make_app(TestConfig)


@pytest.fixture()
def sql_app():
    yield from _make_app(SqlTestConfig)


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sql_client(sql_app):
    return sql_app.test_client()


@pytest.fixture()
def engine(flask_app):
    from quizpool.services.engine import get_engine
    return get_engine()


@pytest.fixture()
def bank():
    return QuestionBank.from_file()


def correct_index_for(engine, room_id, question_index):
    room = engine.registry.get_room(room_id)
    return room.questions[question_index].correct_index
