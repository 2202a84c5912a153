from flask import current_app

from quizpool.questions import QuestionBank
from quizpool.services.answers import AnswerHandler
from quizpool.services.lifecycle import RoomLifecycle
from quizpool.services.registry import InMemoryRoomStore, RoomRegistry, SqlRoomStore

EXTENSION_KEY = 'quizpool'


class GameEngine:
    """Wires the question bank, room registry and room services together."""

    def __init__(self, bank, store, default_max_players=4, default_time_spent=30):
        self.bank = bank
        self.registry = RoomRegistry(store, bank, default_max_players=default_max_players)
        self.lifecycle = RoomLifecycle(self.registry)
        self.answers = AnswerHandler(self.registry, default_time_spent=default_time_spent)

    @classmethod
    def from_config(cls, config, db):
        bank = QuestionBank.from_file(config.get('QUESTION_BANK_PATH'))
        kind = (config.get('ROOM_STORE') or 'memory').lower()
        if kind == 'sql':
            store = SqlRoomStore(db)
        elif kind == 'memory':
            store = InMemoryRoomStore()
        else:
            raise ValueError(f'Unknown ROOM_STORE {kind!r}')
        return cls(
            bank,
            store,
            default_max_players=int(config.get('DEFAULT_MAX_PLAYERS', 4)),
            default_time_spent=float(config.get('DEFAULT_TIME_SPENT_SEC', 30)),
        )


def get_engine() -> GameEngine:
    return current_app.extensions[EXTENSION_KEY]
