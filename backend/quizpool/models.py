from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
import json
import random
import string

from quizpool import db

WAITING = 'waiting'
PLAYING = 'playing'
FINISHED = 'finished'
ACTIVE_STATUSES = (WAITING, PLAYING)

ROOM_CODE_LENGTH = 8


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_address(address) -> str:
    """Wallet addresses are compared lower-cased."""
    return str(address).strip().lower()


def format_amount(amount: Decimal) -> str:
    # Plain notation, no exponent, no trailing zeros ("1.5", "100")
    text = format(amount.normalize(), 'f')
    return text if text != '-0' else '0'


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass(frozen=True, slots=True)
class Question:
    """Multiple-choice question as loaded from the question bank."""

    id: str
    prompt: str
    options: tuple[str, ...]
    correct_index: int
    explanation: str | None = None

    def __post_init__(self):
        if len(self.options) < 2:
            raise ValueError(f'question {self.id} needs at least two options')
        if not 0 <= self.correct_index < len(self.options):
            raise ValueError(f'question {self.id} has correct index {self.correct_index} out of range')

    def to_dict(self, reveal_answer: bool = False) -> dict:
        data = {
            'id': self.id,
            'question': self.prompt,
            'options': list(self.options),
        }
        if reveal_answer:
            data['correctAnswer'] = self.correct_index
            data['explanation'] = self.explanation
        return data

    def to_record(self) -> dict:
        return {
            'id': self.id,
            'prompt': self.prompt,
            'options': list(self.options),
            'correct_index': self.correct_index,
            'explanation': self.explanation,
        }

    @classmethod
    def from_record(cls, data: dict) -> Question:
        return cls(
            id=str(data['id']),
            prompt=data['prompt'],
            options=tuple(data['options']),
            correct_index=int(data['correct_index']),
            explanation=data.get('explanation'),
        )


@dataclass(frozen=True, slots=True)
class Answer:
    """One player's response to one question of a room."""

    question_id: str
    question_index: int
    selected_index: int
    time_spent: float
    is_correct: bool
    points: int

    def to_dict(self) -> dict:
        return {
            'questionId': self.question_id,
            'questionIndex': self.question_index,
            'selectedAnswer': self.selected_index,
            'timeSpent': self.time_spent,
            'isCorrect': self.is_correct,
            'points': self.points,
        }

    def to_record(self) -> dict:
        return {
            'question_id': self.question_id,
            'question_index': self.question_index,
            'selected_index': self.selected_index,
            'time_spent': self.time_spent,
            'is_correct': self.is_correct,
            'points': self.points,
        }

    @classmethod
    def from_record(cls, data: dict) -> Answer:
        return cls(**data)


@dataclass(slots=True)
class Player:
    address: str
    joined_at: datetime = field(default_factory=utcnow)
    score: int = 0
    correct_answers: int = 0
    time_bonus: int = 0
    answers: list[Answer] = field(default_factory=list)

    def answer_for(self, question_index: int) -> Answer | None:
        return next((a for a in self.answers if a.question_index == question_index), None)

    def has_answered(self, question_index: int) -> bool:
        return self.answer_for(question_index) is not None

    def record_answer(self, answer: Answer, time_bonus: int = 0) -> None:
        """Append an answer and fold it into the cached aggregates."""
        self.answers.append(answer)
        self.score += answer.points
        if answer.is_correct:
            self.correct_answers += 1
            self.time_bonus += time_bonus

    def to_dict(self) -> dict:
        return {
            'address': self.address,
            'score': self.score,
            'correctAnswers': self.correct_answers,
            'timeBonus': self.time_bonus,
            'answers': [a.to_dict() for a in self.answers],
            'joinedAt': _iso(self.joined_at),
        }

    def to_record(self) -> dict:
        return {
            'address': self.address,
            'joined_at': _iso(self.joined_at),
            'score': self.score,
            'correct_answers': self.correct_answers,
            'time_bonus': self.time_bonus,
            'answers': [a.to_record() for a in self.answers],
        }

    @classmethod
    def from_record(cls, data: dict) -> Player:
        return cls(
            address=data['address'],
            joined_at=_parse_dt(data.get('joined_at')),
            score=int(data.get('score', 0)),
            correct_answers=int(data.get('correct_answers', 0)),
            time_bonus=int(data.get('time_bonus', 0)),
            answers=[Answer.from_record(a) for a in data.get('answers', [])],
        )


@dataclass(frozen=True, slots=True)
class Settlement:
    """Final ranking and payout manifest of a finished room."""

    pool: Decimal
    ranking: tuple[tuple[str, int], ...]
    payouts: dict[str, Decimal]

    def prize_for(self, address: str) -> Decimal:
        return self.payouts.get(address, Decimal('0'))

    def winners(self, limit: int = 3) -> list[dict]:
        return [
            {'address': address, 'score': score, 'prize': format_amount(self.prize_for(address))}
            for address, score in self.ranking[:limit]
        ]

    def to_record(self) -> dict:
        return {
            'pool': str(self.pool),
            'ranking': [[address, score] for address, score in self.ranking],
            'payouts': [[address, str(amount)] for address, amount in self.payouts.items()],
        }

    @classmethod
    def from_record(cls, data: dict) -> Settlement:
        return cls(
            pool=Decimal(data['pool']),
            ranking=tuple((address, int(score)) for address, score in data['ranking']),
            payouts={address: Decimal(amount) for address, amount in data['payouts']},
        )


def generate_room_code(taken, length=ROOM_CODE_LENGTH):
    """Generate a short room code not present in ``taken``."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if code not in taken:
            return code


@dataclass(slots=True)
class Room:
    id: str
    name: str
    category: str
    entry_fee: Decimal
    host_address: str
    questions: tuple[Question, ...]
    max_players: int
    creator: str = ''
    players: list[Player] = field(default_factory=list)
    status: str = WAITING
    current_question: int = 0
    created_at: datetime = field(default_factory=utcnow)
    started_at: datetime | None = None
    finished_at: datetime | None = None
    settlement: Settlement | None = None

    def __post_init__(self):
        if not self.creator:
            self.creator = self.host_address

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.max_players

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def pool(self) -> Decimal:
        return self.entry_fee * len(self.players)

    @property
    def gameplay_complete(self) -> bool:
        return bool(self.players) and all(len(p.answers) == len(self.questions) for p in self.players)

    def find_player(self, address: str) -> Player | None:
        address = normalize_address(address)
        return next((p for p in self.players if p.address == address), None)

    def is_host(self, address: str) -> bool:
        address = normalize_address(address)
        return address in (self.host_address, self.creator)

    def advance_question_pointer(self) -> None:
        # Moves past every question all enrolled players have answered
        while self.current_question < len(self.questions) and all(
            p.has_answered(self.current_question) for p in self.players
        ):
            self.current_question += 1

    def to_dict(self) -> dict:
        reveal = self.status == FINISHED
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'entryFee': format_amount(self.entry_fee),
            'hostAddress': self.host_address,
            'creator': self.creator,
            'players': [p.to_dict() for p in self.players],
            'status': self.status,
            'questions': [q.to_dict(reveal_answer=reveal) for q in self.questions],
            'currentQuestion': self.current_question,
            'totalQuestions': len(self.questions),
            'maxPlayers': self.max_players,
            'prizePool': format_amount(self.pool),
            'createdAt': _iso(self.created_at),
            'startedAt': _iso(self.started_at),
            'finishedAt': _iso(self.finished_at),
        }

    def to_record(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'entry_fee': str(self.entry_fee),
            'host_address': self.host_address,
            'creator': self.creator,
            'questions': [q.to_record() for q in self.questions],
            'max_players': self.max_players,
            'players': [p.to_record() for p in self.players],
            'status': self.status,
            'current_question': self.current_question,
            'created_at': _iso(self.created_at),
            'started_at': _iso(self.started_at),
            'finished_at': _iso(self.finished_at),
            'settlement': self.settlement.to_record() if self.settlement else None,
        }

    @classmethod
    def from_record(cls, data: dict) -> Room:
        return cls(
            id=data['id'],
            name=data['name'],
            category=data['category'],
            entry_fee=Decimal(data['entry_fee']),
            host_address=data['host_address'],
            creator=data.get('creator') or data['host_address'],
            questions=tuple(Question.from_record(q) for q in data['questions']),
            max_players=int(data['max_players']),
            players=[Player.from_record(p) for p in data.get('players', [])],
            status=data.get('status', WAITING),
            current_question=int(data.get('current_question', 0)),
            created_at=_parse_dt(data.get('created_at')),
            started_at=_parse_dt(data.get('started_at')),
            finished_at=_parse_dt(data.get('finished_at')),
            settlement=Settlement.from_record(data['settlement']) if data.get('settlement') else None,
        )


class RoomRecord(db.Model):
    """Durable snapshot of a room, used by the SQL room store."""
    __tablename__ = 'room_record'
    seq = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.String(ROOM_CODE_LENGTH), unique=True, nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False, default=WAITING, index=True)
    category = db.Column(db.String(64), nullable=False)
    payload = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def load(self) -> Room:
        return Room.from_record(json.loads(self.payload))

    def store(self, room: Room) -> None:
        self.room_id = room.id
        self.status = room.status
        self.category = room.category
        self.payload = json.dumps(room.to_record())
