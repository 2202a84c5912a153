"""Room registry: the single owner of room state.

Rooms live in a ``RoomStore``. The in-memory store keeps live objects for the
lifetime of the process; the SQL store keeps JSON snapshots in the
``room_record`` table so a restart does not lose running games. Every write
goes through ``RoomRegistry.edit`` which serializes operations per room.
"""

from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal, InvalidOperation
import logging
import threading
from typing import Dict, Iterator, List, Optional

from quizpool.errors import CategoryNotFound, InvalidInput, RoomNotFound
from quizpool.models import (
    ACTIVE_STATUSES,
    Player,
    Room,
    RoomRecord,
    generate_room_code,
    normalize_address,
)
from quizpool.questions import QuestionBank

logger = logging.getLogger(__name__)

QUESTIONS_PER_ROOM = 10
MIN_MAX_PLAYERS = 2
MAX_FEE_DECIMALS = 18


class RoomStore:
    """Storage backend for rooms, keyed by room code, insertion ordered."""

    def add(self, room: Room) -> None:
        raise NotImplementedError

    def get(self, room_id: str) -> Optional[Room]:
        raise NotImplementedError

    def save(self, room: Room) -> None:
        raise NotImplementedError

    def rooms(self, statuses=None) -> List[Room]:
        raise NotImplementedError

    def __contains__(self, room_id) -> bool:
        return self.get(room_id) is not None


class InMemoryRoomStore(RoomStore):
    def __init__(self):
        self._rooms: Dict[str, Room] = {}

    def add(self, room):
        self._rooms[room.id] = room

    def get(self, room_id):
        return self._rooms.get(room_id)

    def save(self, room):
        self._rooms[room.id] = room

    def rooms(self, statuses=None):
        return [r for r in self._rooms.values() if statuses is None or r.status in statuses]

    def __contains__(self, room_id):
        return room_id in self._rooms


class SqlRoomStore(RoomStore):
    """Flask-SQLAlchemy backed store; needs an application context."""

    def __init__(self, db):
        self.db = db

    def _record(self, room_id):
        return RoomRecord.query.filter_by(room_id=room_id).first()

    def add(self, room):
        record = RoomRecord()
        record.store(room)
        self.db.session.add(record)
        self.db.session.commit()

    def get(self, room_id):
        record = self._record(room_id)
        return record.load() if record else None

    def save(self, room):
        record = self._record(room.id)
        if record is None:
            record = RoomRecord()
        record.store(room)
        self.db.session.add(record)
        try:
            self.db.session.commit()
        except Exception:
            self.db.session.rollback()
            raise

    def rooms(self, statuses=None):
        query = RoomRecord.query
        if statuses is not None:
            query = query.filter(RoomRecord.status.in_(list(statuses)))
        return [record.load() for record in query.order_by(RoomRecord.seq).all()]

    def __contains__(self, room_id):
        return RoomRecord.query.filter_by(room_id=room_id).count() > 0


def normalize_room_id(room_id) -> str:
    return str(room_id or '').strip().upper()


def _parse_entry_fee(value) -> Decimal:
    if value is None or value == '':
        return Decimal('0')
    if isinstance(value, bool):
        raise InvalidInput('entryFee must be a number')
    try:
        fee = Decimal(str(value))
    except InvalidOperation:
        raise InvalidInput('entryFee must be a number')
    if not fee.is_finite() or fee < 0:
        raise InvalidInput('entryFee must be a non-negative amount')
    if fee.as_tuple().exponent < -MAX_FEE_DECIMALS:
        raise InvalidInput(f'entryFee supports at most {MAX_FEE_DECIMALS} decimals')
    return fee


def _parse_max_players(value, default: int) -> int:
    if value is None or value == '':
        return default
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidInput('maxPlayers must be an integer')
    try:
        max_players = int(value)
    except (TypeError, ValueError):
        raise InvalidInput('maxPlayers must be an integer')
    if max_players < MIN_MAX_PLAYERS:
        raise InvalidInput(f'maxPlayers must be at least {MIN_MAX_PLAYERS}')
    return max_players


class RoomRegistry:
    def __init__(self, store: RoomStore, bank: QuestionBank, default_max_players: int = 4):
        self.store = store
        self.bank = bank
        self.default_max_players = default_max_players
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, room_id: str) -> threading.Lock:
        """Lock of an existing room; unknown ids never get an entry."""
        with self._locks_guard:
            lock = self._locks.get(room_id)
            if lock is None:
                # rooms loaded from a durable store after a restart
                if self.store.get(room_id) is None:
                    raise RoomNotFound(room_id=room_id)
                lock = self._locks[room_id] = threading.Lock()
            return lock

    def create_room(self, host_address, category, name, entry_fee=None, max_players=None) -> Room:
        """Create a waiting room with a fresh 10-question draw; the host joins it."""
        if not host_address or not category or not name:
            raise InvalidInput()
        if not all(isinstance(v, str) for v in (host_address, category, name)) or not name.strip():
            raise InvalidInput('hostAddress, category and name must be strings')
        fee = _parse_entry_fee(entry_fee)
        capacity = _parse_max_players(max_players, self.default_max_players)

        try:
            questions = self.bank.sample(category, QUESTIONS_PER_ROOM)
        except ValueError:
            raise CategoryNotFound(category=category)

        host = normalize_address(host_address)
        with self._locks_guard:
            room = Room(
                id=generate_room_code(self.store),
                name=name.strip(),
                category=category,
                entry_fee=fee,
                host_address=host,
                questions=questions,
                max_players=capacity,
                players=[Player(address=host)],
            )
            self.store.add(room)
            self._locks[room.id] = threading.Lock()
        logger.info(f"[room-create] room={room.id} name={room.name!r} category={category} host={host} fee={fee} max={capacity}")
        return room

    def get_room(self, room_id) -> Room:
        room = self.store.get(normalize_room_id(room_id))
        if room is None:
            raise RoomNotFound(room_id=room_id)
        return room

    def list_active_rooms(self, category=None, status=None) -> List[Room]:
        statuses = ACTIVE_STATUSES
        if status:
            statuses = tuple(s for s in ACTIVE_STATUSES if s == status)
        rooms = self.store.rooms(statuses)
        if category:
            rooms = [r for r in rooms if r.category == category]
        return rooms

    @contextmanager
    def edit(self, room_id) -> Iterator[Room]:
        """Hold the room's lock, yield it, and persist it if the block succeeds."""
        room_id = normalize_room_id(room_id)
        with self._lock_for(room_id):
            room = self.get_room(room_id)
            yield room
            self.store.save(room)
