import logging
from typing import Tuple

from quizpool.errors import (
    AlreadyJoined,
    GameAlreadyStarted,
    GameNotFinished,
    InvalidInput,
    InvalidState,
    NotEnoughPlayers,
    NotHost,
    RoomFull,
)
from quizpool.models import FINISHED, PLAYING, WAITING, Player, Room, Settlement, normalize_address, utcnow
from quizpool.services.registry import RoomRegistry
from quizpool.services.settlement import compute_settlement

logger = logging.getLogger(__name__)

MIN_PLAYERS = 2


def require_address(address, field='playerAddress') -> str:
    if not address or not isinstance(address, str) or not address.strip():
        raise InvalidInput(f'{field} is required')
    return normalize_address(address)


class RoomLifecycle:
    """Room state machine: waiting -> playing -> finished."""

    def __init__(self, registry: RoomRegistry):
        self.registry = registry

    def join(self, room_id, player_address) -> Room:
        address = require_address(player_address)
        with self.registry.edit(room_id) as room:
            if room.status != WAITING:
                raise GameAlreadyStarted(status=room.status)
            if room.is_full:
                raise RoomFull(max_players=room.max_players)
            if room.find_player(address):
                raise AlreadyJoined()
            room.players.append(Player(address=address))
        logger.info(f"[join] room={room.id} player={address} players={len(room.players)}/{room.max_players}")
        return room

    def start(self, room_id, requester_address) -> Room:
        """Start the game; only the host may do so and at least two players must be in."""
        address = require_address(requester_address)
        with self.registry.edit(room_id) as room:
            if not room.is_host(address):
                raise NotHost()
            if len(room.players) < MIN_PLAYERS:
                raise NotEnoughPlayers(players=len(room.players))
            if room.status != WAITING:
                raise InvalidState(status=room.status)
            room.status = PLAYING
            room.started_at = utcnow()
            room.current_question = 0
        logger.info(f"[start] room={room.id} by={address} players={len(room.players)}")
        return room

    def finish(self, room_id) -> Tuple[Room, Settlement]:
        """Finish the game and settle it.

        Finishing twice returns the settlement computed the first time.
        A room that never started cannot be finished.
        """
        with self.registry.edit(room_id) as room:
            if room.status == FINISHED:
                logger.info(f"[finish-skip] room={room.id} already finished")
                return room, room.settlement
            if room.status != PLAYING:
                raise InvalidState('Game has not started', status=room.status)
            room.status = FINISHED
            room.finished_at = utcnow()
            room.settlement = compute_settlement(room)
        logger.info(
            f"[finish] room={room.id} pool={room.settlement.pool} payouts={len(room.settlement.payouts)} "
            f"complete={room.gameplay_complete}"
        )
        return room, room.settlement

    def payout_manifest(self, room_id) -> Tuple[Room, Settlement]:
        room = self.registry.get_room(room_id)
        if room.status != FINISHED:
            raise GameNotFinished(status=room.status)
        return room, room.settlement
