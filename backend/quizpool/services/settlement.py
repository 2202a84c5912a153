"""Prize split for finished rooms.

The manifest produced here is what an administrator feeds to the pool
contract's ``payoutWinners(addresses, amounts)``; nothing in this module
moves funds.
"""

from decimal import Decimal, ROUND_DOWN, localcontext
from typing import Dict, List, Tuple

from quizpool.models import Room, Settlement

# cUSD is an 18-decimal ERC-20
TOKEN_DECIMALS = 18
TOKEN_QUANTUM = Decimal(1).scaleb(-TOKEN_DECIMALS)
DECIMAL_PRECISION = 60

PRIZE_SPLITS = {
    1: (Decimal('1'),),
    2: (Decimal('0.6'), Decimal('0.4')),
    3: (Decimal('0.5'), Decimal('0.3'), Decimal('0.2')),
}


def prize_shares(player_count: int) -> Tuple[Decimal, ...]:
    if player_count <= 0:
        return ()
    return PRIZE_SPLITS[min(player_count, 3)]


def rank_players(room: Room) -> List[Tuple[str, int]]:
    # sorted() is stable, so equal scores keep join order
    ranked = sorted(room.players, key=lambda p: -p.score)
    return [(p.address, p.score) for p in ranked]


def compute_settlement(room: Room) -> Settlement:
    """Rank the room's players and split ``entry_fee * players`` between the top three."""
    ranking = rank_players(room)
    payouts: Dict[str, Decimal] = {}
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        pool = room.entry_fee * len(room.players)
        for (address, _score), share in zip(ranking, prize_shares(len(ranking))):
            amount = (pool * share).quantize(TOKEN_QUANTUM, rounding=ROUND_DOWN)
            # payoutWinners has no use for zero transfers (free rooms, dust)
            if amount > 0:
                payouts[address] = amount
    return Settlement(pool=pool, ranking=tuple(ranking), payouts=payouts)


def to_base_units(amount: Decimal) -> int:
    """Convert a token amount to its integer on-chain representation."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return int((amount / TOKEN_QUANTUM).to_integral_value(rounding=ROUND_DOWN))
