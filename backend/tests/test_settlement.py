from decimal import Decimal

from quizpool.models import Player, Question, Room
from quizpool.services.settlement import compute_settlement, prize_shares, to_base_units

QUESTIONS = tuple(
    Question(id=f'q{i}', prompt=f'Question {i}', options=('a', 'b'), correct_index=0) for i in range(10)
)


def _room(scores, fee='1'):
    players = [Player(address=f'0x{i:040x}', score=score) for i, score in enumerate(scores)]
    return Room(
        id='ROOM0001', name='Settle', category='test', entry_fee=Decimal(fee),
        host_address=players[0].address if players else '0xhost', questions=QUESTIONS,
        max_players=8, players=players,
    )


def test_three_players_split_50_30_20():
    settlement = compute_settlement(_room([300, 200, 100]))
    assert settlement.pool == Decimal('3')
    assert list(settlement.payouts.values()) == [Decimal('1.5'), Decimal('0.9'), Decimal('0.6')]
    assert [score for _, score in settlement.ranking] == [300, 200, 100]


def test_fourth_place_and_below_get_nothing():
    room = _room([10, 40, 30, 20, 50])
    settlement = compute_settlement(room)
    assert settlement.pool == Decimal('5')
    assert [score for _, score in settlement.ranking] == [50, 40, 30, 20, 10]
    assert len(settlement.payouts) == 3
    assert settlement.prize_for(room.players[0].address) == Decimal('0')
    assert settlement.prize_for(room.players[4].address) == Decimal('2.5')


def test_two_players_split_60_40():
    room = _room([100, 250], fee='2.5')
    settlement = compute_settlement(room)
    assert settlement.payouts == {
        room.players[1].address: Decimal('3'),
        room.players[0].address: Decimal('2'),
    }


def test_single_player_takes_the_pot():
    room = _room([0], fee='0.75')
    settlement = compute_settlement(room)
    assert settlement.payouts == {room.players[0].address: Decimal('0.75')}


def test_no_players_empty_manifest():
    settlement = compute_settlement(_room([]))
    assert settlement.payouts == {}
    assert settlement.ranking == ()


def test_ties_keep_join_order():
    room = _room([100, 100, 100])
    settlement = compute_settlement(room)
    assert [address for address, _ in settlement.ranking] == [p.address for p in room.players]


def test_free_room_pays_nobody():
    settlement = compute_settlement(_room([300, 200, 100], fee='0'))
    assert settlement.payouts == {}
    assert len(settlement.winners()) == 3
    assert all(w['prize'] == '0' for w in settlement.winners())


def test_payouts_never_exceed_pool():
    settlement = compute_settlement(_room([3, 2, 1], fee='0.000000000000000001'))
    assert sum(settlement.payouts.values()) <= settlement.pool


def test_prize_shares_sum_to_one():
    for count in range(1, 6):
        assert sum(prize_shares(count)) == Decimal('1')
    assert prize_shares(0) == ()


def test_base_units():
    assert to_base_units(Decimal('1.5')) == 1_500_000_000_000_000_000
    assert to_base_units(Decimal('1000000000000')) == 10 ** 30
