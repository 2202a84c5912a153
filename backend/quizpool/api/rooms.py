from flask import Blueprint, current_app, jsonify, request

from quizpool.models import PLAYING, format_amount
from quizpool.services.engine import get_engine
from quizpool.services.settlement import to_base_units

rooms = Blueprint('rooms', __name__)


def _field(data, *names, default=None):
    """First present key among camelCase / snake_case aliases."""
    for name in names:
        if name in data:
            return data[name]
    return default


def _room_payload(room, message=None):
    payload = {'room': room.to_dict(), 'players': [p.to_dict() for p in room.players]}
    if message:
        payload['message'] = message
    return payload


def _leaderboard(room, settlement):
    players = {p.address: p for p in room.players}
    board = []
    for rank, (address, _score) in enumerate(settlement.ranking, start=1):
        entry = players[address].to_dict()
        entry['rank'] = rank
        entry['prize'] = format_amount(settlement.prize_for(address))
        board.append(entry)
    return board


@rooms.route('/rooms', methods=['POST'])
@rooms.route('/rooms/create', methods=['POST'])
def create_room():
    data = request.get_json(silent=True) or {}
    room = get_engine().registry.create_room(
        host_address=_field(data, 'hostAddress', 'host_address'),
        category=_field(data, 'category'),
        name=_field(data, 'name'),
        entry_fee=_field(data, 'entryFee', 'entry_fee'),
        max_players=_field(data, 'maxPlayers', 'max_players'),
    )
    return jsonify(_room_payload(room, 'Room created')), 201


@rooms.route('/rooms', methods=['GET'])
def list_rooms():
    active = get_engine().registry.list_active_rooms(
        category=request.args.get('category') or None,
        status=request.args.get('status') or None,
    )
    return jsonify({'rooms': [r.to_dict() for r in active]})


@rooms.route('/rooms/<string:room_id>', methods=['GET'])
def get_room(room_id):
    room = get_engine().registry.get_room(room_id)
    return jsonify(_room_payload(room))


@rooms.route('/rooms/<string:room_id>/state', methods=['GET'])
def get_room_state(room_id):
    """Polling view for the game screen."""
    room = get_engine().registry.get_room(room_id)
    question = None
    if room.status == PLAYING and room.current_question < len(room.questions):
        question = room.questions[room.current_question].to_dict()
    return jsonify({
        'roomId': room.id,
        'status': room.status,
        'currentQuestion': room.current_question,
        'totalQuestions': len(room.questions),
        'question': question,
        'gameplayComplete': room.gameplay_complete,
        'players': [
            {
                'address': p.address,
                'score': p.score,
                'correctAnswers': p.correct_answers,
                'answeredCurrent': p.has_answered(room.current_question),
                'answeredCount': len(p.answers),
            }
            for p in room.players
        ],
    })


@rooms.route('/rooms/<string:room_id>/join', methods=['POST'])
def join_room(room_id):
    data = request.get_json(silent=True) or {}
    room = get_engine().lifecycle.join(room_id, _field(data, 'playerAddress', 'player_address'))
    return jsonify(_room_payload(room, 'Successfully joined room'))


@rooms.route('/rooms/<string:room_id>/start', methods=['POST'])
def start_room(room_id):
    data = request.get_json(silent=True) or {}
    room = get_engine().lifecycle.start(room_id, _field(data, 'playerAddress', 'player_address'))
    return jsonify(_room_payload(room, 'Game started successfully'))


@rooms.route('/answers/submit', methods=['POST'])
def submit_answer():
    data = request.get_json(silent=True) or {}
    result = get_engine().answers.submit_answer(
        room_id=_field(data, 'roomId', 'room_id', default=''),
        player_address=_field(data, 'playerAddress', 'player_address'),
        question_index=_field(data, 'questionIndex', 'question_index'),
        selected_index=_field(data, 'answerIndex', 'answer_index', 'selectedAnswer'),
        time_spent=_field(data, 'timeTaken', 'time_taken', 'timeSpent'),
    )
    return jsonify(result.to_dict())


@rooms.route('/rooms/<string:room_id>/finish', methods=['POST'])
def finish_room(room_id):
    room, settlement = get_engine().lifecycle.finish(room_id)
    return jsonify({
        'room': room.to_dict(),
        'leaderboard': _leaderboard(room, settlement),
        'winners': settlement.winners(),
        'prizePool': format_amount(settlement.pool),
    })


@rooms.route('/admin/payout/<string:room_id>', methods=['GET'])
def payout_manifest(room_id):
    """Payout data for the admin payout script and ``payoutWinners``."""
    room, settlement = get_engine().lifecycle.payout_manifest(room_id)
    winners = [
        {'address': address, 'amount': format_amount(amount)}
        for address, amount in settlement.payouts.items()
    ]
    current_app.logger.info(f"[payout-manifest] room={room.id} winners={len(winners)} pool={settlement.pool}")
    return jsonify({
        'roomId': room.id,
        'prizePool': format_amount(settlement.pool),
        'winners': winners,
        'addresses': list(settlement.payouts),
        'amounts': [str(to_base_units(amount)) for amount in settlement.payouts.values()],
    })
