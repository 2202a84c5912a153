from flask import Blueprint, jsonify

from quizpool.models import utcnow
from quizpool.services.engine import get_engine
from quizpool.services.registry import QUESTIONS_PER_ROOM

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the quiz pool game server!'})


@main.route('/health')
def health():
    return jsonify({'status': 'ok', 'timestamp': utcnow().isoformat()})


@main.route('/api/questions', methods=['GET'])
def list_categories():
    bank = get_engine().bank
    return jsonify({'categories': [
        {'id': name, 'questionCount': count} for name, count in bank.counts().items()
    ]})


@main.route('/api/questions/<string:category>', methods=['GET'])
def get_questions(category):
    """Practice draw of questions for a category, answers included."""
    bank = get_engine().bank
    if not bank.questions_for(category):
        return jsonify({'error': 'Category not found', 'code': 'CATEGORY_NOT_FOUND'}), 404
    count = min(QUESTIONS_PER_ROOM, len(bank.questions_for(category)))
    questions = bank.sample(category, count)
    return jsonify({'questions': [q.to_dict(reveal_answer=True) for q in questions]})
