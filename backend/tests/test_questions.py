import json

import pytest

from quizpool.questions import QuestionBank


def test_bundled_bank_has_ten_questions_per_category(bank):
    counts = bank.counts()
    assert set(counts) == {'blockchain', 'football', 'solidity'}
    assert all(count >= 10 for count in counts.values())


def test_sample_is_without_replacement(bank):
    drawn = bank.sample('solidity', 10)
    assert len({q.id for q in drawn}) == 10


def test_sample_rejects_small_pool(bank):
    with pytest.raises(ValueError):
        bank.sample('solidity', 1000)
    with pytest.raises(ValueError):
        bank.sample('unknown', 1)


def test_from_file_generates_missing_ids(tmp_path):
    path = tmp_path / 'bank.json'
    path.write_text(json.dumps({'misc': [
        {'question': 'Pick b', 'options': ['a', 'b'], 'correctAnswer': 1},
        {'question': 'Pick a', 'options': ['a', 'b'], 'correctAnswer': 0, 'explanation': 'a is first'},
    ]}))
    bank = QuestionBank.from_file(str(path))
    questions = bank.questions_for('misc')
    assert [q.id for q in questions] == ['misc-1', 'misc-2']
    assert questions[1].explanation == 'a is first'


def test_duplicate_ids_rejected():
    entry = {'id': 'x', 'question': 'Q', 'options': ['a', 'b'], 'correctAnswer': 0}
    with pytest.raises(ValueError):
        QuestionBank.from_dict({'dup': [entry, dict(entry)]})
