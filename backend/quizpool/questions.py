"""Static question bank, loaded once at startup."""

from __future__ import annotations

import json
import logging
import os
import random
from typing import Dict, List

from quizpool.models import Question

logger = logging.getLogger(__name__)

DEFAULT_BANK_PATH = os.path.join(os.path.dirname(__file__), 'data', 'questions.json')


class QuestionBank:
    """Read-only catalog of questions grouped by category."""

    def __init__(self, categories: Dict[str, List[Question]]):
        self._categories = {name: tuple(questions) for name, questions in categories.items()}
        self._rng = random.SystemRandom()

    @classmethod
    def from_file(cls, path: str | None = None) -> QuestionBank:
        path = path or DEFAULT_BANK_PATH
        with open(path, encoding='utf-8') as fh:
            raw = json.load(fh)
        bank = cls.from_dict(raw)
        logger.info(f"[question-bank] loaded path={path} categories={bank.counts()}")
        return bank

    @classmethod
    def from_dict(cls, raw: dict) -> QuestionBank:
        """Build a bank from ``{category: [question, ...]}``.

        Question entries use the frontend field names (``question``,
        ``options``, ``correctAnswer``, ``explanation``).
        """
        categories = {}
        for category, entries in raw.items():
            questions = []
            for position, entry in enumerate(entries):
                questions.append(Question(
                    id=str(entry.get('id') or f'{category}-{position + 1}'),
                    prompt=entry['question'],
                    options=tuple(entry['options']),
                    correct_index=int(entry['correctAnswer']),
                    explanation=entry.get('explanation'),
                ))
            ids = [q.id for q in questions]
            if len(set(ids)) != len(ids):
                raise ValueError(f'duplicate question ids in category {category}')
            categories[category] = questions
        return cls(categories)

    def categories(self) -> List[str]:
        return list(self._categories)

    def counts(self) -> Dict[str, int]:
        return {name: len(questions) for name, questions in self._categories.items()}

    def questions_for(self, category: str) -> tuple:
        return self._categories.get(category, ())

    def sample(self, category: str, count: int) -> tuple:
        """Draw ``count`` distinct questions; raises ValueError when the pool is too small."""
        pool = self.questions_for(category)
        if len(pool) < count:
            raise ValueError(f'category {category!r} has {len(pool)} questions, {count} required')
        return tuple(self._rng.sample(pool, count))
