"""
Question and QuestionPool - the immutable item bank an assessment draws from.

Questions are trusted as loaded, with two tolerances:
- a missing or invalid difficulty defaults to the easiest level (1)
- a missing or blank topic is stored as None and excluded from gap analysis
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from ..config import config

logger = logging.getLogger(__name__)

# Type aliases
QuestionType = str  # "multiple_choice", "numerical", "short_answer", "true_false"
CorrectAnswer = Union[str, Tuple[str, ...], None]

DEFAULT_DIFFICULTY = 1


def normalize_difficulty(value: Any) -> int:
    """
    Coerce a raw difficulty tag to an integer in the configured range.

    Booleans, non-integral numbers, non-numbers and out-of-range values
    all fall back to DEFAULT_DIFFICULTY.

    Example:
        >>> normalize_difficulty(3.0)
        3
        >>> normalize_difficulty(None)
        1
        >>> normalize_difficulty(9)
        1
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_DIFFICULTY
    if isinstance(value, float) and not value.is_integer():
        return DEFAULT_DIFFICULTY

    difficulty = int(value)
    if not (config.assessment.min_difficulty <= difficulty <= config.assessment.max_difficulty):
        return DEFAULT_DIFFICULTY
    return difficulty


def normalize_topic(value: Any) -> Optional[str]:
    """Return a stripped topic name, or None for missing/blank topics."""
    if not isinstance(value, str):
        return None
    topic = value.strip()
    return topic or None


@dataclass(frozen=True)
class Question:
    """
    A single assessment question.

    Attributes:
        id: Unique identifier within the pool
        difficulty: Integer 1 (easiest) to 5 (hardest)
        topic: Topic tag used for knowledge-gap analysis
        question_type: How the answer is graded
        question_text: The question text
        options: Options for multiple choice questions
        correct_answer: Expected answer (tuple when several are accepted)
        explanation: Explanation of the correct answer
        points: Weight of the question in the final score
        tolerance: Accepted absolute error for numerical questions
        hints: Optional hints shown to the learner
    """
    id: str
    difficulty: int = DEFAULT_DIFFICULTY
    topic: Optional[str] = None
    question_type: QuestionType = "multiple_choice"
    question_text: str = ""
    options: Tuple[str, ...] = ()
    correct_answer: CorrectAnswer = None
    explanation: Optional[str] = None
    points: float = 1.0
    tolerance: Optional[float] = None
    hints: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        """
        Build a Question from a loader record.

        Args:
            data: Raw question dict (as stored in the backing question bank)

        Returns:
            Normalized, immutable Question
        """
        raw_difficulty = data.get("difficulty")
        difficulty = normalize_difficulty(raw_difficulty)
        if raw_difficulty is not None and difficulty != raw_difficulty:
            logger.debug(
                "Question %s: difficulty %r defaulted to %d",
                data.get("id"), raw_difficulty, difficulty,
            )

        correct_answer = data.get("correct_answer")
        if isinstance(correct_answer, list):
            correct_answer = tuple(str(a) for a in correct_answer)
        elif correct_answer is not None:
            correct_answer = str(correct_answer)

        points = data.get("points")
        return cls(
            id=str(data["id"]),
            difficulty=difficulty,
            topic=normalize_topic(data.get("topic")),
            question_type=data.get("question_type") or "multiple_choice",
            question_text=data.get("question_text") or "",
            options=tuple(data.get("options") or ()),
            correct_answer=correct_answer,
            explanation=data.get("explanation"),
            points=float(points) if points is not None else 1.0,
            tolerance=data.get("tolerance"),
            hints=tuple(data.get("hints") or ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for rendering and persistence."""
        correct_answer = self.correct_answer
        if isinstance(correct_answer, tuple):
            correct_answer = list(correct_answer)
        return {
            "id": self.id,
            "difficulty": self.difficulty,
            "topic": self.topic,
            "question_type": self.question_type,
            "question_text": self.question_text,
            "options": list(self.options),
            "correct_answer": correct_answer,
            "explanation": self.explanation,
            "points": self.points,
            "tolerance": self.tolerance,
            "hints": list(self.hints),
        }


class QuestionPool:
    """
    Immutable, ordered collection of questions keyed by id.

    Pool order is the loader's order and is what every stable sort in the
    selector falls back on. If two entries share an id, the first one wins
    for lookups; the loader rejects such pools before they get here.

    Usage:
        pool = QuestionPool.from_dicts([{"id": "q1", "difficulty": 2}])
        question = pool.get("q1")
    """

    def __init__(self, questions: Iterable[Question] = ()):
        self._questions: Tuple[Question, ...] = tuple(questions)
        self._by_id: Dict[str, Question] = {}
        for question in self._questions:
            self._by_id.setdefault(question.id, question)

    @classmethod
    def from_dicts(cls, records: Iterable[Dict[str, Any]]) -> "QuestionPool":
        return cls(Question.from_dict(record) for record in records)

    def get(self, question_id: str) -> Optional[Question]:
        return self._by_id.get(question_id)

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self._questions

    @property
    def ids(self) -> List[str]:
        return [q.id for q in self._questions]

    def topics(self) -> List[str]:
        """Distinct topics in pool order."""
        seen: Dict[str, None] = {}
        for question in self._questions:
            if question.topic:
                seen.setdefault(question.topic, None)
        return list(seen)

    def __iter__(self) -> Iterator[Question]:
        return iter(self._questions)

    def __len__(self) -> int:
        return len(self._questions)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._by_id

    def __bool__(self) -> bool:
        return bool(self._questions)

    def __repr__(self) -> str:
        return f"QuestionPool({len(self._questions)} questions)"
