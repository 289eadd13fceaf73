"""
Rule-based answer grading.

Turns a learner's raw answer into correctness for the adaptive session:
- multiple_choice: exact option match; partial credit when several options are correct
- numerical: absolute error within the question's tolerance
- short_answer: partial credit per expected keyword present (case-insensitive);
  correct from half the keywords up
- true_false: case-insensitive match
Other question types need manual grading and are reported as such.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Union

from ..config import config
from .question import Question

LearnerAnswer = Union[str, Sequence[str], int, float]


@dataclass
class GradingResult:
    """
    Result of grading one answer.

    Attributes:
        is_correct: Whether the answer earns full credit
        score: Score from 0-100
        feedback: Feedback for the learner
        graded_by: "auto" when graded here, None when manual grading is needed
    """
    is_correct: bool
    score: float
    feedback: str = ""
    graded_by: Optional[str] = "auto"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "is_correct": self.is_correct,
            "score": self.score,
            "feedback": self.feedback,
            "graded_by": self.graded_by,
        }


def _is_blank(answer: Any) -> bool:
    if answer is None:
        return True
    if isinstance(answer, str):
        return not answer.strip()
    if isinstance(answer, (list, tuple, set)):
        return len(answer) == 0
    return False


def _normalize(text: Any) -> str:
    return str(text).strip().lower()


def _feedback(question: Question, is_correct: bool) -> str:
    if is_correct:
        return question.explanation or "Correct."
    return "Incorrect. " + (question.explanation or "")


def grade_answer(question: Question, answer: LearnerAnswer) -> GradingResult:
    """
    Grade a learner's answer to a question.

    Args:
        question: Question being answered
        answer: Learner's response (list of option ids for multi-answer questions)

    Returns:
        GradingResult with correctness and a 0-100 score

    Raises:
        ValueError: If the answer is empty
    """
    if _is_blank(answer):
        raise ValueError("Learner answer cannot be empty")

    if question.correct_answer is None:
        return GradingResult(False, 0.0, "Requires manual grading", graded_by=None)

    if question.question_type == "multiple_choice":
        return _grade_multiple_choice(question, answer)
    if question.question_type == "numerical":
        return _grade_numerical(question, answer)
    if question.question_type == "short_answer":
        return _grade_short_answer(question, answer)
    if question.question_type == "true_false":
        is_correct = _normalize(answer) == _normalize(question.correct_answer)
        return GradingResult(is_correct, 100.0 if is_correct else 0.0, _feedback(question, is_correct))

    return GradingResult(False, 0.0, "Requires manual grading", graded_by=None)


def _grade_multiple_choice(question: Question, answer: LearnerAnswer) -> GradingResult:
    expected = question.correct_answer

    if isinstance(expected, tuple):
        # Several correct options: each wrong pick cancels a right one
        picked = [answer] if isinstance(answer, str) else list(answer)
        expected_set = {_normalize(a) for a in expected}
        picked_set = {_normalize(a) for a in picked}
        correct_count = len(picked_set & expected_set)
        incorrect_count = len(picked_set - expected_set)
        fraction = max(0, correct_count - incorrect_count) / len(expected_set)
        is_correct = fraction == 1.0
        return GradingResult(is_correct, round(100.0 * fraction, 2), _feedback(question, is_correct))

    if not isinstance(answer, str):
        return GradingResult(False, 0.0, _feedback(question, False))

    is_correct = _normalize(answer) == _normalize(expected)
    return GradingResult(is_correct, 100.0 if is_correct else 0.0, _feedback(question, is_correct))


def _grade_numerical(question: Question, answer: LearnerAnswer) -> GradingResult:
    try:
        value = float(answer)
        expected = float(question.correct_answer)
    except (TypeError, ValueError):
        return GradingResult(False, 0.0, "Answer must be a number. " + (question.explanation or ""))

    tolerance = question.tolerance if question.tolerance is not None else config.assessment.numeric_tolerance
    is_correct = abs(value - expected) <= tolerance
    return GradingResult(is_correct, 100.0 if is_correct else 0.0, _feedback(question, is_correct))


def _grade_short_answer(question: Question, answer: LearnerAnswer) -> GradingResult:
    keywords = question.correct_answer
    if isinstance(keywords, str):
        keywords = (keywords,)
    if not keywords:
        return GradingResult(False, 0.0, "Requires manual grading", graded_by=None)

    text = _normalize(answer)
    matches = sum(1 for keyword in keywords if _normalize(keyword) in text)
    fraction = matches / len(keywords)
    # Half the keywords is enough to count as correct
    is_correct = fraction >= 0.5
    return GradingResult(is_correct, round(100.0 * fraction, 2), _feedback(question, is_correct))
