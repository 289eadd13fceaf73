"""
Core adaptive assessment models (pure logic, no I/O).

This module contains:
- Question / QuestionPool: Immutable item bank
- AbilityEstimator: Difficulty-weighted ability estimate
- QuestionSelector: Initial selection and adaptive revision
- KnowledgeGapAnalyzer: Weak topics from incorrect responses
- AdaptiveSession / QuestionResponse: Per-attempt orchestration
- grade_answer / GradingResult: Rule-based answer grading
"""

from .question import Question, QuestionPool, normalize_difficulty
from .ability import AbilityEstimator
from .question_selector import QuestionSelector, round_half_up
from .knowledge_gaps import KnowledgeGapAnalyzer
from .quiz_session import AdaptiveSession, QuestionResponse
from .grading import GradingResult, grade_answer

__all__ = [
    "Question",
    "QuestionPool",
    "normalize_difficulty",
    "AbilityEstimator",
    "QuestionSelector",
    "round_half_up",
    "KnowledgeGapAnalyzer",
    "AdaptiveSession",
    "QuestionResponse",
    "GradingResult",
    "grade_answer",
]
