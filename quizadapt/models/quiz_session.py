"""
Adaptive Session - per-attempt state for an adaptive assessment.

Owns the current selection, the response history and the ability estimate,
and wires together AbilityEstimator, QuestionSelector and KnowledgeGapAnalyzer.

The session is a plain object with no I/O. It is not thread-safe: callers
sharing a session across threads must serialize record_response and
selected_questions (AssessmentOrchestrator does this per attempt).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Collection, Dict, List, Optional

from ..config import config
from .ability import AbilityEstimator
from .knowledge_gaps import KnowledgeGapAnalyzer
from .question import Question, QuestionPool
from .question_selector import QuestionSelector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuestionResponse:
    """
    Learner's recorded response to a question.

    Attributes:
        question_id: Question identifier
        is_correct: Whether the answer was correct
    """
    question_id: str
    is_correct: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"question_id": self.question_id, "is_correct": self.is_correct}


class AdaptiveSession:
    """
    Adaptive assessment session.

    Features:
    - Start from a caller-supplied (or default) ability guess
    - Select an initial question subset around that ability
    - Re-estimate ability after every response
    - Revise unanswered tail slots to keep the test challenging
    - Report knowledge gaps and the next best question

    Usage:
        session = AdaptiveSession(pool, initial_ability=0.5, max_questions=4)
        session.record_response("q3", True)
        session.current_ability()
        session.knowledge_gaps()
    """

    STATE_INITIALIZING = "initializing"
    STATE_ACTIVE = "active"

    def __init__(
        self,
        pool: QuestionPool,
        initial_ability: Optional[float] = None,
        max_questions: Optional[int] = None,
        estimator: Optional[AbilityEstimator] = None,
        selector: Optional[QuestionSelector] = None,
        gap_analyzer: Optional[KnowledgeGapAnalyzer] = None,
        auto_initialize: bool = True,
    ):
        """
        Initialize adaptive session.

        Args:
            pool: Question pool (shared, never mutated)
            initial_ability: Starting ability guess (default from config, 0.5)
            max_questions: Selection size cap (default from config)
            estimator: Ability estimator
            selector: Question selector
            gap_analyzer: Knowledge gap analyzer
            auto_initialize: Perform the initial selection immediately
        """
        self.pool = pool
        self.initial_ability = (
            config.assessment.default_ability if initial_ability is None else initial_ability
        )
        self.max_questions = (
            config.assessment.max_questions if max_questions is None else max_questions
        )

        self.estimator = estimator or AbilityEstimator()
        self.selector = selector or QuestionSelector()
        self.gap_analyzer = gap_analyzer or KnowledgeGapAnalyzer()

        self.state = self.STATE_INITIALIZING
        self._ability = self.initial_ability
        self._selection: List[Question] = []
        # question_id -> is_correct; re-answered questions move to the end
        self._responses: Dict[str, bool] = {}

        if auto_initialize:
            self.initialize()

    def initialize(self) -> List[Question]:
        """Perform the initial selection. Subsequent calls return the current selection."""
        if self.state == self.STATE_INITIALIZING:
            self._selection = self.selector.initial_select(
                self.pool, self._ability, self.max_questions
            )
            self.state = self.STATE_ACTIVE
        return self.selected_questions()

    # ==================== Queries ====================

    def selected_questions(self) -> List[Question]:
        """Current selection (copy)."""
        return list(self._selection)

    def current_ability(self) -> float:
        return self._ability

    def estimate_knowledge_level(self) -> float:
        """Estimated knowledge level on the 0-1 scale."""
        return self._ability

    def responses(self) -> List[QuestionResponse]:
        """Recorded responses, least recently answered first."""
        return [QuestionResponse(qid, correct) for qid, correct in self._responses.items()]

    def answered_ids(self) -> List[str]:
        return list(self._responses)

    def is_answered(self, question_id: str) -> bool:
        return question_id in self._responses

    def knowledge_gaps(self) -> List[str]:
        """Distinct topics with an incorrect response, in first-missed order."""
        return self.gap_analyzer.ordered_gaps(self._responses, self.pool)

    def next_best_question(
        self, answered_ids: Optional[Collection[str]] = None
    ) -> Optional[Question]:
        """
        Pick the single best question to ask next.

        Args:
            answered_ids: Ids to exclude (default: ids with a recorded response)

        Returns:
            Unanswered pool question closest to the challenge target, or None
        """
        if answered_ids is None:
            answered_ids = self._responses
        return self.selector.next_best(self.pool, self._ability, set(answered_ids))

    # ==================== Updates ====================

    def record_response(self, question_id: str, is_correct: bool) -> float:
        """
        Record (or overwrite) a response and adapt.

        Re-recording an identical response changes nothing.

        Args:
            question_id: Question identifier (ids outside the pool are kept but ignored)
            is_correct: Whether the answer was correct

        Returns:
            Updated ability estimate
        """
        is_correct = bool(is_correct)
        if self._responses.get(question_id) is is_correct:
            return self._ability

        if self.state == self.STATE_INITIALIZING:
            self.initialize()

        self._responses.pop(question_id, None)
        self._responses[question_id] = is_correct

        self._ability = self.estimator.estimate(self._responses, self._ability, self.pool)
        self.selector.adapt(self._selection, self._responses, self.pool, self._ability)

        logger.debug(
            "Recorded %s=%s, ability=%.3f, %d responses",
            question_id, is_correct, self._ability, len(self._responses),
        )
        return self._ability

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot of the session for rendering and persistence by the caller."""
        return {
            "state": self.state,
            "initial_ability": self.initial_ability,
            "ability": self._ability,
            "max_questions": self.max_questions,
            "selected_questions": [q.id for q in self._selection],
            "responses": [r.to_dict() for r in self.responses()],
            "knowledge_gaps": self.knowledge_gaps(),
        }
