"""
Assessment Orchestrator

Owns the lifecycle of adaptive assessment attempts:
1. Start an attempt (one AdaptiveSession per attempt)
2. Deliver questions (batch selection or next best question)
3. Grade and record answers
4. Complete the attempt with score, knowledge gaps and recommendations
5. Discard the attempt

Each attempt carries its own lock, so a single orchestrator may be shared by
concurrent request handlers while every session stays single-threaded.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .config import config
from .models.grading import GradingResult, LearnerAnswer, grade_answer
from .models.question import QuestionPool
from .models.quiz_session import AdaptiveSession
from .utils.progress import build_recommendations, mastery_by_category, topic_accuracy

logger = logging.getLogger(__name__)


@dataclass
class AttemptState:
    """
    State of one assessment attempt.

    Tracks the adaptive session plus grading details the session itself does
    not need (per-question scores for the points-weighted final score).
    """
    attempt_id: str
    session: AdaptiveSession
    learner_id: Optional[str] = None
    started_at: str = ""
    grades: Dict[str, GradingResult] = field(default_factory=dict)
    closed: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


class AssessmentOrchestrator:
    """
    Main orchestrator for adaptive assessment attempts.

    Usage:
        orchestrator = AssessmentOrchestrator()
        attempt_id = orchestrator.start_attempt(pool, learner_id="learner-1")
        orchestrator.submit_answer(attempt_id, "q3", "B")
        results = orchestrator.complete_attempt(attempt_id)
    """

    def __init__(self, passing_score: Optional[float] = None):
        """
        Initialize the orchestrator.

        Args:
            passing_score: Score required to pass (0-100, default from config)
        """
        self.passing_score = (
            config.assessment.passing_score if passing_score is None else passing_score
        )
        self._attempts: Dict[str, AttemptState] = {}
        self._registry_lock = threading.Lock()

    # ==================== Lifecycle ====================

    def start_attempt(
        self,
        pool: QuestionPool,
        learner_id: Optional[str] = None,
        ability: Optional[float] = None,
        max_questions: Optional[int] = None,
    ) -> str:
        """
        Start a new assessment attempt.

        Args:
            pool: Question pool for the attempt
            learner_id: Learner taking the assessment
            ability: Starting ability guess (default from config)
            max_questions: Selection size cap (default from config)

        Returns:
            Attempt ID
        """
        attempt_id = f"qa-{uuid.uuid4()}"
        session = AdaptiveSession(pool, initial_ability=ability, max_questions=max_questions)
        state = AttemptState(
            attempt_id=attempt_id,
            session=session,
            learner_id=learner_id,
            started_at=datetime.now(timezone.utc).isoformat(),
        )

        with self._registry_lock:
            self._attempts[attempt_id] = state

        logger.info(
            "Started attempt %s (learner=%s, ability=%.2f, %d questions selected)",
            attempt_id, learner_id, session.current_ability(),
            len(session.selected_questions()),
        )
        return attempt_id

    def get_session(self, attempt_id: str) -> AdaptiveSession:
        """
        Get the adaptive session of an active attempt.

        Raises:
            KeyError: If the attempt is unknown or already completed
        """
        return self._get_attempt(attempt_id).session

    def active_attempts(self) -> List[str]:
        with self._registry_lock:
            return list(self._attempts)

    def discard_attempt(self, attempt_id: str) -> None:
        """Drop an attempt without producing results."""
        with self._registry_lock:
            self._attempts.pop(attempt_id, None)

    # ==================== Delivery ====================

    def selected_questions(self, attempt_id: str) -> List[Dict[str, Any]]:
        """Current question selection, formatted for rendering."""
        state = self._get_attempt(attempt_id)
        with state.lock:
            questions = state.session.selected_questions()
            return [self._format_question(q, state.session) for q in questions]

    def next_question(self, attempt_id: str) -> Optional[Dict[str, Any]]:
        """Next best unanswered question for sequential delivery, or None."""
        state = self._get_attempt(attempt_id)
        with state.lock:
            question = state.session.next_best_question()
            if question is None:
                return None
            return self._format_question(question, state.session)

    # ==================== Responses ====================

    def record_response(self, attempt_id: str, question_id: str, is_correct: bool) -> Dict[str, Any]:
        """
        Record an externally graded response.

        Returns:
            Updated ability and knowledge gaps
        """
        state = self._get_attempt(attempt_id)
        with state.lock:
            self._ensure_open(state)
            # An externally graded answer supersedes any earlier auto-grade
            state.grades.pop(question_id, None)
            ability = state.session.record_response(question_id, is_correct)
            return {
                "question_id": question_id,
                "is_correct": bool(is_correct),
                "ability": ability,
                "knowledge_gaps": state.session.knowledge_gaps(),
            }

    def submit_answer(
        self,
        attempt_id: str,
        question_id: str,
        answer: LearnerAnswer,
    ) -> Dict[str, Any]:
        """
        Grade a learner's answer and record it.

        Args:
            attempt_id: Attempt ID
            question_id: Question being answered
            answer: Learner's raw answer

        Returns:
            Grading result with updated ability and knowledge gaps

        Raises:
            KeyError: If the attempt is unknown
            ValueError: If the question is not in the pool or the answer is empty
        """
        state = self._get_attempt(attempt_id)
        question = state.session.pool.get(question_id)
        if question is None:
            raise ValueError(f"Question {question_id} not found in pool")

        grading = grade_answer(question, answer)

        with state.lock:
            self._ensure_open(state)
            state.grades[question_id] = grading
            ability = state.session.record_response(question_id, grading.is_correct)
            result = grading.to_dict()
            result.update(
                {
                    "question_id": question_id,
                    "ability": ability,
                    "knowledge_gaps": state.session.knowledge_gaps(),
                    "answered_questions": len(state.session.answered_ids()),
                }
            )

        logger.debug(
            "Attempt %s: %s graded %s (score %.1f)",
            attempt_id, question_id, grading.is_correct, grading.score,
        )
        return result

    # ==================== Completion ====================

    def complete_attempt(self, attempt_id: str) -> Dict[str, Any]:
        """
        Complete an attempt and discard its session.

        Returns:
            Dictionary with score, pass/fail, ability, gaps and recommendations
        """
        state = self._get_attempt(attempt_id)
        with state.lock:
            self._ensure_open(state)
            session = state.session
            responses = session.responses()
            gaps = session.knowledge_gaps()
            accuracy = topic_accuracy(responses, session.pool)
            ability = session.current_ability()
            score = self._weighted_score(state)
            passed = score >= self.passing_score if score is not None else False

            results = {
                "attempt_id": attempt_id,
                "learner_id": state.learner_id,
                "started_at": state.started_at,
                "completed_at": datetime.now(timezone.utc).isoformat(),
                "score": score,
                "passed": passed,
                "ability": ability,
                "total_questions": len(session.selected_questions()),
                "answered_questions": len(responses),
                "knowledge_gaps": gaps,
                "topic_accuracy": accuracy,
                "topic_categories": mastery_by_category(accuracy),
                "recommendations": build_recommendations(ability, gaps, accuracy),
            }

            # Answers arriving after this point are rejected
            state.closed = True
            self.discard_attempt(attempt_id)

        logger.info(
            "Completed attempt %s: score=%s, passed=%s, ability=%.3f, gaps=%s",
            attempt_id, score, passed, ability, gaps,
        )
        return results

    # ==================== Helpers ====================

    def _get_attempt(self, attempt_id: str) -> AttemptState:
        with self._registry_lock:
            state = self._attempts.get(attempt_id)
        if state is None:
            raise KeyError(f"Attempt {attempt_id} not found")
        return state

    def _ensure_open(self, state: AttemptState) -> None:
        """Call with state.lock held."""
        if state.closed:
            raise KeyError(f"Attempt {state.attempt_id} already completed")

    def _weighted_score(self, state: AttemptState) -> Optional[float]:
        """
        Points-weighted score over the attempt's questions.

        The attempt's questions are the current selection plus any other pool
        question that was answered. Unanswered questions earn 0.

        score = 100 * sum(points * question_score / 100) / sum(points)
        Responses recorded without grading count as 100 or 0.
        """
        session = state.session
        answers = {r.question_id: r.is_correct for r in session.responses()}
        questions = {q.id: q for q in session.selected_questions()}
        for question_id in answers:
            question = session.pool.get(question_id)
            if question is not None:
                questions.setdefault(question_id, question)

        total_points = 0.0
        obtained_points = 0.0
        for question_id, question in questions.items():
            total_points += question.points
            if question_id not in answers:
                continue
            grading = state.grades.get(question_id)
            question_score = grading.score if grading else (100.0 if answers[question_id] else 0.0)
            obtained_points += question.points * question_score / 100.0

        if total_points == 0:
            return None
        return round(100.0 * obtained_points / total_points, 2)

    def _format_question(self, question, session: AdaptiveSession) -> Dict[str, Any]:
        """Format a question for the UI (answer key withheld)."""
        return {
            "id": question.id,
            "question_text": question.question_text,
            "question_type": question.question_type,
            "options": list(question.options),
            "difficulty": question.difficulty,
            "topic": question.topic,
            "points": question.points,
            "hints": list(question.hints),
            "answered": session.is_answered(question.id),
        }
