"""
Unit tests for AssessmentOrchestrator: attempt lifecycle, grading and results.
"""

import threading

import pytest

from quizadapt.models.question import QuestionPool
from quizadapt.orchestrator import AssessmentOrchestrator


@pytest.fixture
def orchestrator():
    return AssessmentOrchestrator(passing_score=70.0)


@pytest.fixture
def mixed_pool(mixed_records):
    return QuestionPool.from_dicts(mixed_records)


class TestAttemptLifecycle:
    """Test starting, fetching and discarding attempts."""

    def test_start_attempt(self, orchestrator, ladder_pool):
        attempt_id = orchestrator.start_attempt(ladder_pool, learner_id="learner-1", max_questions=4)

        assert attempt_id.startswith("qa-")
        assert attempt_id in orchestrator.active_attempts()
        session = orchestrator.get_session(attempt_id)
        assert session.current_ability() == 0.5
        assert [q.id for q in session.selected_questions()] == ["q3", "q4", "q5", "q6"]

    def test_attempts_are_independent(self, orchestrator, ladder_pool):
        first = orchestrator.start_attempt(ladder_pool, max_questions=4)
        second = orchestrator.start_attempt(ladder_pool, max_questions=4)

        orchestrator.record_response(first, "q3", False)

        assert orchestrator.get_session(first).current_ability() == 0.0
        assert orchestrator.get_session(second).current_ability() == 0.5

    def test_unknown_attempt(self, orchestrator):
        with pytest.raises(KeyError):
            orchestrator.get_session("qa-missing")
        with pytest.raises(KeyError):
            orchestrator.record_response("qa-missing", "q1", True)

    def test_discard_attempt(self, orchestrator, ladder_pool):
        attempt_id = orchestrator.start_attempt(ladder_pool)
        orchestrator.discard_attempt(attempt_id)
        assert orchestrator.active_attempts() == []


class TestDelivery:
    """Test question delivery."""

    def test_selected_questions_hide_answer_key(self, orchestrator, ladder_pool):
        attempt_id = orchestrator.start_attempt(ladder_pool, max_questions=4)
        questions = orchestrator.selected_questions(attempt_id)

        assert len(questions) == 4
        assert all("correct_answer" not in q for q in questions)
        assert questions[0]["id"] == "q3"
        assert questions[0]["answered"] is False

    def test_next_question(self, orchestrator, ladder_pool):
        attempt_id = orchestrator.start_attempt(ladder_pool, max_questions=4)
        assert orchestrator.next_question(attempt_id)["id"] == "q7"

    def test_next_question_exhausted(self, orchestrator):
        pool = QuestionPool.from_dicts([{"id": "only", "difficulty": 2}])
        attempt_id = orchestrator.start_attempt(pool)
        orchestrator.record_response(attempt_id, "only", True)
        assert orchestrator.next_question(attempt_id) is None


class TestAnswers:
    """Test grading and recording."""

    def test_submit_answer(self, orchestrator, mixed_pool):
        attempt_id = orchestrator.start_attempt(mixed_pool, max_questions=4)

        result = orchestrator.submit_answer(attempt_id, "mc-1", "A")

        assert result["is_correct"] is False
        assert result["score"] == 0.0
        assert result["ability"] == 0.0
        assert result["knowledge_gaps"] == ["stoichiometry"]
        assert result["answered_questions"] == 1

    def test_submit_answer_unknown_question(self, orchestrator, mixed_pool):
        attempt_id = orchestrator.start_attempt(mixed_pool)
        with pytest.raises(ValueError) as exc_info:
            orchestrator.submit_answer(attempt_id, "nope", "A")
        assert "not found in pool" in str(exc_info.value)

    def test_submit_empty_answer(self, orchestrator, mixed_pool):
        attempt_id = orchestrator.start_attempt(mixed_pool)
        with pytest.raises(ValueError):
            orchestrator.submit_answer(attempt_id, "mc-1", "  ")
        assert orchestrator.get_session(attempt_id).responses() == []

    def test_record_response(self, orchestrator, ladder_pool):
        attempt_id = orchestrator.start_attempt(ladder_pool, max_questions=4)
        result = orchestrator.record_response(attempt_id, "q5", False)
        assert result == {
            "question_id": "q5",
            "is_correct": False,
            "ability": 0.0,
            "knowledge_gaps": ["stoichiometry"],
        }

    def test_concurrent_responses(self, orchestrator, ladder_pool):
        attempt_id = orchestrator.start_attempt(ladder_pool, max_questions=4)

        def answer(question_id, correct):
            orchestrator.record_response(attempt_id, question_id, correct)

        threads = [
            threading.Thread(target=answer, args=(f"q{i}", i % 2 == 0))
            for i in range(1, 11)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        session = orchestrator.get_session(attempt_id)
        assert len(session.responses()) == 10
        assert len(session.selected_questions()) == 4
        # q2, q4, ... correct: (1 + 2 + 3 + 4 + 5) / 30
        assert session.current_ability() == pytest.approx(0.5)


class TestCompletion:
    """Test completing attempts."""

    def test_complete_attempt(self, orchestrator, mixed_pool):
        attempt_id = orchestrator.start_attempt(mixed_pool, learner_id="learner-1", max_questions=4)
        orchestrator.submit_answer(attempt_id, "mc-1", "B")  # 2 points, correct
        orchestrator.submit_answer(attempt_id, "num-1", "6.5")  # 3 points, wrong
        orchestrator.submit_answer(attempt_id, "sa-1", "le chatelier: it will shift left")  # 5 points
        orchestrator.submit_answer(attempt_id, "tf-1", "true")  # 1 point

        results = orchestrator.complete_attempt(attempt_id)

        assert results["attempt_id"] == attempt_id
        assert results["learner_id"] == "learner-1"
        # 8 of 11 points
        assert results["score"] == 72.73
        assert results["passed"] is True
        # difficulties 2 + 4 + 1 correct of 2 + 3 + 4 + 1
        assert results["ability"] == pytest.approx(0.7)
        assert results["answered_questions"] == 4
        assert results["total_questions"] == 4
        assert results["knowledge_gaps"] == ["moles"]
        assert results["topic_accuracy"] == {
            "stoichiometry": 100.0,
            "moles": 0.0,
            "equilibrium": 100.0,
        }
        assert results["recommendations"]["recommended_topics"] == ["moles"]
        assert results["recommendations"]["ready"] is True
        assert attempt_id not in orchestrator.active_attempts()

    def test_partial_credit_in_score(self, orchestrator):
        pool = QuestionPool.from_dicts(
            [{"id": "multi", "difficulty": 3, "correct_answer": ["A", "C"], "points": 4}]
        )
        attempt_id = orchestrator.start_attempt(pool)
        orchestrator.submit_answer(attempt_id, "multi", ["A"])

        results = orchestrator.complete_attempt(attempt_id)

        assert results["score"] == 50.0
        assert results["passed"] is False

    def test_externally_graded_responses_count(self, orchestrator, ladder_pool):
        attempt_id = orchestrator.start_attempt(ladder_pool, max_questions=4)
        orchestrator.record_response(attempt_id, "q3", True)
        orchestrator.record_response(attempt_id, "q4", False)

        results = orchestrator.complete_attempt(attempt_id)

        # 1 of the 4 selected questions correct
        assert results["score"] == 25.0

    def test_unanswered_questions_earn_nothing(self, orchestrator, ladder_pool):
        attempt_id = orchestrator.start_attempt(ladder_pool, max_questions=4)
        orchestrator.record_response(attempt_id, "q3", True)

        results = orchestrator.complete_attempt(attempt_id)

        assert results["answered_questions"] == 1
        assert results["total_questions"] == 4
        assert results["score"] == 25.0
        assert results["passed"] is False

    def test_answers_outside_selection_count(self, orchestrator, ladder_pool):
        attempt_id = orchestrator.start_attempt(ladder_pool, max_questions=2)
        selected = [q.id for q in orchestrator.get_session(attempt_id).selected_questions()]
        assert "q1" not in selected
        orchestrator.record_response(attempt_id, "q1", True)

        results = orchestrator.complete_attempt(attempt_id)

        # q1 plus the two selected questions
        assert results["score"] == pytest.approx(33.33)

    def test_no_answers(self, orchestrator, ladder_pool):
        attempt_id = orchestrator.start_attempt(ladder_pool, ability=0.8)
        results = orchestrator.complete_attempt(attempt_id)

        assert results["score"] == 0.0
        assert results["passed"] is False
        assert results["ability"] == 0.8
        assert results["knowledge_gaps"] == []

    def test_empty_pool_has_no_score(self, orchestrator):
        attempt_id = orchestrator.start_attempt(QuestionPool.from_dicts([]))
        results = orchestrator.complete_attempt(attempt_id)

        assert results["score"] is None
        assert results["passed"] is False

    def test_completed_attempt_is_gone(self, orchestrator, ladder_pool):
        attempt_id = orchestrator.start_attempt(ladder_pool)
        orchestrator.complete_attempt(attempt_id)
        with pytest.raises(KeyError):
            orchestrator.complete_attempt(attempt_id)

    def test_answers_after_completion_rejected(self, orchestrator, mixed_pool, monkeypatch):
        attempt_id = orchestrator.start_attempt(mixed_pool)
        # A handler that looked the attempt up just before completion
        state = orchestrator._get_attempt(attempt_id)
        results = orchestrator.complete_attempt(attempt_id)
        monkeypatch.setattr(orchestrator, "_get_attempt", lambda _attempt_id: state)

        assert state.closed is True
        with pytest.raises(KeyError):
            orchestrator.submit_answer(attempt_id, "mc-1", "B")
        with pytest.raises(KeyError):
            orchestrator.record_response(attempt_id, "tf-1", True)
        assert state.session.responses() == []
        assert results["answered_questions"] == 0
