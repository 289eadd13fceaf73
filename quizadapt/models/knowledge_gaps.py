"""Knowledge gap analysis - topics with at least one incorrect response."""

from __future__ import annotations

from typing import Iterable, List, Set, Union

from .ability import ResponseMap, iter_responses
from .question import QuestionPool


class KnowledgeGapAnalyzer:
    """Derives topic-level weaknesses from incorrect responses."""

    def ordered_gaps(
        self,
        responses: Union[ResponseMap, Iterable],
        pool: QuestionPool,
    ) -> List[str]:
        """Gap topics in the order they were first missed."""
        gaps: List[str] = []
        for question_id, is_correct in iter_responses(responses):
            if is_correct:
                continue
            question = pool.get(question_id)
            if question is None or not question.topic:
                continue
            if question.topic not in gaps:
                gaps.append(question.topic)
        return gaps

    def gaps(
        self,
        responses: Union[ResponseMap, Iterable],
        pool: QuestionPool,
    ) -> Set[str]:
        return set(self.ordered_gaps(responses, pool))
