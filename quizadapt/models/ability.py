"""
Ability estimation - difficulty-weighted accuracy.

Harder questions answered correctly pull the estimate up more than easy ones:

    ability = sum(difficulty of correct answers) / sum(difficulty of all answers)

A plain weighted ratio, not a parametric IRT fit. With
non-negative difficulties and boolean correctness the result lies in [0, 1].
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Union

from .question import QuestionPool

logger = logging.getLogger(__name__)

# question_id -> is_correct, in answer order
ResponseMap = Mapping[str, bool]


def iter_responses(responses: Union[ResponseMap, Iterable]) -> Iterable[tuple]:
    """Accept either a {question_id: is_correct} mapping or QuestionResponse objects."""
    if isinstance(responses, Mapping):
        return responses.items()
    return ((r.question_id, r.is_correct) for r in responses)


class AbilityEstimator:
    """Converts a response history into a scalar ability estimate."""

    def estimate(
        self,
        responses: Union[ResponseMap, Iterable],
        prior_ability: float,
        pool: QuestionPool,
    ) -> float:
        """
        Estimate ability from responses.

        Args:
            responses: Mapping of question id to correctness (or QuestionResponse list)
            prior_ability: Estimate to keep when nothing can be computed
            pool: Question pool used to resolve difficulties

        Returns:
            New ability estimate; prior_ability when the history is empty or
            no response resolves against the pool
        """
        total_difficulty = 0
        weighted_correct = 0

        for question_id, is_correct in iter_responses(responses):
            question = pool.get(question_id)
            if question is None:
                # Stale id from an earlier pool version
                continue
            total_difficulty += question.difficulty
            if is_correct:
                weighted_correct += question.difficulty

        if total_difficulty == 0:
            return prior_ability

        ability = weighted_correct / total_difficulty
        logger.debug(
            "Ability %.3f (weighted_correct=%d, total_difficulty=%d)",
            ability, weighted_correct, total_difficulty,
        )
        return ability
