"""
Question Selector - builds and revises the active question subset.

Two operations:
- initial_select: pick questions in a window around the starting ability,
  topping up from the rest of the pool in difficulty order
- adapt: after each response, swap the unanswered tail of the selection for
  questions one notch harder than the current ability

Selection size is fixed once initialized; answered slots are never replaced.
"""

from __future__ import annotations

import logging
import math
from typing import Collection, List, Optional

from ..config import config
from .question import Question, QuestionPool

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3, 3.5 -> 4)."""
    return int(math.floor(value + 0.5))


class QuestionSelector:
    """
    Difficulty-window question selection.

    Usage:
        selector = QuestionSelector()
        selection = selector.initial_select(pool, ability=0.5, max_questions=4)
        selection = selector.adapt(selection, {"q3": True}, pool, ability=0.7)
    """

    def __init__(
        self,
        difficulty_window: Optional[int] = None,
        challenge_offset: Optional[int] = None,
        max_replacements: Optional[int] = None,
    ):
        """
        Initialize selector.

        Args:
            difficulty_window: Max distance from target on initial selection
            challenge_offset: Notches above raw ability targeted by adapt
            max_replacements: How many tail slots adapt may revise
        """
        settings = config.assessment
        self.difficulty_window = (
            settings.difficulty_window if difficulty_window is None else difficulty_window
        )
        self.challenge_offset = (
            settings.challenge_offset if challenge_offset is None else challenge_offset
        )
        self.max_replacements = (
            settings.max_replacements if max_replacements is None else max_replacements
        )
        self.max_difficulty = settings.max_difficulty

    # ==================== Targets ====================

    def initial_target(self, ability: float) -> int:
        """Difficulty matched to raw ability (0..5)."""
        return round_half_up(ability * self.max_difficulty)

    def challenge_target(self, ability: float) -> int:
        """Difficulty one notch above raw ability, capped at the hardest level."""
        return min(self.max_difficulty, self.initial_target(ability) + self.challenge_offset)

    def rank_by_target(self, questions: Collection[Question], target: int) -> List[Question]:
        """Stable sort by distance to target; ties keep pool order."""
        return sorted(questions, key=lambda q: abs(q.difficulty - target))

    # ==================== Selection ====================

    def initial_select(
        self,
        pool: QuestionPool,
        ability: float,
        max_questions: int,
    ) -> List[Question]:
        """
        Select the starting subset.

        Args:
            pool: Question pool
            ability: Starting ability estimate
            max_questions: Selection size cap

        Returns:
            Up to max_questions questions, windowed ones first, in difficulty order
        """
        if max_questions <= 0 or not pool:
            return []

        ordered = sorted(pool, key=lambda q: q.difficulty)
        target = self.initial_target(ability)

        selected = [
            q for q in ordered if abs(q.difficulty - target) <= self.difficulty_window
        ][:max_questions]

        if len(selected) < max_questions:
            chosen = {q.id for q in selected}
            remaining = [q for q in ordered if q.id not in chosen]
            selected.extend(remaining[: max_questions - len(selected)])

        logger.debug(
            "Initial selection: target=%d, %d/%d questions",
            target, len(selected), len(pool),
        )
        return selected

    def adapt(
        self,
        selection: List[Question],
        responses: Collection[str],
        pool: QuestionPool,
        ability: float,
    ) -> List[Question]:
        """
        Revise the unanswered tail of the selection.

        Args:
            selection: Current selection (mutated in place)
            responses: Answered question ids (a response mapping works too)
            pool: Question pool
            ability: Updated ability estimate

        Returns:
            The same selection list, same length
        """
        if not selection or not pool:
            return selection

        target = self.challenge_target(ability)
        selected_ids = {q.id for q in selection}
        candidates = self.rank_by_target(
            [q for q in pool if q.id not in selected_ids], target
        )

        num_to_replace = min(self.max_replacements, len(selection))
        next_candidate = 0
        for offset in range(num_to_replace):
            index = len(selection) - 1 - offset
            if selection[index].id in responses:
                continue
            if next_candidate >= len(candidates):
                break
            replacement = candidates[next_candidate]
            next_candidate += 1
            logger.debug(
                "Slot %d: %s (difficulty %d) -> %s (difficulty %d), target=%d",
                index, selection[index].id, selection[index].difficulty,
                replacement.id, replacement.difficulty, target,
            )
            selection[index] = replacement

        return selection

    def next_best(
        self,
        pool: QuestionPool,
        ability: float,
        answered_ids: Collection[str],
    ) -> Optional[Question]:
        """First unanswered pool question closest to the challenge target."""
        unanswered = [q for q in pool if q.id not in answered_ids]
        if not unanswered:
            return None
        target = self.challenge_target(ability)
        return min(unanswered, key=lambda q: abs(q.difficulty - target))
