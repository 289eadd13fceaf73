"""
Progress helpers for remediation recommendations.

Provides:
- Per-topic accuracy from a response history
- Topic categorization by accuracy band
- Readiness level and recommendation assembly
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..config import config
from ..models.ability import ResponseMap, iter_responses
from ..models.question import QuestionPool


def topic_accuracy(
    responses: Union[ResponseMap, Iterable],
    pool: QuestionPool,
) -> Dict[str, float]:
    """
    Percentage of correct responses per topic.

    Args:
        responses: Mapping of question id to correctness (or QuestionResponse list)
        pool: Question pool used to resolve topics

    Returns:
        Dict mapping topic to accuracy (0-100), in first-answered order

    Example:
        >>> topic_accuracy({"q1": True, "q2": False}, pool)  # both "algebra"
        {'algebra': 50.0}
    """
    counts: Dict[str, List[int]] = {}
    for question_id, is_correct in iter_responses(responses):
        question = pool.get(question_id)
        if question is None or not question.topic:
            continue
        correct, total = counts.get(question.topic, [0, 0])
        counts[question.topic] = [correct + (1 if is_correct else 0), total + 1]

    return {
        topic: round(100.0 * correct / total, 2)
        for topic, (correct, total) in counts.items()
    }


def mastery_by_category(
    mastery: Dict[str, float],
    thresholds: Dict[str, Tuple[float, float]] = None,
) -> Dict[str, List[str]]:
    """
    Categorize topics by accuracy level.

    Args:
        mastery: Dict mapping topics to accuracy scores (0-100)
        thresholds: Custom thresholds (default: novice/beginner/intermediate/advanced/expert)

    Returns:
        Dict mapping category names to lists of topics

    Example:
        >>> categories = mastery_by_category({"algebra": 85, "geometry": 45, "sets": 100})
        >>> categories["expert"]
        ['sets']
    """
    if thresholds is None:
        thresholds = {
            "novice": (0.0, 50.0),
            "beginner": (50.0, 65.0),
            "intermediate": (65.0, 80.0),
            "advanced": (80.0, 90.0),
            "expert": (90.0, 100.0),
        }

    categories: Dict[str, List[str]] = {cat: [] for cat in thresholds}

    for topic, score in mastery.items():
        for category, (low, high) in thresholds.items():
            if low <= score < high or (category == "expert" and score == 100.0):
                categories[category].append(topic)
                break

    return categories


def readiness_level(ability: float) -> float:
    """Ability clamped to [0, 1] for progress displays."""
    return round(max(0.0, min(1.0, ability)), 4)


def build_recommendations(
    ability: float,
    knowledge_gaps: List[str],
    accuracy: Dict[str, float],
    threshold: Optional[float] = None,
) -> Dict[str, object]:
    """
    Assemble remediation recommendations for a finished attempt.

    Args:
        ability: Final ability estimate
        knowledge_gaps: Topics with incorrect responses
        accuracy: Per-topic accuracy (0-100)
        threshold: Readiness threshold (default from config)

    Returns:
        Dict with knowledge_gaps, recommended_topics, readiness_level, ready
    """
    if threshold is None:
        threshold = config.assessment.readiness_threshold

    # Weakest topics first; ties keep the order they were missed in
    recommended = sorted(knowledge_gaps, key=lambda topic: accuracy.get(topic, 0.0))
    level = readiness_level(ability)

    return {
        "knowledge_gaps": list(knowledge_gaps),
        "recommended_topics": recommended,
        "readiness_level": level,
        "ready": level >= threshold,
    }
