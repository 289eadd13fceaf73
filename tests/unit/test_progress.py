"""
Unit tests for progress helpers and recommendations.
"""

import pytest

from quizadapt.utils.progress import (
    build_recommendations,
    mastery_by_category,
    readiness_level,
    topic_accuracy,
)


class TestTopicAccuracy:
    """Test per-topic accuracy."""

    def test_accuracy_per_topic(self, ladder_pool):
        responses = {"q5": True, "q6": False, "q9": True, "q1": True}
        assert topic_accuracy(responses, ladder_pool) == {
            "stoichiometry": 50.0,
            "kinetics": 100.0,
            "units": 100.0,
        }

    def test_unknown_questions_ignored(self, ladder_pool):
        assert topic_accuracy({"gone": False}, ladder_pool) == {}

    def test_empty(self, ladder_pool):
        assert topic_accuracy({}, ladder_pool) == {}


class TestMasteryByCategory:
    """Test accuracy banding."""

    def test_default_bands(self):
        categories = mastery_by_category({"moles": 85, "units": 45, "kinetics": 100.0})
        assert categories["advanced"] == ["moles"]
        assert categories["novice"] == ["units"]
        assert categories["expert"] == ["kinetics"]

    def test_custom_bands(self):
        thresholds = {"weak": (0.0, 60.0), "strong": (60.0, 101.0)}
        categories = mastery_by_category({"a": 59.9, "b": 60.0}, thresholds)
        assert categories == {"weak": ["a"], "strong": ["b"]}


class TestRecommendations:
    """Test recommendation assembly."""

    @pytest.mark.parametrize("ability, expected", [(-0.2, 0.0), (0.42, 0.42), (1.3, 1.0)])
    def test_readiness_level_clamped(self, ability, expected):
        assert readiness_level(ability) == expected

    def test_weakest_topics_first(self):
        recommendations = build_recommendations(
            0.55,
            ["kinetics", "moles"],
            {"kinetics": 50.0, "moles": 0.0},
            threshold=0.7,
        )
        assert recommendations["knowledge_gaps"] == ["kinetics", "moles"]
        assert recommendations["recommended_topics"] == ["moles", "kinetics"]
        assert recommendations["readiness_level"] == 0.55
        assert recommendations["ready"] is False

    def test_ready(self):
        recommendations = build_recommendations(0.9, [], {}, threshold=0.7)
        assert recommendations["ready"] is True
        assert recommendations["recommended_topics"] == []
