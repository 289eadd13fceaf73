"""
Shared pytest fixtures and configuration for QuizAdapt tests.

This file is automatically discovered by pytest and provides
fixtures available to all tests.
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def ladder_records():
    """
    Fixture providing ten questions with difficulties 1,1,2,2,3,3,4,4,5,5.

    Returns:
        list: Question records q1..q10 in pool order
    """
    difficulties = [1, 1, 2, 2, 3, 3, 4, 4, 5, 5]
    topics = [
        "units", "units", "moles", "moles", "stoichiometry",
        "stoichiometry", "equilibrium", "equilibrium", "kinetics", "kinetics",
    ]
    return [
        {
            "id": f"q{i}",
            "difficulty": difficulty,
            "topic": topic,
            "question_type": "multiple_choice",
            "question_text": f"Question {i}",
            "options": ["A", "B", "C", "D"],
            "correct_answer": "B",
        }
        for i, (difficulty, topic) in enumerate(zip(difficulties, topics), start=1)
    ]


@pytest.fixture
def ladder_pool(ladder_records):
    """
    Fixture providing the ten-question pool as a QuestionPool.

    Returns:
        QuestionPool: Pool built from ladder_records
    """
    from quizadapt.models.question import QuestionPool

    return QuestionPool.from_dicts(ladder_records)


@pytest.fixture
def mixed_records():
    """
    Fixture providing one question per gradable type.

    Returns:
        list: Question records with answer keys
    """
    return [
        {
            "id": "mc-1",
            "difficulty": 2,
            "topic": "stoichiometry",
            "question_type": "multiple_choice",
            "options": ["A", "B", "C"],
            "correct_answer": "B",
            "points": 2,
        },
        {
            "id": "num-1",
            "difficulty": 3,
            "topic": "moles",
            "question_type": "numerical",
            "correct_answer": "6.022",
            "tolerance": 0.01,
            "points": 3,
        },
        {
            "id": "sa-1",
            "difficulty": 4,
            "topic": "equilibrium",
            "question_type": "short_answer",
            "correct_answer": ["le chatelier", "shift"],
            "points": 5,
        },
        {
            "id": "tf-1",
            "difficulty": 1,
            "question_type": "true_false",
            "correct_answer": "true",
        },
    ]


@pytest.fixture
def pool_file(tmp_path, ladder_records):
    """
    Fixture providing the ladder pool written to a JSON file.

    Args:
        tmp_path: pytest's tmp_path fixture

    Returns:
        Path: Path to temporary pool file
    """
    path = tmp_path / "pool.json"
    with open(path, "w") as f:
        json.dump({"questions": ladder_records}, f)
    return path


# Pytest hooks for better test output


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
