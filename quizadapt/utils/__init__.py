"""
Utility modules for QuizAdapt.

This module contains utility functions:
- validation: JSON Schema validation of question pools with auto-repair
- pool_loader: Load question pools from JSON files or dicts
- progress: Topic accuracy and remediation recommendations
"""

from .validation import (
    SchemaValidator,
    QuestionPoolValidator,
    ValidationResult,
    validate_question_pool,
)
from .pool_loader import (
    PoolValidationError,
    load_question_pool,
)
from .progress import (
    topic_accuracy,
    mastery_by_category,
    readiness_level,
    build_recommendations,
)

__all__ = [
    # Validation
    "SchemaValidator",
    "QuestionPoolValidator",
    "ValidationResult",
    "validate_question_pool",
    # Loading
    "PoolValidationError",
    "load_question_pool",
    # Progress
    "topic_accuracy",
    "mastery_by_category",
    "readiness_level",
    "build_recommendations",
]
