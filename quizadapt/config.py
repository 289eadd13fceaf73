"""
Configuration management for QuizAdapt.

This module centralizes all configuration settings:
- Overrides loaded from environment variables
- Sensible defaults for short formative quizzes
- Single source of truth for selection policy constants
- Logging setup for applications embedding the engine
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass
class AssessmentConfig:
    """Adaptive selection and scoring configuration."""

    # Ability scale is [0, 1]; 0.5 is a medium starting guess
    default_ability: float = field(
        default_factory=lambda: float(os.getenv("QUIZADAPT_DEFAULT_ABILITY", "0.5"))
    )
    max_questions: int = field(
        default_factory=lambda: int(os.getenv("QUIZADAPT_MAX_QUESTIONS", "10"))
    )

    # Difficulty scale
    min_difficulty: int = 1
    max_difficulty: int = 5

    # Selection policy
    difficulty_window: int = 1  # |difficulty - target| <= window on initial selection
    challenge_offset: int = 1  # Adapt aims one notch above raw ability
    max_replacements: int = 2  # Unanswered tail slots revised per response

    # Grading and completion
    passing_score: float = 70.0
    numeric_tolerance: float = 0.01
    readiness_threshold: float = 0.7


@dataclass
class PathConfig:
    """File system paths - single source of truth for bundled resources."""

    package_root: Path = field(default_factory=lambda: Path(__file__).parent)

    schemas_dir: Path = field(init=False)
    question_pool_schema: Path = field(init=False)

    def __post_init__(self):
        """Initialize computed paths."""
        self.schemas_dir = self.package_root / "schemas"
        self.question_pool_schema = self.schemas_dir / "question_pool.schema.json"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = field(
        default_factory=lambda: os.getenv("QUIZADAPT_LOG_LEVEL", "INFO")
    )
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Config:
    """
    Main configuration class. Singleton pattern.

    Usage:
        from quizadapt.config import config

        max_questions = config.assessment.max_questions
        config.configure_logging()
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.paths = PathConfig()
            cls._instance.assessment = AssessmentConfig()
            cls._instance.logging = LoggingConfig()
        return cls._instance

    def configure_logging(self) -> None:
        """Configure root logging from LoggingConfig. Call once at startup."""
        logging.basicConfig(
            level=self.logging.log_level.upper(),
            format=self.logging.log_format,
        )

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []
        assessment = self.assessment

        if not (0 <= assessment.default_ability <= 1):
            errors.append(
                f"default_ability must be in [0, 1], got {assessment.default_ability}"
            )

        if assessment.max_questions < 0:
            errors.append(f"max_questions must be >= 0, got {assessment.max_questions}")

        if assessment.min_difficulty >= assessment.max_difficulty:
            errors.append(
                f"min_difficulty ({assessment.min_difficulty}) must be < "
                f"max_difficulty ({assessment.max_difficulty})"
            )

        if assessment.difficulty_window < 0:
            errors.append(
                f"difficulty_window must be >= 0, got {assessment.difficulty_window}"
            )

        if assessment.max_replacements < 0:
            errors.append(
                f"max_replacements must be >= 0, got {assessment.max_replacements}"
            )

        if not (0 <= assessment.passing_score <= 100):
            errors.append(
                f"passing_score must be in [0, 100], got {assessment.passing_score}"
            )

        if assessment.numeric_tolerance < 0:
            errors.append(
                f"numeric_tolerance must be >= 0, got {assessment.numeric_tolerance}"
            )

        if not (0 <= assessment.readiness_threshold <= 1):
            errors.append(
                f"readiness_threshold must be in [0, 1], got {assessment.readiness_threshold}"
            )

        if not isinstance(logging.getLevelName(self.logging.log_level.upper()), int):
            errors.append(f"Unknown log_level: {self.logging.log_level}")

        if not self.paths.question_pool_schema.exists():
            errors.append(
                f"Question pool schema not found: {self.paths.question_pool_schema}"
            )

        return errors


# Global config instance
config = Config()
