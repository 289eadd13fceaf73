"""
Question pool loading with validation.

Loads question records from a JSON file or from in-memory dicts, validates
them against question_pool.schema.json and builds an immutable QuestionPool.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..models.question import QuestionPool
from .validation import QuestionPoolValidator

logger = logging.getLogger(__name__)

PoolSource = Union[str, Path, List[Dict[str, Any]], Dict[str, Any]]


class PoolValidationError(ValueError):
    """Raised when a question pool fails validation."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(
            f"Question pool failed validation with {len(errors)} error(s):\n"
            + "\n".join(f"  - {error}" for error in errors)
        )


def _read_records(source: PoolSource) -> List[Any]:
    """Resolve a source to a list of raw question records."""
    if isinstance(source, (str, Path)):
        with open(Path(source), "r", encoding="utf-8") as f:
            source = json.load(f)

    # Accept {"questions": [...]} as exported by the question bank
    if isinstance(source, dict):
        if "questions" not in source:
            raise PoolValidationError(["Pool object has no 'questions' key"])
        source = source["questions"]

    if not isinstance(source, list):
        raise PoolValidationError(
            [f"Pool must be a list of questions, got {type(source).__name__}"]
        )
    return source


def load_question_pool(
    source: PoolSource,
    validate: bool = True,
    auto_repair: bool = False,
    skip_invalid: bool = False,
    validator: Optional[QuestionPoolValidator] = None,
) -> QuestionPool:
    """
    Load a question pool.

    Args:
        source: Path to a JSON file, a list of question dicts, or {"questions": [...]}
        validate: Validate records against the question pool schema
        auto_repair: Strip unknown keys and coerce numeric strings before validating
        skip_invalid: Drop invalid records (logged) instead of raising
        validator: Validator to use (default: bundled schema)

    Returns:
        QuestionPool in source order

    Raises:
        PoolValidationError: If validation fails and skip_invalid is False
    """
    records = _read_records(source)

    if validate:
        validator = validator or QuestionPoolValidator()
        result = validator.validate(records, auto_repair=auto_repair)
        for repair in result.repairs:
            logger.info("Question pool repair: %s", repair)

        if not result.valid:
            if not skip_invalid or not result.invalid_indices:
                raise PoolValidationError(result.errors)
            for error in result.errors:
                logger.warning("Dropping invalid question: %s", error)
            records = [
                record
                for i, record in enumerate(result.data)
                if i not in result.invalid_indices
            ]
        else:
            records = result.data

    pool = QuestionPool.from_dicts(records)
    logger.info("Loaded question pool with %d questions", len(pool))
    return pool
