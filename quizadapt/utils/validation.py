"""
Question pool validation.

Checks raw question records against question_pool.schema.json before they
become a QuestionPool, and optionally repairs the mistakes hand-edited pool
files usually contain: stray keys from other tools and numbers typed as
strings. Every repair is reported so a loader can log it.
"""

import json
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft7Validator, FormatChecker, ValidationError

from ..config import config


@dataclass
class ValidationResult:
    """
    Outcome of validating a question pool.

    Attributes:
        valid: True when no errors were found
        errors: Readable error messages
        data: Records that were checked (the repaired copy when repairs ran)
        repairs: Descriptions of repairs applied
        invalid_indices: Positions of records that an error points at
    """
    valid: bool
    errors: list[str]
    data: Any = None
    repairs: list[str] = field(default_factory=list)
    invalid_indices: set[int] = field(default_factory=set)

    def __bool__(self) -> bool:
        return self.valid

    def __str__(self) -> str:
        if not self.valid:
            lines = [f"Validation failed with {len(self.errors)} error(s):"]
            lines.extend(f"  - {error}" for error in self.errors)
            return "\n".join(lines)
        if self.repairs:
            return f"Validation passed ({len(self.repairs)} repair(s) applied)"
        return "Validation passed"


class SchemaValidator:
    """
    Draft 7 JSON Schema check with optional repair.

    Usage:
        validator = SchemaValidator(config.paths.question_pool_schema)
        result = validator.validate(records, auto_repair=True)
        if not result:
            for error in result.errors:
                ...
    """

    def __init__(self, schema_path: Path | str):
        self.schema_path = Path(schema_path)
        with open(self.schema_path, "r", encoding="utf-8") as f:
            self.schema = json.load(f)
        self.validator = Draft7Validator(self.schema, format_checker=FormatChecker())

    def validate(self, data: Any, auto_repair: bool = False) -> ValidationResult:
        """
        Check data against the schema.

        With auto_repair, a failing document is repaired on a copy and checked
        once more; the result then carries the repaired copy and the repairs.
        """
        errors = list(self.validator.iter_errors(data))
        if not errors:
            return ValidationResult(valid=True, errors=[], data=data)

        if auto_repair:
            repaired, repairs = self._attempt_repair(data)
            result = self.validate(repaired)
            result.repairs = repairs
            return result

        return ValidationResult(
            valid=False,
            errors=[self._describe(error) for error in errors],
            data=data,
            invalid_indices={
                error.path[0]
                for error in errors
                if error.path and isinstance(error.path[0], int)
            },
        )

    def _describe(self, error: ValidationError) -> str:
        """One line per error: where it is, what is wrong, which rule failed."""
        location = "/".join(str(part) for part in error.path) or "<pool>"
        rule = "/".join(str(part) for part in error.schema_path)
        return f"{location}: {error.message} (rule {rule})"

    def _attempt_repair(self, data: Any) -> tuple[Any, list[str]]:
        repaired = deepcopy(data)
        repairs: list[str] = []
        self._drop_unknown_keys(repaired, self.schema, repairs)
        self._coerce_types(repaired, repairs)
        return repaired, repairs

    def _drop_unknown_keys(self, node: Any, schema: Any, repairs: list[str], where: str = "pool"):
        """Delete keys a closed object schema does not declare, at any depth."""
        if not isinstance(schema, dict):
            return

        if isinstance(node, list):
            for index, item in enumerate(node):
                self._drop_unknown_keys(item, schema.get("items"), repairs, f"{where}[{index}]")
            return

        if not isinstance(node, dict):
            return

        declared = schema.get("properties", {})
        if schema.get("additionalProperties") is False:
            for key in [k for k in node if k not in declared]:
                del node[key]
                repairs.append(f"Dropped unknown key '{key}' from {where}")

        for key, subschema in declared.items():
            if key in node:
                self._drop_unknown_keys(node[key], subschema, repairs, f"{where}.{key}")

    def _coerce_types(self, data: Any, repairs: list[str]):
        """Hook for subclasses: coerce common type mismatches in place."""


class QuestionPoolValidator(SchemaValidator):
    """
    Validator for question pools.

    On top of the schema it rejects repeated question ids (the first record
    with an id is kept, later ones are marked invalid) and, when repairing,
    turns numeric strings in difficulty, points and tolerance into numbers.
    """

    def __init__(self, schema_path: Optional[Path] = None):
        super().__init__(schema_path or config.paths.question_pool_schema)

    def validate(self, data: Any, auto_repair: bool = False) -> ValidationResult:
        result = super().validate(data, auto_repair=auto_repair)
        if not isinstance(result.data, list):
            return result

        seen: set[str] = set()
        repeated: set[str] = set()
        for index, record in enumerate(result.data):
            qid = record.get("id") if isinstance(record, dict) else None
            if not isinstance(qid, str):
                continue
            if qid in seen:
                repeated.add(qid)
                result.invalid_indices.add(index)
            seen.add(qid)

        if repeated:
            result.valid = False
            result.errors.append(
                f"Duplicate question IDs found: {', '.join(sorted(repeated))} (IDs must be unique)"
            )
        return result

    def _coerce_types(self, data: Any, repairs: list[str]):
        if not isinstance(data, list):
            return

        for index, record in enumerate(data):
            if not isinstance(record, dict):
                continue
            for key in ("difficulty", "points", "tolerance"):
                raw = record.get(key)
                if not isinstance(raw, str):
                    continue
                try:
                    number = float(raw)
                except ValueError:
                    continue
                if key == "difficulty":
                    if not number.is_integer():
                        continue
                    number = int(number)
                record[key] = number
                repairs.append(f"Question {index}: {key} '{raw}' read as {number}")


def validate_question_pool(data: Any, auto_repair: bool = False) -> ValidationResult:
    """Validate question records against the bundled pool schema."""
    return QuestionPoolValidator().validate(data, auto_repair=auto_repair)
