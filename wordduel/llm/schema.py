"""JSON schemas for the structured replies the oracles exchange, and validation."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError


def validate_json(instance: Any, schema: Dict[str, Any]) -> None:
    """Raise :class:`jsonschema.ValidationError` listing every problem, field first."""
    errors = sorted(Draft202012Validator(schema).iter_errors(instance), key=lambda e: list(e.path))
    if errors:
        raise ValidationError("; ".join(_describe(e) for e in errors))


def _describe(error: ValidationError) -> str:
    where = ".".join(str(p) for p in error.path)
    return f"{where}: {error.message}" if where else error.message


def text_field(min_length: int = 1, max_length: Optional[int] = None, nullable: bool = False) -> Dict[str, Any]:
    field: Dict[str, Any] = {"type": ["string", "null"] if nullable else "string", "minLength": min_length}
    if max_length is not None:
        field["maxLength"] = max_length
    return field


def record(title: str, fields: Dict[str, Any], required: Optional[List[str]] = None) -> Dict[str, Any]:
    """Closed object schema; every field is required unless ``required`` says otherwise."""
    return {
        "title": title,
        "type": "object",
        "properties": fields,
        "required": list(fields) if required is None else required,
        "additionalProperties": False,
    }


# No length cap: whatever the judge says is coerced into the label vocabulary afterwards.
JUDGE_ANSWER = record("JudgeAnswer", {"answer": text_field(min_length=0)})

NEXT_QUESTION = record(
    "NextQuestion",
    {"thought": text_field(0, 400, nullable=True), "question_text": text_field(3, 160)},
    required=["question_text"],
)

MAKE_GUESS = record(
    "MakeGuess",
    {
        "thought": text_field(0, 400, nullable=True),
        "guess_text": text_field(1, 80),
        "confidence": {"type": "number", "minimum": 0.0, "maximum": 1.0},
    },
    required=["guess_text", "confidence"],
)

HINT_QUESTION = record("HintQuestion", {"question_text": text_field(3, 160)})


def compact(schema: Dict[str, Any]) -> str:
    """Schema as minified JSON, for repair prompts."""
    return json.dumps(schema, separators=(",", ":"))
