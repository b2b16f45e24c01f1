from __future__ import annotations

import re
from typing import Any, Dict

from jsonschema.exceptions import ValidationError as SchemaValidationError

from ..errors import ValidationError
from ..llm.schema import record, text_field, validate_json
from .types import MessageType

MAX_CONTENT_LENGTH = 500

_TRAILING_PUNCTUATION = re.compile(r"[?!.,:;]+$")


def action_schema() -> Dict[str, Any]:
    schema = record(
        "SubmitAction",
        {
            "game_id": text_field(1, 128),
            "actor_id": text_field(1, 128),
            "type": {"enum": [t.value for t in MessageType]},
            "content": text_field(0, MAX_CONTENT_LENGTH),
        },
    )
    # Hints may arrive without text; questions and guesses may not.
    schema["if"] = {"properties": {"type": {"enum": ["question", "guess"]}}}
    schema["then"] = {"properties": {"content": {"pattern": r"\S"}}}
    return schema


def validate_action(payload: Dict[str, Any]) -> None:
    try:
        validate_json(payload, action_schema())
    except SchemaValidationError as exc:
        raise ValidationError(f"Invalid action: {exc.message}") from exc


def normalize_guess(text: str) -> str:
    """Lowercase, trim and drop trailing punctuation (``"Pizza?"`` -> ``"pizza"``)."""
    return _TRAILING_PUNCTUATION.sub("", text.lower().strip())


def normalize_secret(word: str) -> str:
    return word.lower().strip()


def is_correct_guess(guess: str, secret_word: str) -> bool:
    return normalize_guess(guess) == normalize_secret(secret_word)


def mentions_word(text: str, word: str) -> bool:
    """True if ``word`` appears in ``text`` as a whole word, ignoring case."""
    target = normalize_secret(word)
    if not target:
        return False
    return re.search(rf"(?<![a-z0-9]){re.escape(target)}(?![a-z0-9])", text.lower()) is not None


def contains_word(text: str, word: str) -> bool:
    """Substring variant of :func:`mentions_word`; also catches ``guitarist`` for ``guitar``."""
    target = normalize_secret(word)
    return bool(target) and target in text.lower()
