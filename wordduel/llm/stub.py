"""Deterministic LLM stand-in used by the tests and offline demos."""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Tuple

from .client import LLMClientError, LLMResponseMeta
from .schema import validate_json


class SequentialStubClient:
    """A client that returns pre-scripted JSON replies.

    The client is initialised with an iterable of strings.  Each call to
    :meth:`structured_call` pops the next reply, parses it and validates it
    against the requested schema, so prompts built by the agents are checked
    the same way a real model's output would be.  Every prompt received is
    kept in :attr:`prompts` for inspection.
    """

    def __init__(self, replies: Iterable[str], model: str = "stub"):
        self._replies = list(replies)
        self._index = 0
        self.model = model
        self.prompts: List[List[Dict[str, Any]]] = []

    @property
    def remaining(self) -> int:
        return len(self._replies) - self._index

    def structured_call(
        self,
        messages: List[Dict[str, Any]],
        schema: Dict[str, Any],
        temperature: float = 0.0,
        max_output_tokens: int = 256,
        max_repairs: int = 2,
    ) -> Tuple[Dict[str, Any], LLMResponseMeta]:
        self.prompts.append(list(messages))
        if self._index >= len(self._replies):
            raise LLMClientError("SequentialStubClient has been exhausted.")
        raw = self._replies[self._index]
        self._index += 1
        try:
            parsed = json.loads(raw)
            validate_json(parsed, schema)
        except Exception as err:
            raise LLMClientError(f"Structured output failed: {err}", raw_text=raw) from err
        meta = LLMResponseMeta(
            model=self.model,
            temperature=temperature,
            usage_total_tokens=None,
            attempts=1,
            raw_text=raw,
        )
        return parsed, meta
