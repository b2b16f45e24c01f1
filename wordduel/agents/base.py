"""Shared helpers for the LLM-backed agents."""
from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Sequence

from wordduel.engine.types import AI_PLAYER_ID, Message, MessageType
from wordduel.llm.client import StructuredLLM


def normalize_text(text: str) -> str:
    return " ".join(re.findall(r"[a-z0-9]+", text.lower()))


def format_history(messages: Iterable[Message], labels: bool = False) -> str:
    """Render messages the way the prompts expect, one per line."""

    lines = []
    for msg in messages:
        if labels:
            speaker = {
                MessageType.HINT: "Hint",
                MessageType.GUESS: "Guess",
                MessageType.QUESTION: "Question",
            }[msg.type]
        else:
            speaker = "AI" if msg.player_id == AI_PLAYER_ID else "Player"
        response = msg.response if msg.response is not None else "(pending)"
        lines.append(f"{speaker}: {msg.content} → Response: {response}")
    return "\n".join(lines)


def opponent_messages(history: Sequence[Message]) -> List[Message]:
    return [m for m in history if m.player_id == AI_PLAYER_ID]


class LLMBackedAgent:
    """Base class that provides convenience methods for LLM prompts."""

    def __init__(self, name: str, system_prompt: str, llm: StructuredLLM) -> None:
        self.name = name
        self._system_prompt = system_prompt
        self._llm = llm

    def _call_llm(
        self,
        user: str,
        schema: Dict[str, Any],
        system: str | None = None,
        max_output_tokens: int = 64,
        temperature: float = 0.0,
        max_repairs: int = 2,
    ) -> Dict[str, Any]:
        messages = [
            {"role": "system", "content": system or self._system_prompt},
            {"role": "user", "content": user},
        ]
        payload, _meta = self._llm.structured_call(
            messages=messages,
            schema=schema,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            max_repairs=max_repairs,
        )
        return payload
