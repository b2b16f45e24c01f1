from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .retry import retry_call
from .schema import compact, validate_json

log = logging.getLogger("llm_client")


class LLMClientError(RuntimeError):
    """Transport or structured-output failure.

    ``raw_text`` holds the model's last reply when one arrived but could not
    be parsed or validated; it is ``None`` for transport failures.
    """

    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.raw_text = raw_text


@dataclass
class LLMResponseMeta:
    model: str
    temperature: float
    usage_total_tokens: Optional[int]
    attempts: int
    raw_text: str


class StructuredLLM(Protocol):
    """Anything that can answer a JSON-mode prompt with a schema-valid object."""

    def structured_call(
        self,
        messages: List[Dict[str, Any]],
        schema: Dict[str, Any],
        temperature: float = 0.0,
        max_output_tokens: int = 256,
        max_repairs: int = 2,
    ) -> Tuple[Dict[str, Any], LLMResponseMeta]:
        ...


def _mentions_json(messages: List[Dict[str, Any]]) -> bool:
    return any("json" in (m.get("content") or "").lower() for m in messages)


class LLMClient:
    """Thin wrapper for JSON-mode structured outputs with validation and auto-repair.

    Every request carries a bounded timeout.  Timeouts, dropped connections,
    rate limits and server errors are retried at most ``max_retries`` times;
    anything else surfaces to the caller at once.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        request_timeout_seconds: float = 20.0,
        max_retries: int = 1,
        backoff_seconds: float = 0.5,
        seed: Optional[int] = None,
    ):
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.base_url = base_url or os.getenv("OPENAI_BASE_URL")
        self.model = model or os.getenv("MODEL_NAME", "gpt-4o-mini")
        self.request_timeout_seconds = float(request_timeout_seconds)
        self.max_retries = int(max_retries)
        self.backoff_seconds = float(backoff_seconds)
        self.seed = seed

        try:
            import openai  # type: ignore
        except Exception as exc:
            raise LLMClientError(
                "openai package not installed. Install wordduel with its dependencies."
            ) from exc

        self._client = openai.OpenAI(api_key=self.api_key, base_url=self.base_url)
        # APITimeoutError is a subclass of APIConnectionError.
        self._transient = (openai.APIConnectionError, openai.RateLimitError, openai.InternalServerError)

    def _chat_completion(self, messages: List[Dict[str, Any]], temperature: float, max_tokens: int) -> Any:
        return self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            response_format={"type": "json_object"},
            seed=self.seed,
            timeout=self.request_timeout_seconds,
        )

    def _log_retry(self, attempt: int, exc: BaseException) -> None:
        log.warning("%s request failed (%s); retry %d of %d", self.model, exc, attempt, self.max_retries)

    def _complete_text(self, messages: List[Dict[str, Any]], temperature: float, max_tokens: int) -> Tuple[str, Any]:
        try:
            resp = retry_call(
                self._chat_completion,
                messages,
                temperature,
                max_tokens,
                max_retries=self.max_retries,
                backoff_seconds=self.backoff_seconds,
                retry_on_exceptions=self._transient,
                before_retry=self._log_retry,
            )
        except Exception as exc:
            raise LLMClientError(f"Chat completion failed: {exc}") from exc
        choice = resp.choices[0]
        return (choice.message.content or "").strip(), resp

    def structured_call(
        self,
        messages: List[Dict[str, Any]],
        schema: Dict[str, Any],
        temperature: float = 0.0,
        max_output_tokens: int = 256,
        max_repairs: int = 2,
    ) -> Tuple[Dict[str, Any], LLMResponseMeta]:
        """Call model in JSON mode, validate against schema, auto-repair on failure.

        Returns (parsed_json, meta).
        """

        messages_effective = list(messages)
        # Some providers refuse JSON mode unless a message mentions 'json'.
        if not _mentions_json(messages_effective):
            messages_effective.append({
                "role": "system",
                "content": "Respond in json only. Return a single minified json object strictly matching the provided schema.",
            })

        last_text, resp = self._complete_text(messages_effective, temperature, max_output_tokens)
        attempts = 1

        for repair_idx in range(max_repairs + 1):
            try:
                parsed = json.loads(last_text)
                validate_json(parsed, schema)
            except Exception as err:
                if repair_idx >= max_repairs:
                    raise LLMClientError(
                        f"Structured output failed after repairs: {err}", raw_text=last_text
                    ) from err
                log.info("Repairing structured output (attempt %d): %s", repair_idx + 1, err)
                repair_msg = {
                    "role": "system",
                    "content": (
                        "Your last output could not be parsed/validated. "
                        "Fix the issues below and return ONLY a compact json object that strictly matches the schema.\n"
                        f"Error: {err}\n"
                        f"Schema: {compact(schema)}"
                    ),
                }
                last_text, resp = self._complete_text(
                    [*messages_effective, repair_msg], temperature, max_output_tokens
                )
                attempts += 1
                continue
            usage = getattr(resp, "usage", None)
            meta = LLMResponseMeta(
                model=self.model,
                temperature=temperature,
                usage_total_tokens=usage.total_tokens if usage else None,
                attempts=attempts,
                raw_text=last_text,
            )
            return parsed, meta
        raise LLMClientError("Structured output failed")  # pragma: no cover


__all__ = ["LLMClient", "LLMClientError", "LLMResponseMeta", "StructuredLLM"]
