"""Opponent that plays the AI side: asks questions, then starts guessing."""
from __future__ import annotations

import logging
from difflib import SequenceMatcher
from typing import Iterable, List, Protocol, Sequence

from wordduel.agents.base import LLMBackedAgent, format_history, normalize_text, opponent_messages
from wordduel.engine.types import Message, MessageType
from wordduel.llm.client import StructuredLLM
from wordduel.llm.schema import MAKE_GUESS, NEXT_QUESTION

log = logging.getLogger("opponent")

QUESTION_LIMIT = 8

QUESTION_BANK: Sequence[str] = (
    "Is it a living thing?",
    "Is it an object?",
    "Is it something you can hold?",
    "Is it bigger than a person?",
    "Is it found in nature?",
    "Is it made by humans?",
    "Can it move on its own?",
    "Is it used for transportation?",
    "Is it food?",
    "Is it an animal?",
    "Does it have legs?",
    "Can it fly?",
    "Does it live in water?",
    "Is it a mammal?",
    "Is it electronic?",
)

GUESS_POOL: Sequence[str] = (
    "computer",
    "elephant",
    "pizza",
    "guitar",
    "mountain",
    "butterfly",
    "telephone",
    "submarine",
    "rainbow",
    "volcano",
)

EXHAUSTED_GUESS = "mystery"
EXHAUSTED_QUESTIONS_GUESS = "computer"


def is_guess(text: str) -> bool:
    """Opponent output without a question mark is a guess."""
    return "?" not in text


class Opponent(Protocol):
    def next_move(self, history: Sequence[Message]) -> str:
        ...


def _subject(question: str) -> str:
    # Drop the "is it" / "does it" opener so only the subject is compared.
    tokens = normalize_text(question).split()
    return " ".join(tokens[2:]) if len(tokens) > 2 else " ".join(tokens)


def already_asked(question: str, asked: Iterable[str], threshold: float = 0.85) -> bool:
    """Fuzzy repeat check: subject substring or close overall similarity."""

    subject = _subject(question)
    norm = normalize_text(question)
    for previous in asked:
        prev_norm = normalize_text(previous)
        if subject and f" {subject} " in f" {prev_norm} ":
            return True
        if SequenceMatcher(None, norm, prev_norm).ratio() >= threshold:
            return True
    return False


def attempted_guesses(history: Sequence[Message]) -> List[str]:
    return [
        normalize_text(m.content)
        for m in opponent_messages(history)
        if m.type is MessageType.GUESS
    ]


class ScriptedOpponent:
    """Deterministic opponent walking a fixed question bank and guess pool."""

    def __init__(
        self,
        question_limit: int = QUESTION_LIMIT,
        questions: Sequence[str] = QUESTION_BANK,
        guesses: Sequence[str] = GUESS_POOL,
    ) -> None:
        self.question_limit = question_limit
        self.questions = list(questions)
        self.guesses = list(guesses)

    def next_move(self, history: Sequence[Message]) -> str:
        if len(opponent_messages(history)) >= self.question_limit:
            return self.next_guess(history)
        return self.next_question(history)

    def next_question(self, history: Sequence[Message]) -> str:
        asked = [m.content for m in opponent_messages(history)]
        for question in self.questions:
            if not already_asked(question, asked):
                return question
        return EXHAUSTED_QUESTIONS_GUESS

    def next_guess(self, history: Sequence[Message]) -> str:
        tried = set(attempted_guesses(history))
        for guess in self.guesses:
            if normalize_text(guess) not in tried:
                return guess
        return EXHAUSTED_GUESS


OPPONENT_SYSTEM_PROMPT = """You are playing a word guessing game against a human. You need to ask yes/no questions to figure out the secret word.
The human will either ask a question or make a guess each turn.

After they go, it's now your turn to do the same. Your goal is to guess the secret word before they do.

Use their questions (and the responses to them) to inform your next question.

Also use your previous questions and guesses to inform your next guess/question.

Guidelines:
- You probably want to start by asking broad questions to narrow down the category.
- As you gather more information, ask more specific questions to zero in on the word.
- Keep the question short (<= 12 words) and end it with '?'.
- Never repeat a question you already asked.
Always answer in json."""

GUESS_SYSTEM_PROMPT = """You are playing a word guessing game and have run out of questions.
First write a brief thought explaining which candidates the answers rule out, then give your guess.
Return a single word only, no question mark, no sentence. Do not repeat previous guesses.
Always answer in json."""


class LLMOpponent(LLMBackedAgent):
    """LLM-driven opponent with scripted fallbacks for repeats."""

    def __init__(
        self,
        llm: StructuredLLM,
        question_limit: int = QUESTION_LIMIT,
        fallback: ScriptedOpponent | None = None,
    ) -> None:
        super().__init__(name="opponent", system_prompt=OPPONENT_SYSTEM_PROMPT, llm=llm)
        self.question_limit = question_limit
        self._fallback = fallback or ScriptedOpponent(question_limit=question_limit)
        self._schema_question = NEXT_QUESTION
        self._schema_guess = MAKE_GUESS

    def next_move(self, history: Sequence[Message]) -> str:
        if len(opponent_messages(history)) >= self.question_limit:
            return self._guess(history)
        return self._question(history)

    def _question(self, history: Sequence[Message]) -> str:
        asked = [m.content for m in opponent_messages(history) if m.type is MessageType.QUESTION]
        user = (
            "Previous conversation:\n"
            + (format_history(history) or "No previous questions yet.")
            + "\n\nQuestions you already asked: "
            + (" | ".join(asked[-8:]) or "(none)")
            + "\nWhat is your next yes/no question to figure out the secret word?"
        )
        payload = self._call_llm(user, self._schema_question, max_output_tokens=120)
        question = " ".join(str(payload.get("question_text", "")).split())
        if not question.endswith("?"):
            question = question.rstrip(".!") + "?"
        if already_asked(question, asked):
            log.info("Opponent repeated %r; using scripted question", question)
            return self._fallback.next_question(history)
        return question

    def _guess(self, history: Sequence[Message]) -> str:
        tried = attempted_guesses(history)
        user = (
            "Previous conversation:\n"
            + (format_history(history) or "No previous questions yet.")
            + "\n\nPreviously attempted guesses (do not repeat): "
            + (", ".join(tried) or "(none)")
            + "\nMake your best guess now."
        )
        payload = self._call_llm(user, self._schema_guess, system=GUESS_SYSTEM_PROMPT, max_output_tokens=120)
        guess = " ".join(str(payload.get("guess_text", "")).replace("?", " ").split())
        if not guess or normalize_text(guess) in tried:
            log.info("Opponent guess %r unusable; using scripted guess", guess)
            return self._fallback.next_guess(history)
        return guess
