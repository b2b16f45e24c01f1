"""Hint advisor: suggests the next strategic yes/no question.

Each additional hint climbs one rung of a ladder of increasingly pointed
questions.  A hint is always a question for the judge, never the answer.
"""
from __future__ import annotations

from typing import Dict, Protocol, Sequence

from wordduel.agents.base import LLMBackedAgent, format_history
from wordduel.engine.types import Message
from wordduel.engine.validator import normalize_secret
from wordduel.llm.client import StructuredLLM
from wordduel.llm.schema import HINT_QUESTION

GENERIC_LADDER: Sequence[str] = (
    "Is it a living thing?",
    "Is it something people use every day?",
    "Is it bigger than a bread box?",
    "Would you usually find it outdoors?",
    "Could you hold it in one hand?",
)

WORD_LADDERS: Dict[str, Sequence[str]] = {
    "elephant": ("Is it an animal?", "Is it the largest animal that lives on land?", "Does it have a long trunk?"),
    "computer": ("Is it electronic?", "Do people use it for work and entertainment?", "Does it have a keyboard and a screen?"),
    "guitar": ("Is it used to make music?", "Does it have strings?", "Do you strum it?"),
    "rainbow": ("Is it found in nature?", "Does it appear in the sky?", "Does it show up after rain when the sun comes out?"),
    "pizza": ("Is it a food?", "Is it usually topped with cheese and tomato sauce?", "Is it often cut into triangular slices?"),
    "astronaut": ("Is it a person?", "Is it a job?", "Does this person travel to space?"),
    "mountain": ("Is it found in nature?", "Is it bigger than a building?", "Do people climb to its peak?"),
    "butterfly": ("Is it an animal?", "Can it fly?", "Did it start life as a caterpillar?"),
    "telephone": ("Is it electronic?", "Is it used to talk to people?", "Do you dial a number to use it?"),
    "umbrella": ("Is it something you can hold?", "Is it used when the weather is bad?", "Does it keep the rain off you?"),
    "chocolate": ("Is it a food?", "Is it sweet?", "Is it made from cocoa beans?"),
    "dinosaur": ("Is it an animal?", "Is it extinct?", "Did it live millions of years ago?"),
    "symphony": ("Is it related to music?", "Is it performed by many musicians together?", "Is it a long piece for a full orchestra?"),
    "volcano": ("Is it found in nature?", "Can it be dangerous?", "Does it erupt lava?"),
    "penguin": ("Is it an animal?", "Is it a bird?", "Does it live in cold places and waddle?"),
    "telescope": ("Is it a tool?", "Is it used to look at faraway things?", "Do astronomers use it to look at stars?"),
    "hurricane": ("Is it related to weather?", "Is it a kind of storm?", "Does it form over warm ocean water?"),
    "champagne": ("Is it something you drink?", "Does it contain alcohol?", "Is it bubbly and popped at celebrations?"),
    "submarine": ("Is it a vehicle?", "Does it travel in water?", "Can it go underwater?"),
    "kangaroo": ("Is it an animal?", "Does it live in Australia?", "Does it hop and carry its young in a pouch?"),
}


def ladder_for(secret_word: str) -> Sequence[str]:
    """The word's own rungs, then the generic ones it does not already use."""
    own = WORD_LADDERS.get(normalize_secret(secret_word), ())
    return (*own, *(q for q in GENERIC_LADDER if q not in own))


def rung(ladder: Sequence[str], level: int) -> str:
    return ladder[min(max(level, 0), len(ladder) - 1)]


class HintAdvisor(Protocol):
    def suggest(self, history: Sequence[Message], prior_hints: Sequence[str], secret_word: str) -> str:
        ...


class LadderHintAdvisor:
    """Offline advisor reading from the ladders; never repeats a hint until all are used."""

    def suggest(self, history: Sequence[Message], prior_hints: Sequence[str], secret_word: str) -> str:
        ladder = ladder_for(secret_word)
        given = set(prior_hints)
        for question in ladder:
            if question not in given:
                return question
        return rung(ladder, len(prior_hints))


HINT_SYSTEM_PROMPT = """You are helping a player in a word guessing game. The secret word is "{secret_word}".

The player has asked for a hint. Your job is to suggest the single best yes/no question they should ask next.

Guidelines:
- DO NOT say the secret word or any part of it.
- The suggestion must be a yes/no question ending with '?', never a guess.
- Consider what they already know from their questions and answers; do not repeat them.
- Specificity level {level} of 5: level 1 narrows the broad category, higher levels point at distinguishing features.
Return json of the form {{"question_text": "..."}}."""


class LLMHintAdvisor(LLMBackedAgent):
    """Advisor backed by an LLM; the engine still screens its output."""

    def __init__(self, llm: StructuredLLM) -> None:
        super().__init__(name="hint", system_prompt=HINT_SYSTEM_PROMPT, llm=llm)
        self._schema = HINT_QUESTION

    def suggest(self, history: Sequence[Message], prior_hints: Sequence[str], secret_word: str) -> str:
        level = min(len(prior_hints) + 1, 5)
        previous = "\n".join(f"{i}. {h}" for i, h in enumerate(prior_hints, 1)) or "No previous hints given."
        user = (
            "Previous hints:\n"
            + previous
            + "\n\nConversation history:\n"
            + (format_history(history, labels=True) or "No questions asked yet.")
            + "\n\nSuggest the next question."
        )
        payload = self._call_llm(
            user,
            self._schema,
            system=self._system_prompt.format(secret_word=secret_word, level=level),
            max_output_tokens=80,
        )
        return " ".join(str(payload.get("question_text", "")).split())
