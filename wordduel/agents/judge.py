"""Judge that answers yes/no questions about the secret word."""
from __future__ import annotations

import logging
import re
from typing import Dict, FrozenSet, Protocol, Sequence, Tuple

from wordduel.agents.base import LLMBackedAgent
from wordduel.engine.validator import mentions_word, normalize_secret
from wordduel.llm.client import LLMClientError, StructuredLLM
from wordduel.llm.schema import JUDGE_ANSWER

log = logging.getLogger("judge")

JUDGE_LABELS: Tuple[str, ...] = (
    "yes",
    "no",
    "sometimes",
    "unknown",
    "probably",
    "probably not",
    "depends",
    "irrelevant",
)
FALLBACK_LABEL = "irrelevant"


def normalize_label(raw: str) -> str:
    """Lowercase and trim ``raw``; anything outside the vocabulary becomes the fallback."""
    label = " ".join(str(raw).lower().strip().strip(".!\"'").split())
    if label in JUDGE_LABELS:
        return label
    log.info("Coercing out-of-vocabulary judge output %r to %r", raw, FALLBACK_LABEL)
    return FALLBACK_LABEL


class Judge(Protocol):
    def judge(self, question: str, secret_word: str) -> str:
        ...


# Keyword groups checked in order; the first group found in the question decides
# which tag is looked up.
KEYWORD_RULES: Sequence[Tuple[Tuple[str, ...], str]] = (
    (("alive", "living"), "living"),
    (("made by", "man-made", "manmade", "human-made", "manufactured", "invented"), "made"),
    (("mammal",), "mammal"),
    (("animal", "creature"), "animal"),
    (("food", "eat", "edible", "drink"), "food"),
    (("electronic", "electric", "battery", "plug"), "electronic"),
    (("music", "instrument", "song", "sound"), "music"),
    (("fly", "flying", "wings"), "fly"),
    (("water", "swim", "ocean", "sea"), "water"),
    (("weather", "storm", "rain", "sky"), "weather"),
    (("space", "planet", "stars"), "space"),
    (("sweet", "sugar", "dessert"), "sweet"),
    (("transport", "vehicle", "travel", "ride"), "vehicle"),
    (("legs",), "legs"),
    (("move on its own",), "moves"),
    (("big", "large", "huge"), "big"),
    (("small", "tiny", "little"), "small"),
    (("hold", "carry", "pick up"), "hold"),
    (("nature", "natural", "outdoors"), "nature"),
    (("person", "human", "people", "job"), "person"),
    (("object", "thing"), "object"),
)

WORD_TAGS: Dict[str, FrozenSet[str]] = {
    "elephant": frozenset({"living", "animal", "mammal", "legs", "moves", "big", "nature"}),
    "computer": frozenset({"made", "electronic", "object"}),
    "guitar": frozenset({"made", "music", "hold", "object"}),
    "rainbow": frozenset({"weather", "big", "nature"}),
    "pizza": frozenset({"made", "food", "hold"}),
    "astronaut": frozenset({"living", "person", "legs", "moves", "space"}),
    "mountain": frozenset({"big", "nature"}),
    "butterfly": frozenset({"living", "animal", "fly", "legs", "moves", "small", "nature"}),
    "telephone": frozenset({"made", "electronic", "hold", "object"}),
    "umbrella": frozenset({"made", "weather", "hold", "object"}),
    "chocolate": frozenset({"made", "food", "sweet", "small", "hold"}),
    "dinosaur": frozenset({"animal", "legs", "big", "nature"}),
    "symphony": frozenset({"made", "music"}),
    "volcano": frozenset({"big", "nature"}),
    "penguin": frozenset({"living", "animal", "water", "legs", "moves", "nature"}),
    "telescope": frozenset({"made", "space", "big", "object"}),
    "hurricane": frozenset({"weather", "water", "moves", "big", "nature"}),
    "champagne": frozenset({"made", "food"}),
    "submarine": frozenset({"made", "vehicle", "water", "big", "object"}),
    "kangaroo": frozenset({"living", "animal", "mammal", "legs", "moves", "nature"}),
    "mystery": frozenset(),
}


class KeywordJudge:
    """Offline judge answering from a small tag table.

    Answers "yes" when the question names the secret word, "yes"/"no" when a
    keyword rule matches, and "unknown" otherwise.  Words outside the table
    always get "unknown".
    """

    def __init__(self, word_tags: Dict[str, FrozenSet[str]] | None = None) -> None:
        self._word_tags = word_tags if word_tags is not None else WORD_TAGS

    def judge(self, question: str, secret_word: str) -> str:
        if mentions_word(question, secret_word):
            return "yes"
        tags = self._word_tags.get(normalize_secret(secret_word))
        if tags is None:
            return "unknown"
        text = question.lower()
        for keywords, tag in KEYWORD_RULES:
            if any(re.search(rf"\b{re.escape(k)}", text) for k in keywords):
                return normalize_label("yes" if tag in tags else "no")
        return "unknown"


JUDGE_SYSTEM_PROMPT = """You are the judge/question answerer in a word guessing game (similar to the old game 21 questions). The secret word is "{secret_word}".

A player will ask you a yes/no question to try to figure out the secret word. You must respond with ONLY one of these eight options:
- "Yes"
- "No"
- "Unknown"
- "Sometimes"
- "Probably"
- "Probably Not"
- "Irrelevant"
- "Depends"

Since you only have 8 options you won't be able to give detailed explanations or explain yourself, so you should choose what fits best.
Return json of the form {{"answer": "<one option>"}}."""


class LLMJudge(LLMBackedAgent):
    """Judge backed by an LLM; output is forced into the fixed vocabulary.

    A reply that arrives but is not the expected JSON is read as a bare label,
    so only a transport failure can make the judge fail.
    """

    def __init__(self, llm: StructuredLLM) -> None:
        super().__init__(name="judge", system_prompt=JUDGE_SYSTEM_PROMPT, llm=llm)
        self._schema = JUDGE_ANSWER

    def judge(self, question: str, secret_word: str) -> str:
        try:
            payload = self._call_llm(
                user=question.strip(),
                schema=self._schema,
                system=self._system_prompt.format(secret_word=secret_word),
                max_output_tokens=16,
                max_repairs=1,
            )
        except LLMClientError as exc:
            if exc.raw_text is None:
                raise
            log.info("Judge reply %r is not the expected json; reading it as a label", exc.raw_text)
            return normalize_label(exc.raw_text)
        return normalize_label(str(payload.get("answer", "")))
