import json

from wordduel.agents.hints import (
    GENERIC_LADDER,
    WORD_LADDERS,
    LadderHintAdvisor,
    LLMHintAdvisor,
    ladder_for,
)
from wordduel.daily import WORD_LIST
from wordduel.engine.types import Message, MessageType
from wordduel.engine.validator import contains_word
from wordduel.llm.stub import SequentialStubClient


def test_every_daily_word_has_a_ladder():
    assert set(WORD_LIST) <= set(WORD_LADDERS)


def test_ladders_never_name_their_word():
    for word, ladder in WORD_LADDERS.items():
        for question in ladder:
            assert question.endswith("?")
            assert not contains_word(question, word), (word, question)


def test_ladder_puts_word_rungs_before_generic_ones():
    assert ladder_for("quokka") == tuple(GENERIC_LADDER)
    ladder = ladder_for(" Guitar ")
    assert ladder[:3] == tuple(WORD_LADDERS["guitar"])
    assert ladder[3:] == tuple(GENERIC_LADDER)


def test_ladder_advisor_never_repeats_until_exhausted():
    advisor = LadderHintAdvisor()
    given = []
    for _ in range(len(ladder_for("pizza"))):
        given.append(advisor.suggest([], given, "pizza"))
    assert given == list(ladder_for("pizza"))
    assert given[3] == GENERIC_LADDER[0]

    # once every rung is used the last one is repeated
    assert advisor.suggest([], given, "pizza") == given[-1]


def test_ladder_advisor_skips_rungs_already_given():
    advisor = LadderHintAdvisor()
    first = WORD_LADDERS["guitar"][0]
    assert advisor.suggest([], [GENERIC_LADDER[0], first], "guitar") == WORD_LADDERS["guitar"][1]


def test_llm_hint_prompt_carries_level_and_history():
    stub = SequentialStubClient([json.dumps({"question_text": "Does it  have strings?"})])
    history = [
        Message(
            id="m1",
            type=MessageType.HINT,
            content="Is it used to make music?",
            player_id="alice",
            timestamp=1,
            response="yes",
        )
    ]
    suggestion = LLMHintAdvisor(stub).suggest(history, ["Is it used to make music?"], "guitar")

    assert suggestion == "Does it have strings?"
    system, user = stub.prompts[0]
    assert '"guitar"' in system["content"]
    assert "Specificity level 2 of 5" in system["content"]
    assert "1. Is it used to make music?" in user["content"]
    assert "Hint: Is it used to make music? → Response: yes" in user["content"]
