import pytest

from wordduel.agents.opponent import ScriptedOpponent
from wordduel.engine.turn_engine import GAME_COMPLETED, MESSAGE_APPENDED, MESSAGE_JUDGED, TURN_CHANGED
from wordduel.engine.types import AI_PLAYER_ID, GameMode, GameStatus, MessageType
from wordduel.errors import (
    GameNotActiveError,
    GameNotFoundError,
    NotYourTurnError,
    OracleError,
    StaleTurnError,
    ValidationError,
)


def _ai_game(store, word="guitar"):
    return store.create_game("alice", GameMode.AI, word, "2025-01-03")


def _friend_game(store, word="guitar"):
    game = store.create_game("alice", GameMode.FRIEND, word, "2025-01-03")
    store.join_game(game.code, "bob")
    return game


class FailingJudge:
    """Answers "no" until call number ``fail_on``, then raises."""

    def __init__(self, fail_on):
        self.fail_on = fail_on
        self.calls = 0

    def judge(self, question, secret_word):
        self.calls += 1
        if self.calls == self.fail_on:
            raise RuntimeError("judge timed out")
        return "no"


class FixedOpponent:
    def __init__(self, move):
        self.move = move
        self.histories = []

    def next_move(self, history):
        self.histories.append(list(history))
        return self.move


class FixedHints:
    def __init__(self, suggestion):
        self.suggestion = suggestion

    def suggest(self, history, prior_hints, secret_word):
        return self.suggestion


def test_ai_question_round_trip(store, make_engine):
    game = _ai_game(store)
    engine = make_engine()

    result = engine.submit_action(game.id, "alice", "question", "Is it alive?")

    assert result.author_message.response == "no"
    assert result.status is GameStatus.ACTIVE
    assert result.winner_id is None
    assert result.opponent_message is not None
    assert result.opponent_message.player_id == AI_PLAYER_ID
    assert result.opponent_message.response is not None

    stored = store.get_game(game.id)
    assert [m.player_id for m in stored.messages] == ["alice", AI_PLAYER_ID]
    assert stored.current_turn == "alice"
    assert stored.status is GameStatus.ACTIVE
    assert stored.pending_messages() == []


def test_ai_mode_correct_guess_skips_opponent(store, make_engine):
    game = _ai_game(store)
    engine = make_engine()
    engine.submit_action(game.id, "alice", "question", "Is it alive?")

    result = engine.submit_action(game.id, "alice", "guess", "guitar")

    assert result.status is GameStatus.COMPLETED
    assert result.winner_id == "alice"
    assert result.opponent_message is None
    assert result.secret_word == "guitar"
    stored = store.get_game(game.id)
    assert len(stored.messages) == 3
    assert stored.winner_id == "alice"
    assert stored.messages[-1].response == "Correct!"


def test_guess_ignores_case_and_trailing_punctuation(store, make_engine):
    game = _ai_game(store, word="pizza")
    result = make_engine().submit_action(game.id, "alice", "guess", "  Pizza?")
    assert result.author_message.response == "Correct!"
    assert result.status is GameStatus.COMPLETED


def test_plural_guess_is_incorrect_and_opponent_plays(store, make_engine):
    game = _ai_game(store, word="pizza")
    result = make_engine().submit_action(game.id, "alice", "guess", "pizzas")
    assert result.author_message.response == "Incorrect!"
    assert result.status is GameStatus.ACTIVE
    assert result.opponent_message is not None
    assert store.get_game(game.id).current_turn == "alice"


def test_ai_correct_guess_wins(store, make_engine):
    game = _ai_game(store, word="computer")
    engine = make_engine(opponent=ScriptedOpponent(question_limit=0))

    result = engine.submit_action(game.id, "alice", "question", "Is it food?")

    assert result.opponent_message.type is MessageType.GUESS
    assert result.opponent_message.content == "computer"
    assert result.opponent_message.response == "Correct!"
    assert result.status is GameStatus.COMPLETED
    assert result.winner_id == AI_PLAYER_ID
    stored = store.get_game(game.id)
    assert stored.status is GameStatus.COMPLETED
    assert stored.winner_id == AI_PLAYER_ID


def test_ai_wrong_guess_returns_turn(store, make_engine):
    game = _ai_game(store)
    engine = make_engine(opponent=ScriptedOpponent(question_limit=0))

    result = engine.submit_action(game.id, "alice", "question", "Is it food?")

    assert result.opponent_message.type is MessageType.GUESS
    assert result.opponent_message.response == "Incorrect!"
    assert result.status is GameStatus.ACTIVE
    assert store.get_game(game.id).current_turn == "alice"


def test_opponent_sees_full_history(store, make_engine):
    game = _ai_game(store)
    opponent = FixedOpponent("Is it big?")
    engine = make_engine(opponent=opponent)

    engine.submit_action(game.id, "alice", "question", "Is it alive?")
    engine.submit_action(game.id, "alice", "guess", "drum")

    last = opponent.histories[-1]
    assert [m.content for m in last] == ["Is it alive?", "Is it big?", "drum"]


def test_opponent_message_is_pending_while_judged(store, make_engine):
    game = _ai_game(store)
    snapshots = []

    class PeekingJudge:
        def judge(self, question, secret_word):
            if question == "Is it a living thing?":
                snapshots.append(store.get_game(game.id))
            return "no"

    make_engine(judge=PeekingJudge()).submit_action(game.id, "alice", "question", "Is it alive?")

    (during,) = snapshots
    pending = during.pending_messages()
    assert len(pending) == 1
    assert pending[0].player_id == AI_PLAYER_ID
    assert store.get_game(game.id).pending_messages() == []


def test_events_follow_two_phase_write(store, make_engine, recording_events):
    game = _ai_game(store)
    make_engine(events=recording_events).submit_action(game.id, "alice", "question", "Is it alive?")

    assert recording_events.seen == [
        (MESSAGE_APPENDED, "Is it alive?", "no", None),
        (MESSAGE_APPENDED, "Is it a living thing?", None, None),
        (MESSAGE_JUDGED, "Is it a living thing?", "no", None),
        (TURN_CHANGED, None, None, "alice"),
    ]


def test_completion_event(store, make_engine, recording_events):
    game = _ai_game(store)
    make_engine(events=recording_events).submit_action(game.id, "alice", "guess", "guitar")
    assert recording_events.seen[-1] == (GAME_COMPLETED, None, None, "alice")


def test_friend_mode_flips_turn(store, make_engine):
    game = _friend_game(store)
    engine = make_engine()

    first = engine.submit_action(game.id, "alice", "question", "Is it an animal?")
    assert first.opponent_message is None
    assert store.get_game(game.id).current_turn == "bob"

    engine.submit_action(game.id, "bob", "guess", "violin")
    assert store.get_game(game.id).current_turn == "alice"


def test_friend_mode_hint_costs_turn(store, make_engine):
    game = _friend_game(store)
    engine = make_engine()

    result = engine.submit_action(game.id, "alice", "hint")

    assert result.author_message.type is MessageType.HINT
    assert result.author_message.content == "Is it used to make music?"
    assert result.author_message.response == "yes"
    stored = store.get_game(game.id)
    assert stored.current_turn == "bob"
    assert stored.hints_used == 1


def test_friend_mode_before_join_keeps_turn(store, make_engine):
    game = store.create_game("alice", GameMode.FRIEND, "guitar", "2025-01-03")
    make_engine().submit_action(game.id, "alice", "question", "Is it an animal?")
    assert store.get_game(game.id).current_turn == "alice"


def test_hints_climb_the_ladder(store, make_engine):
    game = _ai_game(store)
    engine = make_engine()

    first = engine.submit_action(game.id, "alice", "hint", "help")
    second = engine.submit_action(game.id, "alice", "hint", "")

    assert first.author_message.content == "Is it used to make music?"
    assert second.author_message.content == "Does it have strings?"
    assert second.author_message.response is not None
    assert store.get_game(game.id).hints_used == 2


def test_hint_never_leaks_secret(store, make_engine):
    game = _ai_game(store)
    engine = make_engine(hints=FixedHints("Is it a guitar?"))

    result = engine.submit_action(game.id, "alice", "hint")

    assert "guitar" not in result.author_message.content.lower()
    assert result.author_message.content == "Is it a living thing?"
    assert result.author_message.response == "no"


def test_hint_that_is_not_a_question_is_replaced(store, make_engine):
    game = _ai_game(store)
    result = make_engine(hints=FixedHints("It has six strings.")).submit_action(game.id, "alice", "hint")
    assert result.author_message.content.endswith("?")


def test_judge_output_is_coerced(store, make_engine):
    class ChattyJudge:
        def judge(self, question, secret_word):
            return "Well, it depends on the day"

    game = _friend_game(store)
    result = make_engine(judge=ChattyJudge()).submit_action(game.id, "alice", "question", "Is it loud?")
    assert result.author_message.response == "irrelevant"


def test_unknown_game(make_engine):
    with pytest.raises(GameNotFoundError):
        make_engine().submit_action("nope", "alice", "question", "Is it red?")


def test_not_your_turn(store, make_engine):
    game = _friend_game(store)
    with pytest.raises(NotYourTurnError):
        make_engine().submit_action(game.id, "bob", "question", "Is it red?")
    assert store.get_game(game.id).messages == []


def test_completed_game_rejects_actions(store, make_engine):
    game = _ai_game(store)
    engine = make_engine()
    engine.submit_action(game.id, "alice", "guess", "guitar")

    with pytest.raises(GameNotActiveError):
        engine.submit_action(game.id, "alice", "question", "Is it red?")
    assert len(store.get_game(game.id).messages) == 1


@pytest.mark.parametrize(
    "action_type, content",
    [("shout", "hello"), ("question", ""), ("guess", "   "), ("question", "x" * 501)],
)
def test_invalid_actions(store, make_engine, action_type, content):
    game = _ai_game(store)
    with pytest.raises(ValidationError):
        make_engine().submit_action(game.id, "alice", action_type, content)
    assert store.get_game(game.id).messages == []


def test_missing_actor_is_invalid(store, make_engine):
    game = _ai_game(store)
    with pytest.raises(ValidationError):
        make_engine().submit_action(game.id, "", "question", "Is it red?")


def test_stale_turn_version_rejected(store, make_engine):
    game = _ai_game(store)
    with pytest.raises(StaleTurnError):
        make_engine().submit_action(game.id, "alice", "question", "Is it red?", seen_turn_version=7)


def test_matching_turn_version_accepted(store, make_engine):
    game = _ai_game(store)
    engine = make_engine()
    engine.submit_action(game.id, "alice", "question", "Is it red?", seen_turn_version=0)
    version = store.get_game(game.id).turn_version
    engine.submit_action(game.id, "alice", "question", "Is it big?", seen_turn_version=version)


def test_opponent_reply_dropped_when_turn_moved_meanwhile(store, make_engine):
    game = _ai_game(store)

    class RacingOpponent:
        def next_move(self, history):
            # Another request for the same game writes first.
            store.set_turn(game.id, "alice")
            return "Is it big?"

    with pytest.raises(StaleTurnError):
        make_engine(opponent=RacingOpponent()).submit_action(game.id, "alice", "question", "Is it red?")
    stored = store.get_game(game.id)
    assert [m.content for m in stored.messages] == ["Is it red?"]
    assert stored.current_turn == "alice"


def test_double_submit_is_recorded_once(store, make_engine):
    game = _friend_game(store)
    engines = []

    class ReentrantJudge:
        """Lets a second submission for the same turn finish while the first is being judged."""

        def __init__(self):
            self.nested = False

        def judge(self, question, secret_word):
            if not self.nested:
                self.nested = True
                engines[0].submit_action(game.id, "alice", "question", "Is it big?")
            return "no"

    engines.append(make_engine(judge=ReentrantJudge()))

    with pytest.raises(StaleTurnError):
        engines[0].submit_action(game.id, "alice", "question", "Is it red?")

    stored = store.get_game(game.id)
    assert [(m.player_id, m.content) for m in stored.messages] == [("alice", "Is it big?")]
    assert stored.current_turn == "bob"


def test_duplicate_winning_guess_completes_once(store, make_engine):
    game = _ai_game(store)
    engines = []

    class ReentrantOpponent:
        def next_move(self, history):
            return "Is it big?"

    class GuessingJudge:
        def __init__(self):
            self.nested = False

        def judge(self, question, secret_word):
            if not self.nested:
                self.nested = True
                engines[0].submit_action(game.id, "alice", "guess", "guitar")
            return "no"

    engines.append(make_engine(judge=GuessingJudge(), opponent=ReentrantOpponent()))

    with pytest.raises(GameNotActiveError):
        engines[0].submit_action(game.id, "alice", "question", "Is it red?")

    stored = store.get_game(game.id)
    assert [m.content for m in stored.messages] == ["guitar"]
    assert stored.winner_id == "alice"


def test_turn_version_advances_with_every_write(store, make_engine):
    game = _ai_game(store)
    make_engine().submit_action(game.id, "alice", "question", "Is it red?")
    # human message, opponent message, turn handed back
    assert store.get_game(game.id).turn_version == 3


def test_judge_failure_before_append_leaves_game_untouched(store, make_engine):
    game = _ai_game(store)
    with pytest.raises(OracleError) as info:
        make_engine(judge=FailingJudge(fail_on=1)).submit_action(game.id, "alice", "question", "Is it red?")
    assert info.value.oracle == "judge"
    stored = store.get_game(game.id)
    assert stored.messages == []
    assert stored.current_turn == "alice"


def test_judge_failure_on_opponent_question_keeps_messages(store, make_engine):
    game = _ai_game(store)
    with pytest.raises(OracleError):
        make_engine(judge=FailingJudge(fail_on=2)).submit_action(game.id, "alice", "question", "Is it red?")

    stored = store.get_game(game.id)
    assert len(stored.messages) == 2
    assert stored.messages[0].response == "no"
    assert stored.messages[1].pending
    assert stored.current_turn == "alice"
    assert stored.status is GameStatus.ACTIVE


def test_opponent_failure_is_oracle_error(store, make_engine):
    class BrokenOpponent:
        def next_move(self, history):
            raise ConnectionError("model unavailable")

    game = _ai_game(store)
    with pytest.raises(OracleError) as info:
        make_engine(opponent=BrokenOpponent()).submit_action(game.id, "alice", "guess", "drum")
    assert info.value.oracle == "opponent"
    assert len(store.get_game(game.id).messages) == 1


def test_empty_opponent_move_is_oracle_error(store, make_engine):
    game = _ai_game(store)
    with pytest.raises(OracleError):
        make_engine(opponent=FixedOpponent("   ")).submit_action(game.id, "alice", "guess", "drum")


def test_hint_advisor_failure_is_oracle_error(store, make_engine):
    class BrokenHints:
        def suggest(self, history, prior_hints, secret_word):
            raise TimeoutError()

    game = _ai_game(store)
    with pytest.raises(OracleError) as info:
        make_engine(hints=BrokenHints()).submit_action(game.id, "alice", "hint")
    assert info.value.oracle == "hint advisor"
    stored = store.get_game(game.id)
    assert stored.messages == []
    assert stored.hints_used == 0


def test_status_completes_once(store, make_engine):
    game = _ai_game(store, word="computer")
    engine = make_engine(opponent=ScriptedOpponent(question_limit=0))
    engine.submit_action(game.id, "alice", "question", "Is it food?")

    stored = store.get_game(game.id)
    assert stored.status is GameStatus.COMPLETED
    assert stored.winner_id == AI_PLAYER_ID
    with pytest.raises(GameNotActiveError):
        engine.submit_action(game.id, "alice", "guess", "computer")
    assert store.get_game(game.id).winner_id == AI_PLAYER_ID


def test_hints_keep_changing_past_the_word_ladder(store, make_engine):
    game = _ai_game(store)
    engine = make_engine()

    hints = [engine.submit_action(game.id, "alice", "hint").author_message.content for _ in range(5)]

    assert len(set(hints)) == 5
    assert hints[3] == "Is it a living thing?"
    assert not any("guitar" in h.lower() for h in hints)
    assert store.get_game(game.id).hints_used == 5
