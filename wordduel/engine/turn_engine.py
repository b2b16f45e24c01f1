from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from wordduel.agents.hints import GENERIC_LADDER, HintAdvisor
from wordduel.agents.judge import Judge, normalize_label
from wordduel.agents.opponent import Opponent, is_guess
from wordduel.errors import (
    GameNotActiveError,
    GameNotFoundError,
    NotYourTurnError,
    OracleError,
    StaleTurnError,
    WordDuelError,
)
from wordduel.store.base import GameStore

from .types import (
    AI_PLAYER_ID,
    CORRECT,
    INCORRECT,
    ActionResult,
    Game,
    GameMode,
    GameStatus,
    Message,
    MessageType,
    new_id,
    now_ms,
)
from .validator import contains_word, is_correct_guess, validate_action

log = logging.getLogger("turn_engine")

MESSAGE_APPENDED = "message_appended"
MESSAGE_JUDGED = "message_judged"
TURN_CHANGED = "turn_changed"
GAME_COMPLETED = "game_completed"


@dataclass
class GameEvent:
    kind: str
    game_id: str
    message: Optional[Message] = None
    player_id: Optional[str] = None


class EventSink(Protocol):
    """Receives state changes as they happen; polling clients can ignore it."""

    def publish(self, event: GameEvent) -> None:
        ...


class NullEventSink:
    def publish(self, event: GameEvent) -> None:
        return None


class TurnEngine:
    """Validates and resolves one player action, including the AI's reply turn.

    The whole action, opponent round trip included, runs in the caller's
    thread.  Nothing is rolled back on failure: a message appended before an
    oracle error stays in the game.
    """

    def __init__(
        self,
        store: GameStore,
        judge: Judge,
        opponent: Opponent,
        hints: HintAdvisor,
        events: EventSink | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.judge = judge
        self.opponent = opponent
        self.hints = hints
        self.events = events or NullEventSink()
        self._clock = clock

    def submit_action(
        self,
        game_id: str,
        actor_id: str,
        action_type: MessageType | str,
        content: str = "",
        seen_turn_version: Optional[int] = None,
    ) -> ActionResult:
        kind_value = action_type.value if isinstance(action_type, MessageType) else action_type
        validate_action(
            {"game_id": game_id, "actor_id": actor_id, "type": kind_value, "content": content}
        )
        kind = MessageType(kind_value)
        game = self._load(game_id, actor_id, seen_turn_version)
        log.info("Game %s: %s submits %s", game.id, actor_id, kind.value)

        content = content.strip()
        if kind is MessageType.GUESS:
            response = CORRECT if is_correct_guess(content, game.secret_word) else INCORRECT
        elif kind is MessageType.QUESTION:
            response = self._judge(content, game.secret_word)
        else:
            content, response = self._hint(game, actor_id)

        message = Message(
            id=new_id(),
            type=kind,
            content=content,
            player_id=actor_id,
            timestamp=self._clock(),
            response=response,
        )
        # A duplicate submission that loaded the same version fails here, before it writes.
        version = self._append(game.id, message, game.turn_version)
        if kind is MessageType.HINT:
            self.store.increment_hints(game.id)

        if response == CORRECT:
            self._complete(game, actor_id)
            return ActionResult(
                author_message=message,
                status=GameStatus.COMPLETED,
                winner_id=actor_id,
                secret_word=game.secret_word,
            )

        if game.mode is GameMode.FRIEND:
            next_player = game.other_player(actor_id) or actor_id
            self._set_turn(game.id, next_player, version)
            return ActionResult(author_message=message, status=GameStatus.ACTIVE)

        return self._opponent_turn(game, actor_id, message, version)

    def _load(self, game_id: str, actor_id: str, seen_turn_version: Optional[int]) -> Game:
        game = self.store.get_game(game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        if not game.is_active:
            raise GameNotActiveError(game_id)
        if game.current_turn != actor_id:
            raise NotYourTurnError(game_id, actor_id)
        if seen_turn_version is not None and seen_turn_version != game.turn_version:
            raise StaleTurnError(game_id, seen_turn_version, game.turn_version)
        return game

    def _opponent_turn(self, game: Game, actor_id: str, author_message: Message, version: int) -> ActionResult:
        history = [*game.messages, author_message]
        move = " ".join(str(self._call("opponent", self.opponent.next_move, history)).split())
        if not move:
            raise OracleError("opponent", "returned an empty move")

        kind = MessageType.GUESS if is_guess(move) else MessageType.QUESTION
        ai_message = Message(
            id=new_id(),
            type=kind,
            content=move,
            player_id=AI_PLAYER_ID,
            timestamp=self._clock(),
        )
        # Appended unjudged first so a poll in between sees the pending question.
        version = self._append(game.id, ai_message, version)

        if kind is MessageType.GUESS:
            won = is_correct_guess(move, game.secret_word)
            self._patch(game.id, ai_message, CORRECT if won else INCORRECT)
            if won:
                self._complete(game, AI_PLAYER_ID)
                return ActionResult(
                    author_message=author_message,
                    opponent_message=ai_message,
                    status=GameStatus.COMPLETED,
                    winner_id=AI_PLAYER_ID,
                    secret_word=game.secret_word,
                )
        else:
            self._patch(game.id, ai_message, self._judge(move, game.secret_word))

        self._set_turn(game.id, actor_id, version)
        return ActionResult(
            author_message=author_message,
            opponent_message=ai_message,
            status=GameStatus.ACTIVE,
        )

    def _hint(self, game: Game, actor_id: str) -> tuple[str, str]:
        history = game.messages_by(actor_id)
        prior = [m.content for m in history if m.type is MessageType.HINT]
        suggestion = self._call("hint advisor", self.hints.suggest, history, prior, game.secret_word)
        question = self._screen_hint(str(suggestion), game.secret_word, len(prior))
        return question, self._judge(question, game.secret_word)

    def _screen_hint(self, suggestion: str, secret_word: str, level: int) -> str:
        text = " ".join(suggestion.split())
        if text and "?" in text and not contains_word(text, secret_word):
            return text
        log.warning("Discarding hint suggestion %r; using the generic ladder", text)
        start = min(level, len(GENERIC_LADDER) - 1)
        for candidate in [*GENERIC_LADDER[start:], *GENERIC_LADDER[:start]]:
            if not contains_word(candidate, secret_word):
                return candidate
        raise OracleError("hint advisor", "no suggestion avoids the secret word")

    def _judge(self, question: str, secret_word: str) -> str:
        return normalize_label(self._call("judge", self.judge.judge, question, secret_word))

    def _call(self, oracle: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except WordDuelError:
            raise
        except Exception as exc:
            log.exception("%s call failed", oracle)
            raise OracleError(oracle, str(exc) or exc.__class__.__name__) from exc

    def _append(self, game_id: str, message: Message, expected_version: int) -> int:
        version = self.store.append_message(game_id, message, expected_version=expected_version)
        self.events.publish(GameEvent(MESSAGE_APPENDED, game_id, message=message))
        return version

    def _patch(self, game_id: str, message: Message, response: str) -> None:
        self.store.patch_message_response(message.id, response)
        message.response = response
        self.events.publish(GameEvent(MESSAGE_JUDGED, game_id, message=message))

    def _set_turn(self, game_id: str, player_id: str, expected_version: int) -> None:
        self.store.set_turn(game_id, player_id, expected_version=expected_version)
        self.events.publish(GameEvent(TURN_CHANGED, game_id, player_id=player_id))

    def _complete(self, game: Game, winner_id: str) -> None:
        self.store.set_completed(game.id, winner_id)
        log.info("Game %s won by %s", game.id, winner_id)
        self.events.publish(GameEvent(GAME_COMPLETED, game.id, player_id=winner_id))
