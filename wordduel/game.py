"""Client-facing game service.

Wires the store, the oracles and the turn engine together.  Everything handed
back to a client goes through :func:`public_view`, so the secret word stays
hidden until the game is over.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from wordduel.agents.hints import HintAdvisor, LadderHintAdvisor, LLMHintAdvisor
from wordduel.agents.judge import Judge, KeywordJudge, LLMJudge
from wordduel.agents.opponent import LLMOpponent, Opponent, ScriptedOpponent
from wordduel.config import ORACLE_MOCK, Settings
from wordduel.daily import WORD_LIST, today, word_for_date
from wordduel.engine.turn_engine import EventSink, TurnEngine
from wordduel.engine.types import AI_PLAYER_ID, ActionResult, GameMode, MessageType, public_view
from wordduel.errors import GameNotFoundError, ValidationError
from wordduel.llm.client import LLMClient
from wordduel.store.base import GameStore
from wordduel.store.memory import InMemoryGameStore

log = logging.getLogger("game_service")


@dataclass
class Oracles:
    judge: Judge
    opponent: Opponent
    hints: HintAdvisor


def build_oracles(settings: Settings) -> Oracles:
    """Pick the oracle implementations once, from settings."""

    if settings.oracle == ORACLE_MOCK:
        log.info("Using offline oracles")
        return Oracles(
            judge=KeywordJudge(),
            opponent=ScriptedOpponent(question_limit=settings.opponent_question_limit),
            hints=LadderHintAdvisor(),
        )

    def client(role: str) -> LLMClient:
        return LLMClient(
            model=settings.model_for(role),
            request_timeout_seconds=settings.request_timeout_seconds,
            max_retries=settings.max_retries,
        )

    log.info("Using LLM oracles (model %s)", settings.model)
    return Oracles(
        judge=LLMJudge(client("judge")),
        opponent=LLMOpponent(client("opponent"), question_limit=settings.opponent_question_limit),
        hints=LLMHintAdvisor(client("hint")),
    )


def _check_human(player_id: str) -> None:
    if player_id.strip().lower() == AI_PLAYER_ID:
        raise ValidationError(f"Player id '{AI_PLAYER_ID}' is reserved for the AI opponent")


class GameService:
    """Create, join, view and play games."""

    def __init__(
        self,
        engine: TurnEngine,
        settings: Settings | None = None,
        words: Sequence[str] = WORD_LIST,
    ) -> None:
        self.engine = engine
        self.store: GameStore = engine.store
        self.settings = settings or Settings()
        self.words = words

    def word_for_today(self, now: Optional[datetime] = None) -> tuple[str, str]:
        day = today(self.settings.timezone, now)
        return day.isoformat(), word_for_date(day, self.words, self.settings.epoch)

    def create_game(self, player_id: str, mode: GameMode | str, now: Optional[datetime] = None) -> Dict[str, Any]:
        if not isinstance(player_id, str) or not player_id.strip():
            raise ValidationError("Missing required fields")
        _check_human(player_id)
        try:
            game_mode = GameMode(mode)
        except ValueError as exc:
            raise ValidationError("Invalid game mode") from exc
        day, secret_word = self.word_for_today(now)
        game = self.store.create_game(player_id, game_mode, secret_word, day)
        return public_view(game)

    def join_game(self, code: str, player_id: str) -> Optional[Dict[str, Any]]:
        if not code or not player_id:
            raise ValidationError("Missing required fields")
        _check_human(player_id)
        game = self.store.join_game(code, player_id)
        return public_view(game) if game is not None else None

    def get_game_view(self, game_id: str) -> Dict[str, Any]:
        game = self.store.get_game(game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        return public_view(game)

    def submit_action(
        self,
        game_id: str,
        actor_id: str,
        action_type: MessageType | str,
        content: str = "",
        seen_turn_version: Optional[int] = None,
    ) -> ActionResult:
        return self.engine.submit_action(game_id, actor_id, action_type, content, seen_turn_version)


def build_service(
    settings: Settings,
    store: GameStore | None = None,
    events: EventSink | None = None,
    oracles: Oracles | None = None,
) -> GameService:
    oracles = oracles or build_oracles(settings)
    engine = TurnEngine(
        store=store or InMemoryGameStore(),
        judge=oracles.judge,
        opponent=oracles.opponent,
        hints=oracles.hints,
        events=events,
    )
    return GameService(engine, settings=settings)
