"""In-memory game store."""
from __future__ import annotations

import copy
import logging
import random
import string
import threading
from dataclasses import replace
from typing import Dict, Optional

from wordduel.engine.types import AI_PLAYER_ID, Game, GameMode, GameStatus, Message, new_id
from wordduel.errors import GameNotActiveError, GameNotFoundError, StaleTurnError, StoreError

log = logging.getLogger("game_store")

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6
CODE_ATTEMPTS = 10


def generate_code(rng: random.Random | None = None) -> str:
    rng = rng or random.SystemRandom()
    return "".join(rng.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


class InMemoryGameStore:
    """Dictionary-backed store guarded by a single lock.

    Every write happens under the lock and reads hand out deep copies, which
    gives per-game last-writer-wins.  Appending a message and moving the turn
    bump ``turn_version``; both accept an expected version and refuse the
    write if another action got there first.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._lock = threading.RLock()
        self._games: Dict[str, Game] = {}
        self._codes: Dict[str, str] = {}
        # message id -> game id
        self._message_index: Dict[str, str] = {}
        self._rng = rng

    def _require(self, game_id: str) -> Game:
        game = self._games.get(game_id)
        if game is None:
            raise GameNotFoundError(game_id)
        return game

    def _unique_code(self) -> str:
        for _ in range(CODE_ATTEMPTS):
            code = generate_code(self._rng)
            if code not in self._codes:
                return code
            log.warning("Join code collision on %s; retrying", code)
        raise StoreError(f"Could not allocate a unique join code after {CODE_ATTEMPTS} attempts")

    def create_game(self, owner_id: str, mode: GameMode, secret_word: str, game_date: str) -> Game:
        with self._lock:
            game_id = new_id()
            code = self._unique_code() if mode is GameMode.FRIEND else None
            game = Game(
                id=game_id,
                secret_word=secret_word,
                date=game_date,
                mode=mode,
                player1_id=owner_id,
                player2_id=AI_PLAYER_ID if mode is GameMode.AI else None,
                current_turn=owner_id,
                code=code,
            )
            self._games[game_id] = game
            if code is not None:
                self._codes[code] = game_id
            log.info("Created %s game %s", mode.value, game_id)
            return copy.deepcopy(game)

    def join_game(self, code: str, player_id: str) -> Optional[Game]:
        with self._lock:
            game_id = self._codes.get(code.strip().upper())
            game = self._games.get(game_id) if game_id else None
            if game is None or not game.is_active:
                return None
            if game.has_player(player_id):
                return copy.deepcopy(game)
            if game.player2_id is not None:
                return None
            game.player2_id = player_id
            log.info("Player %s joined game %s", player_id, game.id)
            return copy.deepcopy(game)

    def get_game(self, game_id: str) -> Optional[Game]:
        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return None
            snapshot = copy.deepcopy(game)
        snapshot.messages.sort(key=lambda m: m.timestamp)
        return snapshot

    def append_message(self, game_id: str, message: Message, expected_version: Optional[int] = None) -> int:
        with self._lock:
            game = self._require(game_id)
            if not game.is_active:
                raise GameNotActiveError(game_id)
            if expected_version is not None and game.turn_version != expected_version:
                raise StaleTurnError(game_id, expected_version, game.turn_version)
            if message.id in self._message_index:
                raise StoreError(f"Duplicate message id {message.id}")
            if game.messages and message.timestamp < game.messages[-1].timestamp:
                # Keep the list ordered even if the caller's clock went backwards.
                message = replace(message, timestamp=game.messages[-1].timestamp)
            game.messages.append(copy.deepcopy(message))
            self._message_index[message.id] = game_id
            game.turn_version += 1
            return game.turn_version

    def patch_message_response(self, message_id: str, response: str) -> None:
        with self._lock:
            game_id = self._message_index.get(message_id)
            if game_id is None:
                raise StoreError(f"Unknown message id {message_id}")
            for stored in self._games[game_id].messages:
                if stored.id == message_id:
                    if stored.response is not None:
                        raise StoreError(f"Message {message_id} is already judged")
                    stored.response = response
                    return

    def set_completed(self, game_id: str, winner_id: str) -> None:
        with self._lock:
            game = self._require(game_id)
            if not game.is_active:
                raise GameNotActiveError(game_id)
            game.status = GameStatus.COMPLETED
            game.winner_id = winner_id
            game.turn_version += 1
            log.info("Game %s completed, winner %s", game_id, winner_id)

    def set_turn(self, game_id: str, player_id: str, expected_version: Optional[int] = None) -> int:
        with self._lock:
            game = self._require(game_id)
            if not game.is_active:
                raise GameNotActiveError(game_id)
            if not game.has_player(player_id):
                raise StoreError(f"{player_id} is not a participant of game {game_id}")
            if expected_version is not None and game.turn_version != expected_version:
                raise StaleTurnError(game_id, expected_version, game.turn_version)
            game.current_turn = player_id
            game.turn_version += 1
            return game.turn_version

    def increment_hints(self, game_id: str) -> int:
        with self._lock:
            game = self._require(game_id)
            game.hints_used += 1
            return game.hints_used
