from __future__ import annotations

from typing import Optional, Protocol

from wordduel.engine.types import Game, GameMode, Message


class GameStore(Protocol):
    """Persistence contract used by the turn engine.

    Reads return copies; callers mutate state only through these methods.
    """

    def create_game(self, owner_id: str, mode: GameMode, secret_word: str, game_date: str) -> Game:
        ...

    def join_game(self, code: str, player_id: str) -> Optional[Game]:
        ...

    def get_game(self, game_id: str) -> Optional[Game]:
        ...

    def append_message(self, game_id: str, message: Message, expected_version: Optional[int] = None) -> int:
        """Append and bump ``turn_version``; with ``expected_version``, only if it still matches."""
        ...

    def patch_message_response(self, message_id: str, response: str) -> None:
        ...

    def set_completed(self, game_id: str, winner_id: str) -> None:
        ...

    def set_turn(self, game_id: str, player_id: str, expected_version: Optional[int] = None) -> int:
        ...

    def increment_hints(self, game_id: str) -> int:
        ...
