"""Exceptions raised by the game core.

Every rejection carries a human-readable message that a client can show
as-is.
"""
from __future__ import annotations


class WordDuelError(Exception):
    """Base class for all game errors."""


class ValidationError(WordDuelError):
    """A submitted action is malformed (missing fields, unknown type)."""


class StateError(WordDuelError):
    """The action is well-formed but not allowed in the game's current state."""


class GameNotFoundError(StateError):
    def __init__(self, game_id: str):
        super().__init__("Game not found")
        self.game_id = game_id


class GameNotActiveError(StateError):
    def __init__(self, game_id: str):
        super().__init__("Game is not active")
        self.game_id = game_id


class NotYourTurnError(StateError):
    def __init__(self, game_id: str, actor_id: str):
        super().__init__("Not your turn")
        self.game_id = game_id
        self.actor_id = actor_id


class StaleTurnError(StateError):
    """The turn pointer moved since the actor last observed the game."""

    def __init__(self, game_id: str, expected: int, actual: int):
        super().__init__("Game changed since you last saw it; refresh and try again")
        self.game_id = game_id
        self.expected = expected
        self.actual = actual


class OracleError(WordDuelError):
    """The judge, opponent or hint advisor failed.

    Messages appended before the failure stay in the game.
    """

    def __init__(self, oracle: str, message: str):
        super().__init__(f"{oracle} failed: {message}")
        self.oracle = oracle


class StoreError(WordDuelError):
    pass


__all__ = [
    "GameNotActiveError",
    "GameNotFoundError",
    "NotYourTurnError",
    "OracleError",
    "StaleTurnError",
    "StateError",
    "StoreError",
    "ValidationError",
    "WordDuelError",
]
