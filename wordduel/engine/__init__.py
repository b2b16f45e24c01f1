"""Game data model and turn engine."""
from wordduel.engine.types import (
    AI_PLAYER_ID,
    ActionResult,
    Game,
    GameMode,
    GameStatus,
    Message,
    MessageType,
    public_view,
)

__all__ = [
    "AI_PLAYER_ID",
    "ActionResult",
    "Game",
    "GameMode",
    "GameStatus",
    "Message",
    "MessageType",
    "public_view",
]
