from __future__ import annotations

import random
import string
import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

AI_PLAYER_ID = "ai"

CORRECT = "Correct!"
INCORRECT = "Incorrect!"


class GameMode(str, Enum):
    AI = "ai"
    FRIEND = "friend"


class GameStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class MessageType(str, Enum):
    QUESTION = "question"
    GUESS = "guess"
    HINT = "hint"


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id() -> str:
    """Timestamp prefix plus random suffix, so ids sort roughly by creation."""
    alphabet = string.ascii_lowercase + string.digits
    suffix = "".join(random.choices(alphabet, k=16))
    return f"{now_ms():x}{suffix}"


@dataclass
class Message:
    """One chat entry: a question, a guess or a judged hint question.

    ``response`` is ``None`` only for an opponent message that has been
    appended but not yet judged.
    """

    id: str
    type: MessageType
    content: str
    player_id: str
    timestamp: int
    response: Optional[str] = None

    @property
    def pending(self) -> bool:
        return self.response is None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


@dataclass
class Game:
    id: str
    secret_word: str
    date: str
    mode: GameMode
    player1_id: str
    current_turn: str
    status: GameStatus = GameStatus.ACTIVE
    code: Optional[str] = None
    player2_id: Optional[str] = None
    winner_id: Optional[str] = None
    messages: List[Message] = field(default_factory=list)
    hints_used: int = 0
    created_at: int = field(default_factory=now_ms)
    turn_version: int = 0

    @property
    def is_active(self) -> bool:
        return self.status is GameStatus.ACTIVE

    def has_player(self, player_id: str) -> bool:
        return player_id in (self.player1_id, self.player2_id)

    def other_player(self, player_id: str) -> Optional[str]:
        if player_id == self.player1_id:
            return self.player2_id
        if player_id == self.player2_id:
            return self.player1_id
        return None

    def messages_by(self, player_id: str) -> List[Message]:
        return [m for m in self.messages if m.player_id == player_id]

    def pending_messages(self) -> List[Message]:
        return [m for m in self.messages if m.pending]


def public_view(game: Game) -> Dict[str, Any]:
    """Serializable view of a game; the secret word only appears once it is over."""

    view: Dict[str, Any] = {
        "id": game.id,
        "code": game.code,
        "date": game.date,
        "mode": game.mode.value,
        "status": game.status.value,
        "winner_id": game.winner_id,
        "messages": [m.to_dict() for m in game.messages],
        "player1_id": game.player1_id,
        "player2_id": game.player2_id,
        "current_turn": game.current_turn,
        "hints_used": game.hints_used,
        "created_at": game.created_at,
        "turn_version": game.turn_version,
    }
    if not game.is_active:
        view["secret_word"] = game.secret_word
    return view


@dataclass
class ActionResult:
    """What a submitted action produced."""

    author_message: Message
    status: GameStatus
    opponent_message: Optional[Message] = None
    winner_id: Optional[str] = None
    secret_word: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.author_message.to_dict(),
            "opponent_message": self.opponent_message.to_dict() if self.opponent_message else None,
            "status": self.status.value,
            "winner_id": self.winner_id,
            "secret_word": self.secret_word,
        }
