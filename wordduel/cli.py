from __future__ import annotations

import argparse
import json
import logging
from datetime import date
from typing import Any, Dict, List

from .config import Settings, load_settings
from .daily import WORD_LIST, time_until_next_word, today, word_for_date, word_index
from .engine.turn_engine import MESSAGE_APPENDED, GameEvent
from .engine.types import AI_PLAYER_ID, GameStatus
from .errors import WordDuelError
from .game import build_service

PLAYER_ID = "player"


class ConsoleEvents:
    """Prints the opponent's question as soon as it is asked, before it is judged."""

    def publish(self, event: GameEvent) -> None:
        msg = event.message
        if event.kind == MESSAGE_APPENDED and msg is not None and msg.player_id == AI_PLAYER_ID:
            print(f"AI ({msg.type.value}): {msg.content}  ... awaiting judgment")


def _word_info(settings: Settings, day_text: str | None, reveal: bool) -> Dict[str, Any]:
    day = date.fromisoformat(day_text) if day_text else today(settings.timezone)
    info: Dict[str, Any] = {
        "date": day.isoformat(),
        "timezone": settings.timezone,
        "index": word_index(day, settings.epoch),
        "next_word_in_seconds": int(time_until_next_word(settings.timezone).total_seconds()),
    }
    if reveal:
        info["word"] = word_for_date(day, epoch=settings.epoch)
    return info


def _parse_line(line: str) -> tuple[str, str]:
    text = line.strip()
    lowered = text.lower()
    if lowered == "hint":
        return "hint", ""
    if lowered.startswith("guess "):
        return "guess", text[6:]
    return "question", text


def play(settings: Settings) -> Dict[str, Any]:
    service = build_service(settings, events=ConsoleEvents())
    game = service.create_game(PLAYER_ID, "ai")
    print("Ask a yes/no question, type 'guess <word>' to guess, 'hint' for a hint, or 'quit'.")
    while True:
        try:
            line = input("> ")
        except EOFError:
            break
        if line.strip().lower() in {"quit", "exit"}:
            break
        if not line.strip():
            continue
        action, content = _parse_line(line)
        try:
            result = service.submit_action(game["id"], PLAYER_ID, action, content)
        except WordDuelError as exc:
            print(f"Rejected: {exc}")
            continue
        mine = result.author_message
        print(f"You ({mine.type.value}): {mine.content} → {mine.response}")
        if result.opponent_message is not None:
            theirs = result.opponent_message
            print(f"AI ({theirs.type.value}): {theirs.content} → {theirs.response}")
        if result.status is GameStatus.COMPLETED:
            winner = "You win!" if result.winner_id == PLAYER_ID else "The AI wins."
            print(f"{winner} The word was '{result.secret_word}'.")
            break
    return service.get_game_view(game["id"])


def demo(settings: Settings, turns: List[tuple[str, str, str]] | None = None) -> Dict[str, Any]:
    """Play a short scripted friend game and return the final view."""

    service = build_service(settings)
    game = service.create_game("alice", "friend")
    service.join_game(game["code"], "bob")
    _, secret = service.word_for_today()
    decoy = next(w for w in WORD_LIST if w != secret)
    script = turns or [
        ("alice", "question", "Is it alive?"),
        ("bob", "hint", ""),
        ("alice", "guess", decoy),
        ("bob", "guess", secret),
    ]
    for actor, action, content in script:
        result = service.submit_action(game["id"], actor, action, content)
        if result.status is GameStatus.COMPLETED:
            break
    return service.get_game_view(game["id"])


def main() -> None:
    parser = argparse.ArgumentParser(description="Daily word guessing duel")
    parser.add_argument("--config", required=False, help="Path to YAML config")
    sub = parser.add_subparsers(dest="cmd")
    word = sub.add_parser("word", help="Show today's word slot and countdown")
    word.add_argument("--date", required=False, help="ISO date instead of today")
    word.add_argument("--reveal", action="store_true", help="Include the secret word")
    sub.add_parser("play", help="Play against the AI in the terminal")
    sub.add_parser("demo", help="Run a scripted two-player game")

    args = parser.parse_args()
    settings = load_settings(args.config)
    logging.basicConfig(level=settings.log_level, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    if args.cmd == "word":
        print(json.dumps(_word_info(settings, args.date, args.reveal), ensure_ascii=False, indent=2))
    elif args.cmd == "play":
        view = play(settings)
        print(json.dumps({"status": view["status"], "winner_id": view["winner_id"]}, indent=2))
    elif args.cmd == "demo":
        print(json.dumps(demo(settings), ensure_ascii=False, indent=2))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
