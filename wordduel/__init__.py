"""wordduel: a daily word guessing duel against a friend or an AI."""
from wordduel.config import Settings, load_settings
from wordduel.game import GameService, build_service

__all__ = ["GameService", "Settings", "build_service", "load_settings"]
