"""Game state storage."""
from wordduel.store.base import GameStore
from wordduel.store.memory import InMemoryGameStore

__all__ = ["GameStore", "InMemoryGameStore"]
