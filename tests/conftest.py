import itertools

import pytest

from wordduel.agents.hints import LadderHintAdvisor
from wordduel.agents.judge import KeywordJudge
from wordduel.agents.opponent import ScriptedOpponent
from wordduel.engine.turn_engine import TurnEngine
from wordduel.store.memory import InMemoryGameStore


class RecordingEvents:
    """Keeps (kind, message content, response at publish time, player) tuples."""

    def __init__(self):
        self.seen = []

    def publish(self, event):
        msg = event.message
        self.seen.append(
            (
                event.kind,
                msg.content if msg else None,
                msg.response if msg else None,
                event.player_id,
            )
        )


@pytest.fixture
def store():
    return InMemoryGameStore()


@pytest.fixture
def make_engine(store):
    counter = itertools.count(1_700_000_000_000)

    def _make(judge=None, opponent=None, hints=None, events=None):
        return TurnEngine(
            store=store,
            judge=judge or KeywordJudge(),
            opponent=opponent or ScriptedOpponent(),
            hints=hints or LadderHintAdvisor(),
            events=events,
            clock=lambda: next(counter),
        )

    return _make


@pytest.fixture
def recording_events():
    return RecordingEvents()
