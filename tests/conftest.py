"""
Shared fixtures: configuration, seeded in-memory stores, installed app state
"""
import pytest

from treasure_hunt import state
from treasure_hunt.errors import TransientError
from treasure_hunt.models import (
    Clue, ClueScope, GroupSettings, HuntConfig, ProgressModel, RetryPolicy
)
from treasure_hunt.storage import MemoryStore


class FlakyStore(MemoryStore):
    """MemoryStore whose operations can be told to fail a number of times"""

    def __init__(self, clues=None, **kwargs):
        super().__init__(clues, **kwargs)
        self.failures = {}
        self.calls = {}

    def fail(self, operation: str, times: int = 1) -> None:
        self.failures[operation] = times

    def _maybe_fail(self, operation: str) -> None:
        self.calls[operation] = self.calls.get(operation, 0) + 1
        remaining = self.failures.get(operation, 0)
        if remaining:
            self.failures[operation] = remaining - 1
            raise TransientError(f"Store error during {operation}")

    async def find_team(self, team_name, group_name=None):
        self._maybe_fail("find_team")
        return await super().find_team(team_name, group_name)

    async def insert_team(self, team):
        self._maybe_fail("insert_team")
        return await super().insert_team(team)

    async def raise_counter(self, team_name, group_name, value):
        self._maybe_fail("raise_counter")
        return await super().raise_counter(team_name, group_name, value)

    async def count_solved(self, team_name, group_name=None):
        self._maybe_fail("count_solved")
        return await super().count_solved(team_name, group_name)

    async def insert_solved(self, row):
        self._maybe_fail("insert_solved")
        return await super().insert_solved(row)

    async def get_clue(self, position, group_name=None):
        self._maybe_fail("get_clue")
        return await super().get_clue(position, group_name)

    async def list_clues(self, group_name=None):
        self._maybe_fail("list_clues")
        return await super().list_clues(group_name)


def make_config(**overrides) -> HuntConfig:
    """Fast config: no retry backoff, no feedback pause"""
    values = {
        "progress_model": ProgressModel.EVENT_LOG,
        "advance_retry": RetryPolicy(attempts=2, delay_seconds=0),
        "correct_feedback_delay": 0,
    }
    values.update(overrides)
    return HuntConfig(**values)


def global_clues():
    return [
        Clue(position=1, question="What is six times seven?", answer="42", clue="Look under the oak tree."),
        Clue(position=2, question="Capital of France?", answer="Paris", clue=None),
        Clue(position=3, question="Red planet?", answer="Mars", clue="Check the library."),
    ]


def track_clues():
    return [
        Clue(position=1, group_name="A", question="A1?", answer="alpha", clue="A hint 1"),
        Clue(position=2, group_name="A", question="A2?", answer="beta"),
        Clue(position=1, group_name="B", question="B1?", answer="gamma", clue="B hint 1"),
        Clue(position=2, group_name="B", question="B2?", answer="delta", clue="B hint 2"),
        Clue(position=3, group_name="B", question="B3?", answer="epsilon"),
    ]


def two_track_config(**overrides) -> HuntConfig:
    values = {
        "clue_scope": ClueScope.GROUP,
        "groups": GroupSettings(required=True, names=["A", "B"], offsets={"A": 0, "B": 5}),
    }
    values.update(overrides)
    return make_config(**values)


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def store():
    s = FlakyStore()
    for clue in global_clues():
        s.add_clue(clue)
    return s


@pytest.fixture
def track_store():
    s = FlakyStore()
    for clue in track_clues():
        s.add_clue(clue)
    return s


@pytest.fixture
def installed(config, store):
    """Global state wired to the default config and store"""
    state.install(config, store)
    yield store
    state.CONFIG = None
    state.STORE = None
