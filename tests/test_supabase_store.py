"""
Tests for the Supabase store against a recorded query builder
"""
import asyncio
from types import SimpleNamespace

import httpx
import pytest
from postgrest.exceptions import APIError

from treasure_hunt.errors import ConflictError, TransientError
from treasure_hunt.models import ProgressRow, Team
from treasure_hunt.storage.supabase_store import SupabaseStore


class FakeQuery:
    """Chainable stand-in for a PostgREST request builder"""

    def __init__(self, client, table):
        self.client = client
        self.calls = [("table", table)]

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return method

    async def execute(self):
        self.client.executed.append(self.calls)
        outcome = self.client.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeClient:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.executed = []

    def table(self, name):
        return FakeQuery(self, name)


def _result(data=None, count=None):
    return SimpleNamespace(data=data or [], count=count)


def _conflict():
    return APIError({"message": "duplicate key value", "code": "23505", "hint": None, "details": None})


def test_find_team():
    client = FakeClient(_result([{"team_name": "Falcons", "group_name": "A", "clue_number": 3}]))
    team = asyncio.run(SupabaseStore(client).find_team("Falcons"))
    assert team == Team(team_name="Falcons", group_name="A", clue_number=3)
    assert ("eq", ("team_name", "Falcons"), {}) in client.executed[0]


def test_find_team_missing():
    assert asyncio.run(SupabaseStore(FakeClient(_result())).find_team("Ghosts")) is None


def test_unique_violation_is_conflict():
    client = FakeClient(_conflict())
    with pytest.raises(ConflictError):
        asyncio.run(SupabaseStore(client).insert_solved(ProgressRow(team_name="Falcons", clue_number=1)))


def test_other_api_error_is_transient():
    client = FakeClient(APIError({"message": "boom", "code": "500", "hint": None, "details": None}))
    with pytest.raises(TransientError):
        asyncio.run(SupabaseStore(client).count_solved("Falcons"))


def test_network_error_is_transient():
    client = FakeClient(httpx.ConnectError("down"))
    with pytest.raises(TransientError):
        asyncio.run(SupabaseStore(client).find_team("Falcons"))


def test_count_solved_excludes_registration_rows():
    client = FakeClient(_result(count=4))
    assert asyncio.run(SupabaseStore(client).count_solved("Falcons", "B")) == 4
    calls = client.executed[0]
    assert ("gt", ("clue_number", 0), {}) in calls
    assert ("eq", ("group_name", "B"), {}) in calls


def test_raise_counter_updates_only_upwards():
    client = FakeClient(_result([{"team_name": "Falcons", "clue_number": 3}]))
    asyncio.run(SupabaseStore(client).raise_counter("Falcons", "A", 3))
    calls = client.executed[0]
    assert ("update", ({"clue_number": 3},), {}) in calls
    assert ("lt", ("clue_number", 3), {}) in calls
    assert len(client.executed) == 1


def test_raise_counter_recreates_missing_row():
    client = FakeClient(_result(), _result(), _result([{"team_name": "Falcons"}]))
    asyncio.run(SupabaseStore(client).raise_counter("Falcons", "A", 2))
    insert = client.executed[2]
    assert insert[1][0] == "insert"
    assert insert[1][1][0]["clue_number"] == 2


def test_get_clue_maps_columns():
    record = {"id": 9, "group_name": "B", "group_clue_number": 2,
              "question": "B2?", "answer": "delta", "clue": None}
    client = FakeClient(_result([record]))
    clue = asyncio.run(SupabaseStore(client).get_clue(2, "B"))
    assert clue.position == 2
    assert clue.group_name == "B"
    assert clue.answer == "delta"


def test_find_team_per_group_filters_group():
    client = FakeClient(_result([{"team_name": "Falcons", "group_name": "B", "clue_number": 1}]))
    team = asyncio.run(SupabaseStore(client, unique_per_group=True).find_team("Falcons", "B"))
    assert team.group_name == "B"
    assert ("eq", ("group_name", "B"), {}) in client.executed[0]


def test_find_team_ignores_group_when_names_are_global():
    client = FakeClient(_result([{"team_name": "Falcons", "group_name": "A", "clue_number": 1}]))
    asyncio.run(SupabaseStore(client).find_team("Falcons", "B"))
    assert ("eq", ("group_name", "B"), {}) not in client.executed[0]


def test_raise_counter_per_group_targets_one_row():
    client = FakeClient(_result([{"team_name": "Falcons", "group_name": "B", "clue_number": 3}]))
    asyncio.run(SupabaseStore(client, unique_per_group=True).raise_counter("Falcons", "B", 3))
    calls = client.executed[0]
    assert ("eq", ("group_name", "B"), {}) in calls
    assert ("lt", ("clue_number", 3), {}) in calls
