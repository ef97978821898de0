"""
Tests for team registration and cached identity resolution
"""
import asyncio

import pytest

from treasure_hunt.core.identity import IdentityStore
from treasure_hunt.core.session_cache import GROUP_KEY, TEAM_KEY, SessionCache
from treasure_hunt.errors import ConflictError, TransientError, ValidationError
from treasure_hunt.models import GroupSettings, Identity, Team
from treasure_hunt.storage import MemoryStore


GROUPS = GroupSettings(required=True, names=["A", "B"])


def _identity_store(store=None, cookies=None, groups=GROUPS):
    return IdentityStore(SessionCache(cookies), store or MemoryStore(), groups)


def test_resolve_without_cache():
    """Nothing cached means no identity"""
    assert _identity_store().resolve() is None


def test_resolve_from_cache():
    """Cached name and group are returned as-is"""
    identity = _identity_store(cookies={TEAM_KEY: "Falcons", GROUP_KEY: "A"}).resolve()
    assert identity == Identity(team_name="Falcons", group_name="A")


def test_register_requires_name():
    with pytest.raises(ValidationError, match="missing name"):
        asyncio.run(_identity_store().register("   ", "A"))


def test_register_requires_group_when_configured():
    with pytest.raises(ValidationError, match="missing group"):
        asyncio.run(_identity_store().register("Falcons", None))


def test_register_rejects_unknown_group():
    with pytest.raises(ValidationError, match="unknown group"):
        asyncio.run(_identity_store().register("Falcons", "C"))


def test_register_group_optional():
    """Without a group requirement a team can register ungrouped"""
    ids = _identity_store(groups=GroupSettings())
    identity = asyncio.run(ids.register("Falcons"))
    assert identity.group_name is None
    assert ids.cache.get(TEAM_KEY) == "Falcons"
    assert ids.cache.get(GROUP_KEY) is None


def test_register_new_team_inserts_and_caches():
    """Fresh registration writes one row starting at position 1"""
    store = MemoryStore()
    ids = _identity_store(store)
    identity = asyncio.run(ids.register("  Falcons ", "B"))
    assert identity == Identity(team_name="Falcons", group_name="B")
    assert store.teams["Falcons"].clue_number == 1
    assert ids.cache.items() == {TEAM_KEY: "Falcons", GROUP_KEY: "B"}


def test_returning_team_keeps_stored_group():
    """Group is sticky: storage wins over a new selection"""
    store = MemoryStore()
    asyncio.run(_identity_store(store).register("Falcons", "A"))
    ids = _identity_store(store)
    identity = asyncio.run(ids.register("Falcons", "B"))
    assert identity.group_name == "A"
    assert ids.cache.get(GROUP_KEY) == "A"
    assert len(store.teams) == 1


def test_names_are_case_sensitive():
    store = MemoryStore()
    asyncio.run(_identity_store(store).register("Falcons", "A"))
    asyncio.run(_identity_store(store).register("falcons", "B"))
    assert set(store.teams) == {"Falcons", "falcons"}


class RacingStore(MemoryStore):
    """Another tab inserts the same team between lookup and insert"""

    async def insert_team(self, team):
        self.teams[team.team_name] = Team(team_name=team.team_name, group_name="A")
        raise ConflictError("duplicate key")


def test_duplicate_registration_race_rereads():
    """A uniqueness violation on insert adopts the winning row"""
    ids = _identity_store(RacingStore())
    identity = asyncio.run(ids.register("Falcons", "B"))
    assert identity == Identity(team_name="Falcons", group_name="A")
    assert ids.cache.get(GROUP_KEY) == "A"


def test_register_store_failure(store):
    """Lookup failure propagates as transient"""
    store.fail("find_team")
    with pytest.raises(TransientError):
        asyncio.run(_identity_store(store).register("Falcons", "A"))
    assert "Falcons" not in store.teams


def test_confirm_adopts_stored_group():
    store = MemoryStore()
    store.teams["Falcons"] = Team(team_name="Falcons", group_name="B")
    ids = _identity_store(store, cookies={TEAM_KEY: "Falcons", GROUP_KEY: "A"})
    identity = asyncio.run(ids.confirm(ids.resolve()))
    assert identity.group_name == "B"
    assert ids.cache.get(GROUP_KEY) == "B"


def test_confirm_unknown_team_purges_cache():
    """A cached name missing from storage triggers re-registration"""
    ids = _identity_store(cookies={TEAM_KEY: "Ghosts", GROUP_KEY: "A"})
    assert asyncio.run(ids.confirm(ids.resolve())) is None
    assert ids.resolve() is None
    assert ids.cache.pending_changes() == {TEAM_KEY: None, GROUP_KEY: None}


PER_GROUP = GroupSettings(required=True, names=["A", "B"], unique_per_group=True)


def test_same_name_in_two_groups_when_unique_per_group():
    """Per-group names: "Falcons" in A and "Falcons" in B are two teams"""
    store = MemoryStore(unique_per_group=True)
    a = asyncio.run(_identity_store(store, groups=PER_GROUP).register("Falcons", "A"))
    b = asyncio.run(_identity_store(store, groups=PER_GROUP).register("Falcons", "B"))
    assert a == Identity(team_name="Falcons", group_name="A")
    assert b == Identity(team_name="Falcons", group_name="B")
    assert set(store.teams) == {("Falcons", "A"), ("Falcons", "B")}


def test_confirm_per_group_checks_cached_group():
    """The cached group is part of the identity, not overwritten by another group's row"""
    store = MemoryStore(unique_per_group=True)
    store.teams[("Falcons", "B")] = Team(team_name="Falcons", group_name="B")
    ids = _identity_store(store, cookies={TEAM_KEY: "Falcons", GROUP_KEY: "A"}, groups=PER_GROUP)
    assert asyncio.run(ids.confirm(ids.resolve())) is None
    ids = _identity_store(store, cookies={TEAM_KEY: "Falcons", GROUP_KEY: "B"}, groups=PER_GROUP)
    assert asyncio.run(ids.confirm(ids.resolve())) == Identity(team_name="Falcons", group_name="B")
