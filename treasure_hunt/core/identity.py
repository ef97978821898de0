"""
Identity store: who is this participant

The session cache remembers the team; the durable store decides whether that
team exists and which group it belongs to.
"""
import logging
from typing import Optional

from treasure_hunt.core.session_cache import GROUP_KEY, PROGRESS_KEY, TEAM_KEY, SessionCache
from treasure_hunt.errors import ConflictError, TransientError, ValidationError
from treasure_hunt.models import GroupSettings, Identity, Team
from treasure_hunt.storage.base import HuntStore


logger = logging.getLogger(__name__)


class IdentityStore:

    def __init__(self, cache: SessionCache, store: HuntStore, groups: GroupSettings):
        self.cache = cache
        self.store = store
        self.groups = groups

    def resolve(self) -> Optional[Identity]:
        """Cached identity, without touching the durable store"""
        team_name = self.cache.get(TEAM_KEY)
        if not team_name:
            return None
        return Identity(team_name=team_name, group_name=self.cache.get(GROUP_KEY))

    async def confirm(self, identity: Identity) -> Optional[Identity]:
        """
        Check a cached identity against the durable store

        Returns the stored identity (stored group wins), or None after purging
        the cache when the team is unknown, e.g. after a data reset.
        """
        team = await self.store.find_team(identity.team_name, self._lookup_group(identity.group_name))
        if team is None:
            logger.info(f"🧹 Cached team {identity.team_name!r} not found in store, re-registering")
            self.forget()
            return None

        confirmed = Identity(team_name=team.team_name, group_name=team.group_name)
        self._remember(confirmed)
        return confirmed

    async def register(self, name: Optional[str], group: Optional[str] = None) -> Identity:
        """
        Register a team, or adopt an existing one with the same name

        Raises:
            ValidationError: missing name, missing or unknown group
            TransientError: store unreachable
        """
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValidationError("missing name")

        clean_group = (group or "").strip() or None
        if self.groups.required and not clean_group:
            raise ValidationError("missing group")
        if clean_group and self.groups.names and clean_group not in self.groups.names:
            raise ValidationError("unknown group")

        lookup_group = self._lookup_group(clean_group)
        existing = await self.store.find_team(clean_name, lookup_group)
        if existing is None:
            try:
                await self.store.insert_team(Team(team_name=clean_name, group_name=clean_group, clue_number=1))
                logger.info(f"🆕 Registered team {clean_name!r} (group: {clean_group or '-'})")
                identity = Identity(team_name=clean_name, group_name=clean_group)
            except ConflictError:
                # Another tab registered the same name first
                existing = await self.store.find_team(clean_name, lookup_group)
                if existing is None:
                    raise TransientError("Could not register team. Please try again.")
                identity = Identity(team_name=existing.team_name, group_name=existing.group_name)
        else:
            if clean_group and existing.group_name != clean_group:
                logger.info(
                    f"↩️ Team {clean_name!r} already in group {existing.group_name or '-'}, "
                    f"ignoring selection {clean_group}"
                )
            identity = Identity(team_name=existing.team_name, group_name=existing.group_name)

        self._remember(identity)
        return identity

    def _lookup_group(self, group: Optional[str]) -> Optional[str]:
        # A name alone identifies the team unless names are only unique per group
        return group if self.groups.unique_per_group else None

    def forget(self) -> None:
        for key in (TEAM_KEY, GROUP_KEY, PROGRESS_KEY):
            self.cache.remove(key)

    def _remember(self, identity: Identity) -> None:
        if self.cache.get(TEAM_KEY) != identity.team_name:
            self.cache.set(TEAM_KEY, identity.team_name)
        if identity.group_name is None:
            if self.cache.get(GROUP_KEY) is not None:
                self.cache.remove(GROUP_KEY)
        elif self.cache.get(GROUP_KEY) != identity.group_name:
            self.cache.set(GROUP_KEY, identity.group_name)
