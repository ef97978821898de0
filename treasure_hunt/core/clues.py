"""
Clue repository: logical position -> clue content

Two-track hunts print one series of QR codes per group. A group's codes start
after its offset, so code 7 for a group with offset 5 is that group's clue 2.
"""
from typing import List, Optional

from treasure_hunt.errors import HuntError, NotFoundError, TransientError
from treasure_hunt.models import Clue, ClueScope, HuntConfig
from treasure_hunt.storage.base import HuntStore


CLUE_NOT_FOUND = "This clue does not exist for your group."


class ClueRepository:

    def __init__(self, store: HuntStore, config: HuntConfig):
        self.store = store
        self.scope = config.clue_scope
        self.offsets = config.groups.offsets

    def offset(self, group: Optional[str]) -> int:
        if group is None:
            return 0
        return self.offsets.get(group, 0)

    def translate(self, external: int, group: Optional[str] = None) -> int:
        """External QR code -> in-group position"""
        position = external - self.offset(group)
        if position < 1:
            raise NotFoundError(CLUE_NOT_FOUND)
        return position

    async def by_position(self, position: int, group: Optional[str] = None) -> Clue:
        """
        Clue at an in-group position

        Raises:
            NotFoundError: No clue at that position for the group
            TransientError: Store unreachable
        """
        if self.scope == ClueScope.GROUP:
            clue = await self._lookup(position, group)
        else:
            clue = await self._lookup(position + self.offset(group), None)

        if clue is None:
            raise NotFoundError(CLUE_NOT_FOUND)
        return clue

    async def all_clues(self, group: Optional[str] = None) -> List[Clue]:
        """Every clue of the group's track, ordered by position"""
        try:
            if self.scope == ClueScope.GROUP:
                return await self.store.list_clues(group)
            return await self.store.list_clues(None)
        except HuntError as e:
            raise TransientError("Could not load clues. Please try again.") from e

    async def _lookup(self, position: int, group: Optional[str]) -> Optional[Clue]:
        try:
            return await self.store.get_clue(position, group)
        except HuntError as e:
            raise TransientError("Could not load this clue. Please try again.") from e
