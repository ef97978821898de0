"""
In-process store, seeded from the clue CSV

Every method completes without awaiting, so each call is atomic with respect
to other coroutines on the same event loop.
"""
from typing import Dict, Hashable, List, Optional, Set, Tuple

from treasure_hunt.errors import ConflictError
from treasure_hunt.models import Clue, ProgressRow, Team
from treasure_hunt.storage.base import HuntStore


class MemoryStore(HuntStore):

    def __init__(self, clues: Optional[Dict[Tuple[Optional[str], int], Clue]] = None,
                 unique_per_group: bool = False):
        self.unique_per_group = unique_per_group
        self.teams: Dict[Hashable, Team] = {}
        self.progress: Dict[Tuple[Hashable, int], ProgressRow] = {}
        self.clues: Dict[Tuple[Optional[str], int], Clue] = dict(clues or {})

    def add_clue(self, clue: Clue) -> None:
        self.clues[(clue.group_name, clue.position)] = clue

    def _team_key(self, team_name: str, group_name: Optional[str]) -> Hashable:
        """Name alone, or (name, group) when names are only unique per group"""
        if self.unique_per_group:
            return (team_name, group_name)
        return team_name

    async def find_team(self, team_name: str, group_name: Optional[str] = None) -> Optional[Team]:
        team = self.teams.get(self._team_key(team_name, group_name))
        return team.model_copy() if team else None

    async def insert_team(self, team: Team) -> None:
        key = self._team_key(team.team_name, team.group_name)
        if key in self.teams:
            raise ConflictError(f"team {team.team_name!r} already exists")
        self.teams[key] = team.model_copy()

    async def raise_counter(self, team_name: str, group_name: Optional[str], value: int) -> None:
        key = self._team_key(team_name, group_name)
        team = self.teams.get(key)
        if team is None:
            self.teams[key] = Team(team_name=team_name, group_name=group_name, clue_number=value)
        elif team.clue_number < value:
            team.clue_number = value

    async def count_solved(self, team_name: str, group_name: Optional[str] = None) -> int:
        solved: Set[int] = set()
        for (_, number), row in self.progress.items():
            if row.team_name != team_name or number <= 0:
                continue
            if group_name is not None and row.group_name != group_name:
                continue
            solved.add(number)
        return len(solved)

    async def insert_solved(self, row: ProgressRow) -> None:
        key = (self._team_key(row.team_name, row.group_name), row.clue_number)
        if key in self.progress:
            raise ConflictError(f"clue {row.clue_number} already recorded for {row.team_name!r}")
        self.progress[key] = row.model_copy()

    async def get_clue(self, position: int, group_name: Optional[str] = None) -> Optional[Clue]:
        return self.clues.get((group_name, position))

    async def list_clues(self, group_name: Optional[str] = None) -> List[Clue]:
        return sorted(
            (clue for (group, _), clue in self.clues.items() if group == group_name),
            key=lambda clue: clue.position
        )
