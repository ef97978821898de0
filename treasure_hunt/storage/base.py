"""
Store interface consumed by the identity store, the progress oracles and the clue repository

Implementations guarantee at most one team row per team name (per name and
group when teams are unique per group) and at most one progress row per
(team, clue number), and signal a duplicate insert with
ConflictError. Any other failure surfaces as TransientError.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from treasure_hunt.models import Clue, ProgressRow, Team


class HuntStore(ABC):

    # ---- teams ----

    @abstractmethod
    async def find_team(self, team_name: str, group_name: Optional[str] = None) -> Optional[Team]:
        """Team row by exact name, None if never registered

        group_name narrows the lookup when teams are unique per group; stores
        with hunt-wide names ignore it.
        """

    @abstractmethod
    async def insert_team(self, team: Team) -> None:
        """Insert a new team; ConflictError if the name is taken"""

    @abstractmethod
    async def raise_counter(self, team_name: str, group_name: Optional[str], value: int) -> None:
        """Set the team's counter to value unless it is already higher; creates the row if missing"""

    # ---- event log ----

    @abstractmethod
    async def count_solved(self, team_name: str, group_name: Optional[str] = None) -> int:
        """Number of solved-position rows for the team, optionally within one group"""

    @abstractmethod
    async def insert_solved(self, row: ProgressRow) -> None:
        """Append a solved-position row; ConflictError on duplicate (team, clue_number)"""

    # ---- clues ----

    @abstractmethod
    async def get_clue(self, position: int, group_name: Optional[str] = None) -> Optional[Clue]:
        """Exact lookup; group None addresses the global pool"""

    @abstractmethod
    async def list_clues(self, group_name: Optional[str] = None) -> List[Clue]:
        """All clues of one scope, ordered by position"""

    async def close(self) -> None:
        return None
