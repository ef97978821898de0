"""
Supabase-backed store
=====================

Tables:
    teams          - team_name (unique), group_name, clue_number (counter model)
    teams_progress - team_name, group_name, clue_number, solved_at
                     unique (team_name, clue_number) (event-log model)

With unique_per_group the unique keys become (team_name, group_name) and
(team_name, group_name, clue_number), and every team query also filters on
group_name.
    questions      - group_name, group_clue_number, question, answer, clue

Duplicate inserts come back from PostgREST as error code 23505
(unique_violation) and are reported as ConflictError.
"""
import logging
import os
from typing import Any, Dict, List, Optional

import httpx
from dotenv import load_dotenv
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from treasure_hunt.errors import ConflictError, TransientError
from treasure_hunt.models import Clue, ProgressRow, StorageSettings, Team
from treasure_hunt.storage.base import HuntStore


logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


class SupabaseStore(HuntStore):
    """Store on top of an async Supabase client"""

    def __init__(self, client: AsyncClient, settings: Optional[StorageSettings] = None,
                 unique_per_group: bool = False):
        self.client = client
        self.settings = settings or StorageSettings()
        self.unique_per_group = unique_per_group

    def _team_filter(self, query, team_name: str, group_name: Optional[str]):
        query = query.eq('team_name', team_name)
        if self.unique_per_group:
            if group_name is None:
                return query.is_('group_name', 'null')
            return query.eq('group_name', group_name)
        return query

    async def _execute(self, query, action: str):
        """Run a query builder, translating failures into the store error taxonomy"""
        try:
            return await query.execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise ConflictError(e.message) from e
            logger.warning(f"⚠️ Supabase {action} failed: {e.code} {e.message}")
            raise TransientError(f"Store error during {action}") from e
        except httpx.HTTPError as e:
            logger.warning(f"⚠️ Supabase {action} unreachable: {type(e).__name__}: {e}")
            raise TransientError(f"Store unreachable during {action}") from e

    # ---- teams ----

    async def find_team(self, team_name: str, group_name: Optional[str] = None) -> Optional[Team]:
        query = self.client.table(self.settings.teams_table).select('team_name, group_name, clue_number')
        result = await self._execute(
            self._team_filter(query, team_name, group_name).limit(1),
            "team lookup"
        )
        if not result.data:
            return None
        return Team(**result.data[0])

    async def insert_team(self, team: Team) -> None:
        await self._execute(
            self.client.table(self.settings.teams_table).insert(team.model_dump()),
            "team insert"
        )

    def _counter_update(self, team_name: str, group_name: Optional[str], value: int):
        update = self.client.table(self.settings.teams_table).update({'clue_number': value})
        return self._team_filter(update, team_name, group_name).lt('clue_number', value)

    async def raise_counter(self, team_name: str, group_name: Optional[str], value: int) -> None:
        result = await self._execute(self._counter_update(team_name, group_name, value), "counter update")
        if result.data:
            return

        # Nothing updated: either already at/above value, or the row is gone
        if await self.find_team(team_name, group_name) is not None:
            return
        try:
            await self.insert_team(Team(team_name=team_name, group_name=group_name, clue_number=value))
        except ConflictError:
            # Re-created concurrently; apply the raise to that row instead
            await self._execute(self._counter_update(team_name, group_name, value), "counter update")

    # ---- event log ----

    async def count_solved(self, team_name: str, group_name: Optional[str] = None) -> int:
        query = (
            self.client.table(self.settings.progress_table)
            .select('*', count='exact', head=True)
            .eq('team_name', team_name)
            .gt('clue_number', 0)
        )
        if group_name is not None:
            query = query.eq('group_name', group_name)
        result = await self._execute(query, "progress count")
        return result.count or 0

    async def insert_solved(self, row: ProgressRow) -> None:
        await self._execute(
            self.client.table(self.settings.progress_table).insert(row.model_dump()),
            "progress insert"
        )

    # ---- clues ----

    @staticmethod
    def _to_clue(record: Dict[str, Any]) -> Clue:
        return Clue(
            position=record['group_clue_number'],
            group_name=record.get('group_name'),
            question=record['question'],
            answer=record['answer'],
            clue=record.get('clue')
        )

    def _questions(self, group_name: Optional[str]):
        query = (
            self.client.table(self.settings.questions_table)
            .select('id, group_name, group_clue_number, question, answer, clue')
        )
        if group_name is None:
            return query.is_('group_name', 'null')
        return query.eq('group_name', group_name)

    async def get_clue(self, position: int, group_name: Optional[str] = None) -> Optional[Clue]:
        result = await self._execute(
            self._questions(group_name).eq('group_clue_number', position).limit(1),
            "clue lookup"
        )
        if not result.data:
            return None
        return self._to_clue(result.data[0])

    async def list_clues(self, group_name: Optional[str] = None) -> List[Clue]:
        result = await self._execute(
            self._questions(group_name).order('group_clue_number'),
            "clue listing"
        )
        return [self._to_clue(record) for record in result.data or []]


async def create_supabase_store(settings: StorageSettings, unique_per_group: bool = False) -> SupabaseStore:
    """Connect using SUPABASE_URL and SUPABASE_ANON_KEY from the environment or .env"""
    load_dotenv()

    url = os.environ.get("SUPABASE_URL")
    key = os.environ.get("SUPABASE_ANON_KEY")

    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be set in environment")

    client = await acreate_client(url, key)
    logger.info(f"✅ Connected to Supabase at {url}")
    return SupabaseStore(client, settings, unique_per_group)
