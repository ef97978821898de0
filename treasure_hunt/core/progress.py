"""
Progress oracle: the allowed position of a team

Durable models:
  - counter:   one row per team, clue_number holds the next allowed position
  - event_log: one row per solved position, allowed = solved rows + 1

The local model keeps the position in the session cache and exists only for
hunts that run without a durable progress store.

The allowed position never decreases. A team without any progress rows is at
position 1, so wiping the store restarts every team cleanly.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Optional

from treasure_hunt.core.session_cache import PROGRESS_KEY, SessionCache
from treasure_hunt.errors import ConflictError, HuntError, TransientError
from treasure_hunt.models import (
    HuntConfig, Identity, ProgressModel, ProgressRow, RetryPolicy, UnsavedAdvance
)
from treasure_hunt.storage.base import HuntStore
from treasure_hunt.utils import is_plain_number


logger = logging.getLogger(__name__)

FailureSink = Callable[[UnsavedAdvance], None]

PROGRESS_READ_FAILED = "Could not verify your progress. Please try again."


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProgressOracle(ABC):
    """Base oracle: retry policy and failure reporting for advance writes"""

    def __init__(self, retry: Optional[RetryPolicy] = None, on_failure: Optional[FailureSink] = None):
        self.retry = retry or RetryPolicy()
        self.on_failure = on_failure

    @abstractmethod
    async def _read_allowed(self, identity: Identity) -> int:
        """Allowed position from storage; may raise any store error"""

    @abstractmethod
    async def _record(self, identity: Identity, solved: int) -> None:
        """Durably record one solved position; ConflictError means already recorded"""

    async def current_allowed_position(self, identity: Identity) -> int:
        """
        Next position this team may answer (>= 1)

        Raises:
            TransientError: If the store cannot be read
        """
        try:
            allowed = await self._read_allowed(identity)
        except HuntError as e:
            raise TransientError(PROGRESS_READ_FAILED) from e
        return max(1, allowed)

    async def advance(self, identity: Identity, solved: int) -> bool:
        """
        Record that `solved` was answered correctly

        Duplicate records count as success. Other failures are retried per the
        retry policy; once attempts are exhausted the failure is logged and
        reported to the failure sink, never raised.

        Returns:
            True if the progress is durably recorded
        """
        last_error: Optional[Exception] = None
        attempts = max(1, self.retry.attempts)

        for attempt in range(1, attempts + 1):
            try:
                await self._record(identity, solved)
                logger.info(f"💾 Saved progress: {identity.team_name} solved clue {solved}")
                return True
            except ConflictError:
                logger.info(f"💾 Progress already recorded: {identity.team_name} clue {solved}")
                return True
            except HuntError as e:
                last_error = e
                if attempt < attempts:
                    logger.warning(
                        f"⚠️ Progress save failed for {identity.team_name} clue {solved} "
                        f"(attempt {attempt}/{attempts}): {e.message}. "
                        f"Retrying in {self.retry.delay_seconds}s"
                    )
                    await asyncio.sleep(self.retry.delay_seconds)

        logger.error(
            f"❌ Progress save failed after retry: {identity.team_name} clue {solved}: {last_error}"
        )
        if self.on_failure is not None:
            self.on_failure(UnsavedAdvance(
                team_name=identity.team_name,
                clue_number=solved,
                error=str(last_error),
                failed_at=_now()
            ))
        return False


class CounterProgressOracle(ProgressOracle):

    def __init__(self, store: HuntStore, retry: Optional[RetryPolicy] = None,
                 on_failure: Optional[FailureSink] = None, per_group: bool = False):
        super().__init__(retry, on_failure)
        self.store = store
        self.per_group = per_group

    async def _read_allowed(self, identity: Identity) -> int:
        group = identity.group_name if self.per_group else None
        team = await self.store.find_team(identity.team_name, group)
        if team is None:
            return 1
        return team.clue_number

    async def _record(self, identity: Identity, solved: int) -> None:
        # Set to the exact successor of what was solved; the store never lowers it
        await self.store.raise_counter(identity.team_name, identity.group_name, solved + 1)


class EventLogProgressOracle(ProgressOracle):

    def __init__(self, store: HuntStore, retry: Optional[RetryPolicy] = None,
                 on_failure: Optional[FailureSink] = None, scope_to_group: bool = False):
        super().__init__(retry, on_failure)
        self.store = store
        self.scope_to_group = scope_to_group

    async def _read_allowed(self, identity: Identity) -> int:
        group = identity.group_name if self.scope_to_group else None
        solved = await self.store.count_solved(identity.team_name, group)
        return solved + 1

    async def _record(self, identity: Identity, solved: int) -> None:
        await self.store.insert_solved(ProgressRow(
            team_name=identity.team_name,
            group_name=identity.group_name,
            clue_number=solved,
            solved_at=_now()
        ))


class LocalProgressOracle(ProgressOracle):
    """Position tracked in the session cache; no durable gating"""

    def __init__(self, cache: SessionCache, retry: Optional[RetryPolicy] = None,
                 on_failure: Optional[FailureSink] = None):
        super().__init__(retry, on_failure)
        self.cache = cache

    async def _read_allowed(self, identity: Identity) -> int:
        raw = self.cache.get(PROGRESS_KEY)
        if not is_plain_number(raw):
            return 1
        return int(raw)

    async def _record(self, identity: Identity, solved: int) -> None:
        current = await self._read_allowed(identity)
        if solved + 1 > current:
            self.cache.set(PROGRESS_KEY, str(solved + 1))


def build_oracle(config: HuntConfig, store: HuntStore, cache: SessionCache,
                 on_failure: Optional[FailureSink] = None) -> ProgressOracle:
    """Oracle for the configured progress model"""
    if config.progress_model == ProgressModel.COUNTER:
        return CounterProgressOracle(
            store, config.advance_retry, on_failure,
            per_group=config.groups.unique_per_group
        )
    if config.progress_model == ProgressModel.EVENT_LOG:
        return EventLogProgressOracle(
            store, config.advance_retry, on_failure,
            scope_to_group=config.groups.scope_progress or config.groups.unique_per_group
        )
    return LocalProgressOracle(cache, config.advance_retry, on_failure)
