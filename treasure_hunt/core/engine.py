"""
Progression engine: one page life cycle of a participant

    loading -> registering -> gating -> blocked
       |                       ^    -> read_only_solved
       +-----------------------+    -> answering -> correct -> advancing
    any state -> error

A page handles exactly one requested position. The next clue is reached by
loading a new page with the next QR code; nothing is carried over in memory,
the allowed position is always re-read from the progress oracle.
"""
import asyncio
import logging
from typing import Optional

from treasure_hunt.core.answers import is_blank, is_correct
from treasure_hunt.core.clues import ClueRepository
from treasure_hunt.core.identity import IdentityStore
from treasure_hunt.core.progress import ProgressOracle
from treasure_hunt.errors import BlockedError, HuntError, TransientError, ValidationError
from treasure_hunt.models import Clue, Identity, PageState, PageView
from treasure_hunt.services.background import BackgroundWrites
from treasure_hunt.utils import parse_position


logger = logging.getLogger(__name__)

ALREADY_SOLVED = "You already solved this clue!"
FIND_NEXT_CODE = "Well done! Find the next QR code to continue."
CORRECT = "Correct! ✓"
TRY_AGAIN = "Try again!"
REGISTRATION_FAILED = "Could not register team. Please try again."
IDENTITY_CHECK_FAILED = "Could not verify your team. Please try again."

REGISTRATION_PROMPTS = {
    "missing name": "Please enter a team name.",
    "missing group": "Please select your group.",
    "unknown group": "Please select one of the listed groups.",
}


class HuntPage:
    """State of one page load, passed explicitly through every transition"""

    def __init__(
        self,
        identity_store: IdentityStore,
        oracle: ProgressOracle,
        clues: ClueRepository,
        writes: BackgroundWrites,
        feedback_delay: float = 0.6,
        page_id: Optional[str] = None
    ):
        self.identity_store = identity_store
        self.oracle = oracle
        self.clues = clues
        self.writes = writes
        self.feedback_delay = feedback_delay
        self.page_id = page_id

        self.state = PageState.LOADING
        self.external_position: Optional[int] = None
        self.position: Optional[int] = None
        self.identity: Optional[Identity] = None
        self.clue: Optional[Clue] = None
        self.allowed: Optional[int] = None
        self.hint: Optional[str] = None
        self.message: Optional[str] = None
        self.feedback: Optional[str] = None
        self.select_input = False
        self.retryable = False
        self.required_position: Optional[int] = None
        self.advance_task: Optional[asyncio.Task] = None
        self._answered = False  # guard against double-submit

    @property
    def finished(self) -> bool:
        """No further input is accepted on this page"""
        return self.state not in (PageState.REGISTERING, PageState.ANSWERING, PageState.CORRECT)

    # ==================== TRANSITIONS ====================

    async def load(self, raw_position: Optional[str]) -> PageView:
        """Entry: parse the locator, resolve identity, gate"""
        if self.state != PageState.LOADING:
            return self.view()

        try:
            self.external_position = parse_position(raw_position)

            cached = self.identity_store.resolve()
            if cached is None:
                return self._registering()

            try:
                identity = await self.identity_store.confirm(cached)
            except HuntError as e:
                raise TransientError(IDENTITY_CHECK_FAILED) from e
            if identity is None:
                return self._registering()

            return await self._gate(identity)
        except HuntError as e:
            return self._fail(e)

    async def register(self, team_name: Optional[str], group_name: Optional[str] = None) -> PageView:
        """Registering -> Gating"""
        if self.state != PageState.REGISTERING:
            return self.view()

        try:
            identity = await self.identity_store.register(team_name, group_name)
        except ValidationError as e:
            self.message = REGISTRATION_PROMPTS.get(e.message, e.message)
            self.feedback = "wrong"
            return self.view()
        except HuntError as e:
            logger.warning(f"⚠️ Registration of {team_name!r} failed: {e.message}")
            return self._fail(TransientError(REGISTRATION_FAILED))

        self.message = None
        self.feedback = None
        try:
            return await self._gate(identity)
        except HuntError as e:
            return self._fail(e)

    async def submit_answer(self, answer: Optional[str]) -> PageView:
        """Answering -> Correct -> Advancing, or stay in Answering on a wrong answer"""
        if self.state != PageState.ANSWERING or self._answered:
            return self.view()

        self.select_input = False
        if is_blank(answer):
            return self.view()

        if not is_correct(answer, self.clue.answer):
            logger.info(f"❌ Team {self.identity.team_name} | Clue {self.position} | Wrong answer")
            self.feedback = "wrong"
            self.message = TRY_AGAIN
            self.select_input = True
            return self.view()

        # Lock before anything else can suspend
        self._answered = True
        self.state = PageState.CORRECT
        self.feedback = "correct"
        self.message = CORRECT
        logger.info(f"✅ Team {self.identity.team_name} | Clue {self.position} | Correct")

        self.advance_task = self.writes.spawn(self.oracle.advance(self.identity, self.position))

        await asyncio.sleep(self.feedback_delay)

        self.state = PageState.ADVANCING
        self.hint = self._hint_or(FIND_NEXT_CODE)
        return self.view()

    # ==================== INTERNALS ====================

    async def _gate(self, identity: Identity) -> PageView:
        self.identity = identity
        self.state = PageState.GATING

        requested = self.clues.translate(self.external_position, identity.group_name)
        self.position = requested

        allowed = await self.oracle.current_allowed_position(identity)
        self.allowed = allowed

        logger.info(
            f"🧭 Team {identity.team_name} | Group {identity.group_name or '-'} | "
            f"Allowed {allowed} | Requested {requested} (code {self.external_position})"
        )

        if requested > allowed:
            raise BlockedError(allowed)

        self.clue = await self.clues.by_position(requested, identity.group_name)

        if requested < allowed:
            self.state = PageState.READ_ONLY_SOLVED
            self.hint = self._hint_or(ALREADY_SOLVED)
            return self.view()

        self.state = PageState.ANSWERING
        return self.view()

    def _registering(self) -> PageView:
        self.state = PageState.REGISTERING
        return self.view()

    def _fail(self, error: HuntError) -> PageView:
        self.message = error.message
        self.retryable = error.retryable
        if isinstance(error, BlockedError):
            self.state = PageState.BLOCKED
            self.required_position = error.required_position
        else:
            self.state = PageState.ERROR
            if error.retryable:
                logger.warning(f"⚠️ Page for code {self.external_position} failed: {error.message}")
        return self.view()

    def _hint_or(self, default: str) -> str:
        hint = self.clue.clue if self.clue else None
        if hint and hint.strip():
            return hint.strip()
        return default

    def view(self) -> PageView:
        """Snapshot for the presentation layer"""
        show_question = self.state in (
            PageState.READ_ONLY_SOLVED, PageState.ANSWERING, PageState.CORRECT, PageState.ADVANCING
        )
        return PageView(
            state=self.state,
            page_id=None if self.finished else self.page_id,
            external_position=self.external_position,
            position=self.position if show_question or self.state == PageState.BLOCKED else None,
            team_name=self.identity.team_name if self.identity else None,
            group_name=self.identity.group_name if self.identity else None,
            question=self.clue.question if show_question and self.clue else None,
            hint=self.hint if self.state in (PageState.READ_ONLY_SOLVED, PageState.ADVANCING) else None,
            message=self.message,
            feedback=self.feedback,
            editable=self.state == PageState.ANSWERING,
            select_input=self.select_input,
            retryable=self.retryable,
            required_position=self.required_position
        )
