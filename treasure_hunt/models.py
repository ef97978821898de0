"""
Data models for the treasure hunt server
"""
from enum import Enum
from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class Team(BaseModel):
    """Registered team"""
    team_name: str                        # case-sensitive, unique
    group_name: Optional[str] = None      # sticky once registered
    clue_number: int = 1                  # counter model: next allowed position


class Clue(BaseModel):
    """One clue of the hunt, authored externally"""
    position: int                         # 1-based, unique within its scope
    group_name: Optional[str] = None      # None in the global scope
    question: str
    answer: str
    clue: Optional[str] = None            # follow-up hint shown after solving


class ProgressRow(BaseModel):
    """Event-log model: one immutable row per solved position"""
    team_name: str
    group_name: Optional[str] = None
    clue_number: int
    solved_at: Optional[str] = None       # ISO timestamp


class Identity(BaseModel):
    """What the session cache remembers about a participant"""
    team_name: str
    group_name: Optional[str] = None


class ProgressModel(str, Enum):
    COUNTER = "counter"
    EVENT_LOG = "event_log"
    LOCAL = "local"


class ClueScope(str, Enum):
    GLOBAL = "global"
    GROUP = "group"


class GroupSettings(BaseModel):
    """Two-track configuration"""
    required: bool = False
    names: List[str] = []
    offsets: Dict[str, int] = {}          # group -> external code offset
    scope_progress: bool = False          # count event-log rows per group
    unique_per_group: bool = False        # team names unique within a group, not hunt-wide


class StorageSettings(BaseModel):
    backend: str = "memory"               # "memory" | "supabase"
    clues_csv: Optional[str] = "data/clues.csv"
    teams_table: str = "teams"
    progress_table: str = "teams_progress"
    questions_table: str = "questions"


class RetryPolicy(BaseModel):
    """Bounded retry for the advance write"""
    attempts: int = 2                     # first try + one retry
    delay_seconds: float = 2.0


class HuntConfig(BaseModel):
    """Server configuration, loaded from YAML"""
    title: str = "Treasure Hunt"
    progress_model: ProgressModel = ProgressModel.EVENT_LOG
    clue_scope: ClueScope = ClueScope.GLOBAL
    groups: GroupSettings = Field(default_factory=GroupSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    advance_retry: RetryPolicy = Field(default_factory=RetryPolicy)
    correct_feedback_delay: float = 0.6   # seconds "Correct!" stays visible
    max_open_pages: int = 1000


class PageState(str, Enum):
    LOADING = "loading"
    REGISTERING = "registering"
    GATING = "gating"
    BLOCKED = "blocked"
    READ_ONLY_SOLVED = "read_only_solved"
    ANSWERING = "answering"
    CORRECT = "correct"
    ADVANCING = "advancing"
    ERROR = "error"


class PageView(BaseModel):
    """Snapshot of a page, handed to the presentation layer"""
    state: PageState
    page_id: Optional[str] = None
    external_position: Optional[int] = None   # code from the QR locator
    position: Optional[int] = None            # in-group position shown to the team
    team_name: Optional[str] = None
    group_name: Optional[str] = None
    question: Optional[str] = None
    hint: Optional[str] = None
    message: Optional[str] = None
    feedback: Optional[str] = None            # "correct" | "wrong"
    editable: bool = False
    select_input: bool = False
    retryable: bool = False
    required_position: Optional[int] = None


class UnsavedAdvance(BaseModel):
    """A correct answer whose progress write was given up"""
    team_name: str
    clue_number: int
    error: str
    failed_at: str
