"""
Global application state
Shared resources accessible across all modules

Per-participant state never lives here: each page load gets its own HuntPage.
"""
from typing import Optional

from treasure_hunt.models import HuntConfig
from treasure_hunt.services.background import BackgroundWrites
from treasure_hunt.services.page_registry import PageRegistry
from treasure_hunt.storage.base import HuntStore

# Loaded at startup
CONFIG: Optional[HuntConfig] = None

# Durable store for teams, progress and clues
STORE: Optional[HuntStore] = None

# In-flight progress writes and the ones given up
WRITES: BackgroundWrites = BackgroundWrites()

# Pages waiting for participant input: page-id -> HuntPage
PAGES: PageRegistry = PageRegistry()


def install(config: HuntConfig, store: HuntStore) -> None:
    """Replace the shared resources (startup and tests)"""
    global CONFIG, STORE, WRITES, PAGES
    CONFIG = config
    STORE = store
    WRITES = BackgroundWrites()
    PAGES = PageRegistry(max_pages=config.max_open_pages)
