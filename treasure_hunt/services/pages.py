"""Wiring one page load to the shared store and configuration"""
from typing import Mapping, Optional

from treasure_hunt import state
from treasure_hunt.core.clues import ClueRepository
from treasure_hunt.core.engine import HuntPage
from treasure_hunt.core.identity import IdentityStore
from treasure_hunt.core.progress import build_oracle
from treasure_hunt.core.session_cache import SessionCache
from treasure_hunt.services.page_registry import new_page_id


def open_page(cookies: Optional[Mapping[str, str]] = None) -> HuntPage:
    """Fresh page bound to the participant's session cache"""
    config = state.CONFIG
    store = state.STORE
    if config is None or store is None:
        raise RuntimeError("Hunt is not configured")

    cache = SessionCache(cookies)
    return HuntPage(
        identity_store=IdentityStore(cache, store, config.groups),
        oracle=build_oracle(config, store, cache, on_failure=state.WRITES.report),
        clues=ClueRepository(store, config),
        writes=state.WRITES,
        feedback_delay=config.correct_feedback_delay,
        page_id=new_page_id()
    )


def identity_store(cookies: Optional[Mapping[str, str]] = None) -> IdentityStore:
    """Identity store outside of a page (team registration endpoints)"""
    config = state.CONFIG
    if config is None or state.STORE is None:
        raise RuntimeError("Hunt is not configured")
    return IdentityStore(SessionCache(cookies), state.STORE, config.groups)
