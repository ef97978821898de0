"""
Configuration endpoints
"""
import logging

from fastapi import APIRouter, HTTPException

from treasure_hunt import state
from treasure_hunt.core.clues import ClueRepository
from treasure_hunt.errors import HuntError
from treasure_hunt.models import ClueScope


router = APIRouter(tags=["config"])
logger = logging.getLogger(__name__)


async def _track_lengths(config) -> dict:
    """Number of clues on each track: per group in the group scope, one shared pool otherwise"""
    clues = ClueRepository(state.STORE, config)
    if config.clue_scope == ClueScope.GROUP:
        return {group: len(await clues.all_clues(group)) for group in config.groups.names}
    return {"*": len(await clues.all_clues())}


@router.get("/config")
async def get_config():
    """Public hunt configuration for the registration form"""
    if state.CONFIG is None or state.STORE is None:
        raise HTTPException(status_code=500, detail="Hunt configuration is not loaded")

    config = state.CONFIG
    try:
        tracks = await _track_lengths(config)
    except HuntError as e:
        logger.warning(f"⚠️ Could not count clues for /config: {e.message}")
        raise HTTPException(status_code=503, detail=e.message)

    return {
        "title": config.title,
        "progress_model": config.progress_model.value,
        "clue_scope": config.clue_scope.value,
        "groups": {
            "required": config.groups.required,
            "names": config.groups.names,
            "unique_per_group": config.groups.unique_per_group,
        },
        "clue_counts": tracks,
    }
