"""
Health check and system status endpoints
"""
from fastapi import APIRouter

from treasure_hunt import __version__, state


router = APIRouter(tags=["health"])


@router.get("/")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "message": state.CONFIG.title if state.CONFIG else "Treasure Hunt",
        "version": __version__,
        "open_pages": len(state.PAGES),
        "pending_writes": state.WRITES.pending,
        "unsaved_advances": [f.model_dump() for f in state.WRITES.recent_failures()]
    }
