"""
FastAPI main application
Treasure Hunt - sequential QR clue progression server

Modular architecture with separated API routers in treasure_hunt/api/:
- health.py: Health check and write status
- config.py: Public hunt configuration
- hunt.py: Participant pages (open clue, register, answer)
- team.py: Team registration outside of a page

All routers access shared resources via treasure_hunt.state.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from treasure_hunt import __version__, state
from treasure_hunt.clue_loader import load_clues
from treasure_hunt.config import load_config
from treasure_hunt.models import HuntConfig
from treasure_hunt.storage import HuntStore, MemoryStore

# Import all API routers
from treasure_hunt.api import health, hunt, team
from treasure_hunt.api import config as config_router


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def build_store(config: HuntConfig) -> HuntStore:
    """Store for the configured backend"""
    backend = config.storage.backend
    if backend == "memory":
        clues = load_clues(config.storage.clues_csv) if config.storage.clues_csv else {}
        return MemoryStore(clues, unique_per_group=config.groups.unique_per_group)
    if backend == "supabase":
        from treasure_hunt.storage.supabase_store import create_supabase_store
        return await create_supabase_store(config.storage, config.groups.unique_per_group)
    raise ValueError(f"Unknown storage backend: {backend}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup: load configuration and connect the store
    try:
        config = load_config()
        store = await build_store(config)
        state.install(config, store)
        logger.info(
            f"✅ Server started | progress: {config.progress_model.value} | "
            f"clues: {config.clue_scope.value} | storage: {config.storage.backend}"
        )
    except Exception as e:
        logger.error(f"❌ Failed to start hunt: {e}")
        raise

    yield

    # Shutdown: let acknowledged answers reach the store
    if state.WRITES.pending:
        logger.info(f"⏳ Waiting for {state.WRITES.pending} progress writes")
    await state.WRITES.drain()
    if state.STORE is not None:
        await state.STORE.close()
    logger.info("🛑 Server shutting down")


# Create FastAPI app
app = FastAPI(
    title="Treasure Hunt",
    description="Sequential QR clue progression server",
    version=__version__,
    lifespan=lifespan
)

# CORS middleware (allow all origins for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== INCLUDE ROUTERS ====================

# Health check (GET /)
app.include_router(health.router)

# Config endpoint (GET /config)
app.include_router(config_router.router)

# Participant pages (GET /clue, POST /pages/{page_id}/register|answer)
app.include_router(hunt.router)

# Team endpoints (POST /teams/register, /teams/forget)
app.include_router(team.router)


# ==================== RUN SERVER ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
