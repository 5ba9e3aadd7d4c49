from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from backlink_tracker import __version__
from backlink_tracker.config import get_settings
from backlink_tracker.database import Database
from backlink_tracker.errors import register_exception_handlers
from backlink_tracker.routers import backlinks, lookups, resources, stats, website_info, websites

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database on startup and close the pool on shutdown."""
    database = getattr(app.state, "database", None)
    if database is None:
        database = Database(settings=settings)
        app.state.database = database
    await database.connect()
    logger.info("Backlink tracker started")
    try:
        yield
    finally:
        await database.dispose()


app = FastAPI(
    title="Backlink Tracker",
    description="Track backlink placements of websites across resource directories",
    version=__version__,
    lifespan=lifespan,
    root_path=settings.base_path
)

register_exception_handlers(app)

# Register routers
app.include_router(websites.router)
app.include_router(resources.router)
app.include_router(backlinks.router)
app.include_router(stats.router)
app.include_router(website_info.router)
app.include_router(lookups.website_categories_router)
app.include_router(lookups.backlink_statuses_router)


@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint."""
    database = getattr(request.app.state, "database", None)
    healthy = database is not None and await database.ping()
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "ok" if healthy else "unavailable",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("backlink_tracker.main:app", host="0.0.0.0", port=8000)
