"""
FeedWise API Server

FastAPI application providing endpoints for:
- Feed management (subscribe, edit, remove, refresh, new-content probe)
- Articles (ranked listing, read/saved state, tags, summaries)
- Tags (CRUD, retroactive tagging)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import __version__
from .config import config, state
from .database import Database
from .exceptions import register_exception_handlers
from .feeds import FeedParser
from .ingestion import IngestionEngine
from .rate_limit import setup_rate_limiting
from .summarizer import Summarizer
from .routes import (
    articles_router,
    feeds_router,
    misc_router,
    tags_router,
)

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize application resources."""
    # Startup - skip if already initialized (e.g., by tests)
    if state.db is None:
        config.DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        state.db = Database(config.DB_PATH)
        state.feed_parser = FeedParser(
            timeout=config.FEED_TIMEOUT,
            user_agent=config.FEED_USER_AGENT,
        )
        state.ingestion = IngestionEngine(
            state.db,
            state.feed_parser,
            probe_items=config.NEW_CONTENT_PROBE_ITEMS,
            resolve_favicons=config.RESOLVE_FAVICONS,
        )
        state.summarizer = Summarizer(min_length=config.SUMMARY_MIN_LENGTH)
        logger.info(f"FeedWise {__version__} started with database {config.DB_PATH}")

    yield


app = FastAPI(
    title="FeedWise API",
    version=__version__,
    lifespan=lifespan
)

register_exception_handlers(app)
setup_rate_limiting(app)

# Include routers
app.include_router(misc_router)
app.include_router(feeds_router)
app.include_router(articles_router)
app.include_router(tags_router)


def main():
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("feedwise.server:app", host="127.0.0.1", port=config.PORT)


if __name__ == "__main__":
    main()
