"""Trending tickers refresh (every 5 minutes)."""
import logging

from scheduler.context import JobContext
from services.trending_service import TrendingService

logger = logging.getLogger(__name__)

TRENDING_REFRESH_RETRIES = 3


async def refresh_trending(ctx: JobContext) -> dict:
    logger.info("Starting trending refresh...")
    db = ctx.session_factory()
    try:
        entry = TrendingService(db, cache_ttl=ctx.trending_cache_ttl).refresh()
        return {"count": len(entry.value["data"]), "updated_at": entry.last_updated.isoformat()}
    finally:
        db.close()
