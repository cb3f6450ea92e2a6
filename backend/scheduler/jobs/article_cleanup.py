"""Daily purge of stored headlines past the retention window."""
import logging

from scheduler.context import JobContext
from services.news_sentiment_service import NewsSentimentService

logger = logging.getLogger(__name__)

ARTICLE_CLEANUP_RETRIES = 1


async def purge_old_articles(ctx: JobContext) -> dict:
    db = ctx.session_factory()
    try:
        service = NewsSentimentService(db, news_client=ctx.news_client, analyzer=ctx.news_analyzer)
        deleted = service.purge_old_articles(retention=ctx.article_retention)
        return {"deleted": deleted}
    finally:
        db.close()
