"""News sentiment refresh for every active ticker (every 30 minutes).

Tickers are processed one at a time with a pause between them to stay under
the headline provider's rate limit. Each ticker gets its own session, and a
failure is recorded in the run result without stopping the loop.
"""
import logging

from scheduler.context import JobContext
from services.news_sentiment_service import NewsSentimentService
from services.post_service import PostService

logger = logging.getLogger(__name__)

NEWS_SENTIMENT_REFRESH_RETRIES = 3


def _active_symbols(ctx: JobContext) -> list[str]:
    db = ctx.session_factory()
    try:
        return PostService(db).get_active_symbols()
    finally:
        db.close()


async def refresh_symbol_news_sentiment(ctx: JobContext, symbol: str) -> dict:
    db = ctx.session_factory()
    try:
        service = NewsSentimentService(
            db,
            news_client=ctx.news_client,
            analyzer=ctx.news_analyzer,
            resolver=ctx.resolver,
            cache_ttl=ctx.news_sentiment_cache_ttl,
            lookback_days=ctx.settings.news_lookback_days,
        )
        result = await service.refresh_symbol(symbol)
        entry = {"symbol": symbol, "status": result.status}
        if result.is_stale:
            entry["reason"] = result.stale_reason
        return entry
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


async def refresh_news_sentiment(ctx: JobContext) -> dict:
    symbols = _active_symbols(ctx)
    if not symbols:
        logger.info("News sentiment refresh: no active tickers")
        return {"processed": 0, "results": []}

    logger.info(f"Starting news sentiment refresh for {len(symbols)} tickers")
    results = []
    for i, symbol in enumerate(symbols):
        if i > 0:
            await ctx.sleep(ctx.settings.news_refresh_delay_seconds)
        try:
            results.append(await refresh_symbol_news_sentiment(ctx, symbol))
        except Exception as e:
            logger.error(f"News sentiment refresh failed for {symbol}: {e}", exc_info=True)
            results.append({"symbol": symbol, "status": "error", "error": str(e)})

    failed = sum(1 for r in results if r["status"] == "error")
    logger.info(f"News sentiment refresh completed: {len(results) - failed} ok, {failed} failed")
    return {"processed": len(results), "results": results}
