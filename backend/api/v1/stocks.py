"""Per-symbol sentiment API."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.v1.deps import get_job_context, validate_symbol
from core.database import get_db
from scheduler.context import JobContext
from schemas.sentiment import CommunitySentimentResponse, NewsSentimentResponse
from services.community_sentiment_service import CommunitySentimentService
from services.news_sentiment_service import NewsSentimentService

router = APIRouter()


@router.get("/{symbol}/news-sentiment", response_model=NewsSentimentResponse)
async def get_news_sentiment(
    symbol: str,
    refresh: bool = Query(False, description="Bypass the freshness check"),
    db: Session = Depends(get_db),
    ctx: JobContext = Depends(get_job_context),
):
    """News-derived sentiment. Stale results carry is_stale and a reason."""
    service = NewsSentimentService(
        db,
        news_client=ctx.news_client,
        analyzer=ctx.news_analyzer,
        resolver=ctx.resolver,
        cache_ttl=ctx.news_sentiment_cache_ttl,
        lookback_days=ctx.settings.news_lookback_days,
    )
    result = await service.get_news_sentiment(validate_symbol(symbol), force_refresh=refresh)
    return result.to_dict()


@router.get("/{symbol}/sentiment", response_model=CommunitySentimentResponse)
async def get_community_sentiment(
    symbol: str,
    period: str = Query("24h", description="24h / 7d / 30d; anything else falls back to 24h"),
    db: Session = Depends(get_db),
    ctx: JobContext = Depends(get_job_context),
):
    """Community sentiment breakdown over 24h / 7d / 30d."""
    service = CommunitySentimentService(db, analyzer=ctx.community_analyzer)
    return await service.get_sentiment(validate_symbol(symbol), period=period)
