"""Trending tickers API."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.v1.deps import get_job_context
from core.database import get_db
from scheduler.context import JobContext
from schemas.trending import TrendingResponse
from services.trending_service import TrendingService

router = APIRouter()


@router.get("", response_model=TrendingResponse)
def get_trending(
    refresh: bool = Query(False, description="Bypass the freshness check"),
    db: Session = Depends(get_db),
    ctx: JobContext = Depends(get_job_context),
):
    """Top 10 tickers by mentions in the last 24 hours."""
    service = TrendingService(db, cache_ttl=ctx.trending_cache_ttl)
    return service.get_trending(force_refresh=refresh)
