"""Trending tickers aggregate."""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from core.timezone import now_utc
from models import TrendingCache, TRENDING_CACHE_KEY
from services.aggregator import TRENDING_WINDOW, compute_trending, window_start
from services.cache_store import CacheEntry, CacheStore, is_fresh
from services.post_service import PostService

logger = logging.getLogger(__name__)

TRENDING_CACHE_TTL = timedelta(minutes=10)


class TrendingService:
    def __init__(self, db: Session, cache_ttl: timedelta = TRENDING_CACHE_TTL):
        self.db = db
        self.cache_ttl = cache_ttl
        self.store = CacheStore(db, TrendingCache, key_field="id", timestamp_field="updated_at")
        self.posts = PostService(db)

    def refresh(self, now: Optional[datetime] = None) -> CacheEntry:
        """Recompute from live posts and replace the singleton row."""
        now = now or now_utc()
        mentions = self.posts.get_mentions_since(window_start(now, TRENDING_WINDOW))
        trending = compute_trending(mentions, now)
        entry = self.store.upsert(
            TRENDING_CACHE_KEY,
            {"data": [t.to_dict() for t in trending]},
            now=now,
        )
        logger.info(f"Trending refreshed: {len(trending)} symbols from {len(mentions)} mentions")
        return entry

    def get_trending(self, force_refresh: bool = False, now: Optional[datetime] = None) -> dict:
        now = now or now_utc()
        entry = self.store.get(TRENDING_CACHE_KEY)
        if force_refresh or not is_fresh(entry, self.cache_ttl, now):
            entry = self.refresh(now)
        return {
            "trending": entry.value["data"],
            "updated_at": entry.last_updated.isoformat(),
        }
