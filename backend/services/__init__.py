from .post_service import PostService
from .trending_service import TrendingService
from .cache_store import CacheStore, CacheEntry, is_fresh
from .ticker_resolver import TickerResolver

__all__ = [
    "PostService",
    "TrendingService",
    "CacheStore",
    "CacheEntry",
    "is_fresh",
    "TickerResolver",
]
