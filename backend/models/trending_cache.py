"""Trending tickers aggregate (singleton row)."""
from sqlalchemy import Column, String, DateTime, JSON

from core.database import Base

TRENDING_CACHE_KEY = "singleton"


class TrendingCache(Base):
    __tablename__ = "trending_cache"

    id = Column(String(20), primary_key=True, default=TRENDING_CACHE_KEY)
    data = Column(JSON, nullable=False)  # [{"symbol": "AAPL", "count": 42}, ...]
    updated_at = Column(DateTime, nullable=False)
