"""Trending tickers schemas."""
from pydantic import BaseModel


class TrendingItem(BaseModel):
    symbol: str
    count: int


class TrendingResponse(BaseModel):
    trending: list[TrendingItem]
    updated_at: str
