"""Community and news sentiment schemas."""
from typing import Optional
from pydantic import BaseModel, Field


class SentimentBucket(BaseModel):
    count: Optional[int] = None
    percentage: Optional[int] = None


class SentimentBreakdownSchema(BaseModel):
    bullish: SentimentBucket
    bearish: SentimentBucket
    neutral: SentimentBucket


class AISummary(BaseModel):
    summary: Optional[str] = None
    key_themes: list[str] = Field(default_factory=list)
    sentiment_strength: Optional[str] = Field(None, description="strong / moderate / weak / mixed")
    confidence: Optional[str] = Field(None, description="high / medium / low")


class CommunitySentimentResponse(BaseModel):
    symbol: str
    period: str = Field(description="24h / 7d / 30d")
    total_posts: int
    sentiment: SentimentBreakdownSchema
    ai_summary: Optional[AISummary] = None
    quality_post_count: int
    updated_at: str


class NewsArticleItem(BaseModel):
    id: str
    headline: str
    source: str
    url: str
    image_url: Optional[str] = None
    published_at: str
    sentiment: Optional[str] = None


class NewsSentimentResponse(BaseModel):
    """Available (possibly stale) aggregate, or available=False with a message."""
    symbol: str
    available: bool
    message: Optional[str] = None
    is_stale: bool = False
    stale_reason: Optional[str] = None
    breakdown: Optional[SentimentBreakdownSchema] = None
    company_news_score: Optional[float] = Field(None, description="(bullish - bearish) / 100")
    article_count: Optional[int] = None
    ai_analysis: Optional[AISummary] = None
    recent_articles: list[NewsArticleItem] = Field(default_factory=list)
    last_updated: Optional[str] = None
