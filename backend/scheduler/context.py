"""Dependencies handed to every job function."""
import asyncio
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Awaitable, Callable, Optional

from sqlalchemy.orm import Session

from core.config import Settings, get_settings
from integrations.finnhub import FinnhubClient
from integrations.gemini import (
    CommunitySentimentAnalyzer,
    GeminiClient,
    NewsSentimentAnalyzer,
    PostQualityAnalyzer,
)
from services.ticker_resolver import TickerResolver


@dataclass
class JobContext:
    session_factory: Callable[[], Session]
    post_analyzer: PostQualityAnalyzer
    community_analyzer: CommunitySentimentAnalyzer
    news_analyzer: NewsSentimentAnalyzer
    news_client: FinnhubClient
    resolver: TickerResolver = field(default_factory=TickerResolver)
    settings: Settings = field(default_factory=get_settings)
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    @property
    def trending_cache_ttl(self) -> timedelta:
        return timedelta(minutes=self.settings.trending_cache_ttl_minutes)

    @property
    def news_sentiment_cache_ttl(self) -> timedelta:
        return timedelta(minutes=self.settings.news_sentiment_cache_ttl_minutes)

    @property
    def article_retention(self) -> timedelta:
        return timedelta(days=self.settings.article_retention_days)

    async def close(self) -> None:
        """Release pooled provider connections."""
        await self.news_client.close()


def build_job_context(
    settings: Optional[Settings] = None,
    session_factory: Optional[Callable[[], Session]] = None,
) -> JobContext:
    """Wire real provider clients from settings."""
    settings = settings or get_settings()
    if session_factory is None:
        from core.database import SessionLocal
        session_factory = SessionLocal

    gemini = GeminiClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        timeout=settings.gemini_timeout_seconds,
        max_retries=settings.gemini_max_retries,
    )
    return JobContext(
        session_factory=session_factory,
        post_analyzer=PostQualityAnalyzer(gemini),
        community_analyzer=CommunitySentimentAnalyzer(gemini),
        news_analyzer=NewsSentimentAnalyzer(gemini),
        news_client=FinnhubClient(
            api_key=settings.finnhub_api_key,
            rate_limit=settings.finnhub_rate_limit,
        ),
        resolver=TickerResolver(),
        settings=settings,
    )
