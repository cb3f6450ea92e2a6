"""News sentiment aggregate per symbol.

Refresh flow: headlines (with dual-class fallback) → Gemini classification →
normalized breakdown → cache row + stored articles. When the refresh cannot
produce a new aggregate (too few headlines, analysis unavailable), the
previous row is returned flagged as stale; with no previous row the result
is explicitly unavailable.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select, delete, desc
from sqlalchemy.orm import Session

from core.timezone import now_utc
from integrations.finnhub import CompanyNewsArticle, FinnhubClient
from integrations.gemini import NewsSentimentAnalyzer
from integrations.gemini.analyzers import MAX_NEWS_ARTICLES, MIN_NEWS_ARTICLES
from models import NewsArticle, NewsSentimentCache
from services.cache_store import CacheEntry, CacheStore, is_fresh
from services.ticker_resolver import TickerResolver

logger = logging.getLogger(__name__)

NEWS_SENTIMENT_CACHE_TTL = timedelta(minutes=30)
ARTICLE_RETENTION = timedelta(days=7)
RECENT_ARTICLES_LIMIT = 5


@dataclass
class NewsSentimentResult:
    symbol: str
    available: bool
    refreshed: bool = False
    is_stale: bool = False
    stale_reason: Optional[str] = None
    message: Optional[str] = None
    aggregate: Optional[dict] = None
    last_updated: Optional[datetime] = None
    recent_articles: list[dict] = field(default_factory=list)

    @property
    def status(self) -> str:
        if not self.available:
            return "unavailable"
        if self.is_stale:
            return "stale"
        return "updated" if self.refreshed else "cached"

    def to_dict(self) -> dict:
        if not self.available:
            return {"symbol": self.symbol, "available": False, "message": self.message}

        agg = self.aggregate or {}
        data = {
            "symbol": self.symbol,
            "available": True,
            "is_stale": self.is_stale,
            "breakdown": {
                "bullish": {"percentage": agg.get("bullish_percent")},
                "bearish": {"percentage": agg.get("bearish_percent")},
                "neutral": {"percentage": agg.get("neutral_percent")},
            },
            "company_news_score": agg.get("company_news_score"),
            "article_count": agg.get("article_count"),
            "ai_analysis": {
                "summary": agg.get("summary"),
                "key_themes": agg.get("key_themes") or [],
                "sentiment_strength": agg.get("sentiment_strength"),
                "confidence": agg.get("confidence"),
            },
            "recent_articles": self.recent_articles,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }
        if self.is_stale:
            data["stale_reason"] = self.stale_reason
        return data


class NewsSentimentService:
    def __init__(
        self,
        db: Session,
        news_client: FinnhubClient,
        analyzer: NewsSentimentAnalyzer,
        resolver: Optional[TickerResolver] = None,
        cache_ttl: timedelta = NEWS_SENTIMENT_CACHE_TTL,
        lookback_days: int = 7,
    ):
        self.db = db
        self.news_client = news_client
        self.analyzer = analyzer
        self.resolver = resolver or TickerResolver()
        self.cache_ttl = cache_ttl
        self.lookback_days = lookback_days
        self.store = CacheStore(db, NewsSentimentCache, key_field="symbol")

    async def get_news_sentiment(
        self,
        symbol: str,
        force_refresh: bool = False,
        now: Optional[datetime] = None,
    ) -> NewsSentimentResult:
        """Serve the cached aggregate while fresh, otherwise refresh."""
        symbol = symbol.strip().upper()
        now = now or now_utc()
        entry = self.store.get(symbol)
        if not force_refresh and is_fresh(entry, self.cache_ttl, now):
            return self._from_entry(symbol, entry)

        logger.info(f"{'Force refresh' if force_refresh else 'Cache miss/stale'} for {symbol} news sentiment")
        return await self.refresh_symbol(symbol, now=now)

    async def refresh_symbol(self, symbol: str, now: Optional[datetime] = None) -> NewsSentimentResult:
        symbol = symbol.strip().upper()
        now = now or now_utc()

        used_symbol, articles = await self.resolver.fetch_with_fallback(
            symbol,
            lambda s: self.news_client.get_company_news(s, self.lookback_days),
            min_results=MIN_NEWS_ARTICLES,
        )

        if len(articles) < MIN_NEWS_ARTICLES:
            return self._fallback(
                symbol,
                reason=(
                    f"Not enough recent news articles ({len(articles)} found, "
                    f"{MIN_NEWS_ARTICLES} required). Showing previous analysis."
                ),
            )

        batch = articles[:MAX_NEWS_ARTICLES]
        analysis = await self.analyzer.analyze(
            symbol,
            [{"headline": a.headline, "summary": a.summary, "source": a.source} for a in batch],
        )
        if not analysis.available or analysis.breakdown is None:
            return self._fallback(symbol, reason="News analysis unavailable. Showing previous analysis.")

        breakdown = analysis.breakdown
        entry = self.store.upsert(
            symbol,
            {
                "bullish_percent": breakdown.bullish,
                "bearish_percent": breakdown.bearish,
                "neutral_percent": breakdown.neutral,
                "company_news_score": breakdown.score,
                "article_count": len(articles),
                "summary": analysis.analysis.summary,
                "key_themes": analysis.analysis.key_themes,
                "sentiment_strength": analysis.analysis.sentiment_strength,
                "confidence": analysis.analysis.confidence,
            },
            now=now,
        )
        self.save_articles(symbol, batch)
        logger.info(
            f"News sentiment updated for {symbol} (source {used_symbol}): "
            f"{breakdown.bullish}/{breakdown.bearish}/{breakdown.neutral}, {len(articles)} articles"
        )
        return self._from_entry(symbol, entry, refreshed=True)

    def save_articles(self, symbol: str, articles: list[CompanyNewsArticle]) -> int:
        """Upsert by (symbol, url). Returns the number of new rows."""
        created = 0
        for article in articles:
            stmt = select(NewsArticle).where(
                NewsArticle.symbol == symbol,
                NewsArticle.url == article.url,
            )
            row = self.db.execute(stmt).scalar_one_or_none()
            if row is None:
                self.db.add(NewsArticle(
                    symbol=symbol,
                    headline=article.headline,
                    summary=article.summary,
                    source=article.source,
                    url=article.url,
                    image_url=article.image_url,
                    published_at=article.published_at,
                ))
                created += 1
            else:
                row.headline = article.headline
                row.summary = article.summary
        self.db.commit()
        return created

    def get_recent_articles(self, symbol: str, limit: int = RECENT_ARTICLES_LIMIT) -> list[dict]:
        stmt = (
            select(NewsArticle)
            .where(NewsArticle.symbol == symbol)
            .order_by(desc(NewsArticle.published_at))
            .limit(limit)
        )
        return [
            {
                "id": a.id,
                "headline": a.headline,
                "source": a.source,
                "url": a.url,
                "image_url": a.image_url,
                "published_at": a.published_at.isoformat(),
                "sentiment": a.sentiment.value if a.sentiment else None,
            }
            for a in self.db.execute(stmt).scalars().all()
        ]

    def purge_old_articles(
        self,
        retention: timedelta = ARTICLE_RETENTION,
        now: Optional[datetime] = None,
    ) -> int:
        cutoff = (now or now_utc()) - retention
        result = self.db.execute(delete(NewsArticle).where(NewsArticle.published_at < cutoff))
        self.db.commit()
        deleted = result.rowcount or 0
        logger.info(f"Purged {deleted} news articles published before {cutoff.isoformat()}")
        return deleted

    def _from_entry(self, symbol: str, entry: CacheEntry, refreshed: bool = False) -> NewsSentimentResult:
        return NewsSentimentResult(
            symbol=symbol,
            available=True,
            refreshed=refreshed,
            aggregate=entry.value,
            last_updated=entry.last_updated,
            recent_articles=self.get_recent_articles(symbol),
        )

    def _fallback(self, symbol: str, reason: str) -> NewsSentimentResult:
        entry = self.store.get(symbol)
        if entry is None:
            logger.info(f"No news sentiment for {symbol} and no previous analysis")
            return NewsSentimentResult(
                symbol=symbol,
                available=False,
                message="Not enough news articles found for analysis. Try a more popular ticker.",
            )

        logger.info(f"Serving stale news sentiment for {symbol} (last updated {entry.last_updated.isoformat()})")
        result = self._from_entry(symbol, entry)
        result.is_stale = True
        result.stale_reason = reason
        return result
