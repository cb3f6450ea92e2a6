"""Community sentiment per symbol, computed on demand from posts."""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from core.timezone import now_utc
from integrations.gemini import CommunitySentimentAnalyzer
from integrations.gemini.analyzers import MAX_COMMUNITY_POSTS, MIN_COMMUNITY_POSTS
from services.aggregator import PERIODS, compute_sentiment_breakdown, resolve_period, window_start
from services.post_service import QUALITY_POST_MIN_SCORE, PostService

logger = logging.getLogger(__name__)


class CommunitySentimentService:
    def __init__(self, db: Session, analyzer: Optional[CommunitySentimentAnalyzer] = None):
        self.db = db
        self.analyzer = analyzer
        self.posts = PostService(db)

    async def get_sentiment(
        self,
        symbol: str,
        period: str = "24h",
        now: Optional[datetime] = None,
    ) -> dict:
        symbol = symbol.strip().upper()
        period = resolve_period(period)
        now = now or now_utc()
        since = window_start(now, PERIODS[period])

        rows = self.posts.get_sentiments_since(symbol, since)
        breakdown = compute_sentiment_breakdown(sentiment for sentiment, _ in rows)

        ai_summary = None
        quality_posts: list[dict] = []
        if breakdown.total >= MIN_COMMUNITY_POSTS:
            quality_posts = self.posts.get_quality_posts(
                symbol, since, min_score=QUALITY_POST_MIN_SCORE, limit=MAX_COMMUNITY_POSTS
            )
            if self.analyzer is not None:
                summary = await self.analyzer.summarize(
                    symbol, period, quality_posts, breakdown.percentages()
                )
                if summary.is_available:
                    ai_summary = summary.to_dict()

        logger.debug(f"Community sentiment {symbol}/{period}: {breakdown.total} posts")
        return {
            "symbol": symbol,
            "period": period,
            "total_posts": breakdown.total,
            "sentiment": breakdown.to_dict(),
            "ai_summary": ai_summary,
            "quality_post_count": len(quality_posts),
            "updated_at": now.isoformat(),
        }
