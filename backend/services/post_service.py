"""Post queries used by the analysis pipeline."""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, distinct, desc
from sqlalchemy.orm import Session

from models import Post, PostTicker
from services.validators import PostAnalysis

logger = logging.getLogger(__name__)

QUALITY_POST_MIN_SCORE = 0.4
QUALITY_POST_LIMIT = 10


class PostService:
    def __init__(self, db: Session):
        self.db = db

    def get_post(self, post_id: str) -> Optional[Post]:
        return self.db.get(Post, post_id)

    def save_analysis(self, post_id: str, analysis: PostAnalysis) -> Optional[Post]:
        """Overwrite all four analysis fields. Returns None if the post is gone."""
        post = self.get_post(post_id)
        if post is None:
            return None

        post.quality_score = analysis.quality_score
        post.insight_type = analysis.insight_type
        post.sector = analysis.sector
        post.summary = analysis.summary
        self.db.commit()
        self.db.refresh(post)
        return post

    def get_mentions_since(self, since: datetime) -> list[tuple[str, datetime]]:
        """(symbol, created_at) for every ticker mention on posts newer than `since`."""
        stmt = (
            select(PostTicker.symbol, Post.created_at)
            .join(Post, Post.id == PostTicker.post_id)
            .where(Post.created_at > since)
        )
        return [(row[0], row[1]) for row in self.db.execute(stmt).all()]

    def get_active_symbols(self) -> list[str]:
        """Distinct symbols referenced by any post."""
        stmt = select(distinct(PostTicker.symbol)).order_by(PostTicker.symbol)
        return [row[0] for row in self.db.execute(stmt).all()]

    def get_sentiments_since(self, symbol: str, since: datetime) -> list[tuple[str, datetime]]:
        stmt = (
            select(Post.sentiment, Post.created_at)
            .join(PostTicker, PostTicker.post_id == Post.id)
            .where(PostTicker.symbol == symbol, Post.created_at > since)
        )
        return [(row[0].value, row[1]) for row in self.db.execute(stmt).all()]

    def get_quality_posts(
        self,
        symbol: str,
        since: datetime,
        min_score: float = QUALITY_POST_MIN_SCORE,
        limit: int = QUALITY_POST_LIMIT,
    ) -> list[dict]:
        """Highest-scoring posts for a symbol, for community summarization."""
        stmt = (
            select(Post)
            .join(PostTicker, PostTicker.post_id == Post.id)
            .where(
                PostTicker.symbol == symbol,
                Post.created_at > since,
                Post.quality_score > min_score,
            )
            .order_by(desc(Post.quality_score), desc(Post.created_at))
            .limit(limit)
        )
        posts = self.db.execute(stmt).scalars().all()
        return [
            {
                "content": p.content,
                "sentiment": p.sentiment.value,
                "quality_score": p.quality_score,
            }
            for p in posts
        ]
