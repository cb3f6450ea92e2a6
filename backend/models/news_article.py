"""Company news article model."""
import enum
import uuid

from sqlalchemy import Column, String, Text, DateTime, Enum, Index, UniqueConstraint

from core.database import Base
from core.timezone import now_utc


class NewsSentiment(str, enum.Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"
    MIXED = "MIXED"


class NewsArticle(Base):
    """Headline fetched for a symbol. Unique per (symbol, url)."""
    __tablename__ = "news_articles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    symbol = Column(String(10), nullable=False)
    headline = Column(String(500), nullable=False)
    summary = Column(Text, nullable=True)
    source = Column(String(100), nullable=False)
    url = Column(String(1000), nullable=False)
    image_url = Column(String(1000), nullable=True)
    published_at = Column(DateTime, nullable=False)
    sentiment = Column(Enum(NewsSentiment, name="newssentiment"), nullable=True)
    created_at = Column(DateTime, default=now_utc, nullable=False)

    __table_args__ = (
        UniqueConstraint("symbol", "url", name="uq_news_articles_symbol_url"),
        Index("ix_news_articles_symbol_published", "symbol", "published_at"),
    )

    def __repr__(self):
        return f"<NewsArticle {self.symbol} - {self.headline[:30]}>"
