"""Per-symbol news sentiment aggregate."""
import uuid

from sqlalchemy import Column, String, Text, DateTime, Float, Integer, JSON

from core.database import Base
from core.timezone import now_utc


class NewsSentimentCache(Base):
    __tablename__ = "news_sentiment_cache"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    symbol = Column(String(10), unique=True, nullable=False)

    bullish_percent = Column(Integer, nullable=False)
    bearish_percent = Column(Integer, nullable=False)
    neutral_percent = Column(Integer, nullable=False)
    company_news_score = Column(Float, nullable=False)  # (bullish - bearish) / 100
    article_count = Column(Integer, nullable=False)

    summary = Column(Text, nullable=True)
    key_themes = Column(JSON, nullable=True)
    sentiment_strength = Column(String(20), nullable=True)  # strong/moderate/weak/mixed
    confidence = Column(String(10), nullable=True)  # high/medium/low

    last_updated = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=now_utc, nullable=False)

    def __repr__(self):
        return f"<NewsSentimentCache {self.symbol} score={self.company_news_score}>"
