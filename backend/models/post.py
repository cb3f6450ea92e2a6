"""Post model (owned by the CRUD layer; the pipeline writes back analysis fields)."""
import enum
import uuid

from sqlalchemy import Column, String, Text, DateTime, Float, ForeignKey, Enum, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from core.database import Base
from core.timezone import now_utc


class Sentiment(str, enum.Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"


class InsightType(str, enum.Enum):
    FUNDAMENTAL = "fundamental"
    TECHNICAL = "technical"
    MACRO = "macro"
    EARNINGS = "earnings"
    RISK = "risk"
    NEWS = "news"
    SENTIMENT = "sentiment"


class Post(Base):
    __tablename__ = "posts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    content = Column(Text, nullable=False)
    sentiment = Column(Enum(Sentiment, name="sentiment"), nullable=False)
    created_at = Column(DateTime, default=now_utc, nullable=False, index=True)

    # Derived quality analysis, each field independently nullable
    quality_score = Column(Float, nullable=True)
    insight_type = Column(String(20), nullable=True)  # InsightType value
    sector = Column(String(100), nullable=True)
    summary = Column(String(150), nullable=True)

    tickers = relationship(
        "PostTicker",
        back_populates="post",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def ticker_symbols(self) -> list[str]:
        return [t.symbol for t in self.tickers]

    def __repr__(self):
        return f"<Post {self.id} {self.sentiment}>"


class PostTicker(Base):
    """Ticker mention extracted from a post."""
    __tablename__ = "post_tickers"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    post_id = Column(String(36), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    symbol = Column(String(10), nullable=False)

    post = relationship("Post", back_populates="tickers")

    __table_args__ = (
        UniqueConstraint("post_id", "symbol", name="uq_post_tickers_post_symbol"),
        Index("ix_post_tickers_symbol", "symbol"),
    )

    def __repr__(self):
        return f"<PostTicker {self.symbol}>"
