"""Pure counting functions for trending tickers and sentiment breakdowns.

Windows use an exclusive lower bound everywhere: a row created exactly at
`now - window` is outside the window.
"""
import math
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

TRENDING_WINDOW = timedelta(hours=24)
TRENDING_LIMIT = 10

PERIODS: dict[str, timedelta] = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}
DEFAULT_PERIOD = "24h"

SENTIMENT_LABELS = ("BULLISH", "BEARISH", "NEUTRAL")


@dataclass(frozen=True)
class TrendingEntry:
    symbol: str
    count: int

    def to_dict(self) -> dict:
        return {"symbol": self.symbol, "count": self.count}


@dataclass
class SentimentBucket:
    count: int = 0
    percentage: int = 0


@dataclass
class SentimentBreakdown:
    total: int
    bullish: SentimentBucket
    bearish: SentimentBucket
    neutral: SentimentBucket

    def percentages(self) -> dict[str, int]:
        return {
            "bullish": self.bullish.percentage,
            "bearish": self.bearish.percentage,
            "neutral": self.neutral.percentage,
        }

    def to_dict(self) -> dict:
        return {
            "bullish": {"count": self.bullish.count, "percentage": self.bullish.percentage},
            "bearish": {"count": self.bearish.count, "percentage": self.bearish.percentage},
            "neutral": {"count": self.neutral.count, "percentage": self.neutral.percentage},
        }


def window_start(now: datetime, window: timedelta) -> datetime:
    return now - window


def in_window(created_at: datetime, now: datetime, window: timedelta) -> bool:
    return window_start(now, window) < created_at <= now


def resolve_period(period: str) -> str:
    """Unknown period labels fall back to 24h."""
    return period if period in PERIODS else DEFAULT_PERIOD


def compute_trending(
    mentions: Iterable[tuple[str, datetime]],
    now: datetime,
    window: timedelta = TRENDING_WINDOW,
    limit: int = TRENDING_LIMIT,
) -> list[TrendingEntry]:
    """Rank symbols by mention count within the trailing window.

    Args:
        mentions: (symbol, post created_at) pairs, one per post mention
        now: reference time (naive UTC)

    Returns:
        At most `limit` entries, count descending, symbol ascending on ties.
    """
    counts = Counter(
        symbol for symbol, created_at in mentions if in_window(created_at, now, window)
    )
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [TrendingEntry(symbol=s, count=c) for s, c in ranked[:limit]]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_sentiment_breakdown(sentiments: Iterable[str]) -> SentimentBreakdown:
    """Count sentiment labels and convert to integer percentages.

    A zero total yields all-zero percentages. Otherwise neutral absorbs the
    rounding remainder so the three percentages sum to 100.
    """
    counts = Counter(str(getattr(s, "value", s)).upper() for s in sentiments)
    bullish = counts.get("BULLISH", 0)
    bearish = counts.get("BEARISH", 0)
    neutral = counts.get("NEUTRAL", 0)
    total = bullish + bearish + neutral

    if total == 0:
        return SentimentBreakdown(
            total=0,
            bullish=SentimentBucket(),
            bearish=SentimentBucket(),
            neutral=SentimentBucket(),
        )

    bullish_pct = _round_half_up(bullish / total * 100)
    bearish_pct = min(100 - bullish_pct, _round_half_up(bearish / total * 100))
    return SentimentBreakdown(
        total=total,
        bullish=SentimentBucket(bullish, bullish_pct),
        bearish=SentimentBucket(bearish, bearish_pct),
        neutral=SentimentBucket(neutral, 100 - bullish_pct - bearish_pct),
    )
