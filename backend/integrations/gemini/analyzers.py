"""Gemini-backed analysis adapters.

Each adapter wraps an injected GeminiClient and returns a validated result.
A missing API key, a failed call and an unparsable response all produce the
same "unavailable" value, so callers handle a single no-analysis branch.
"""
import logging
from typing import Optional, Sequence

from integrations.gemini.client import GeminiClient
from integrations.gemini.prompts import (
    COMMUNITY_SYSTEM_PROMPT,
    NEWS_SYSTEM_PROMPT,
    POST_QUALITY_SYSTEM_PROMPT,
    build_community_prompt,
    build_news_prompt,
    build_post_prompt,
)
from services.validators import (
    NewsSentimentAnalysis,
    PostAnalysis,
    SentimentSummary,
    parse_news_sentiment,
    parse_post_analysis,
    parse_sentiment_summary,
)

logger = logging.getLogger(__name__)

MIN_COMMUNITY_POSTS = 3
MAX_COMMUNITY_POSTS = 10
MIN_NEWS_ARTICLES = 3
MAX_NEWS_ARTICLES = 10


class PostQualityAnalyzer:
    """Scores a single post (quality, insight type, sector, summary)."""

    max_output_tokens = 256

    def __init__(self, client: GeminiClient):
        self.client = client

    @property
    def is_configured(self) -> bool:
        return self.client.is_configured

    async def analyze(self, content: str, tickers: Sequence[str]) -> PostAnalysis:
        if not self.client.is_configured:
            logger.warning("Gemini not configured, skipping post analysis")
            return PostAnalysis.unavailable()

        try:
            text = await self.client.generate(
                build_post_prompt(content, list(tickers)),
                system_instruction=POST_QUALITY_SYSTEM_PROMPT,
                max_output_tokens=self.max_output_tokens,
            )
        except Exception as e:
            logger.error(f"Post analysis call failed: {e}")
            return PostAnalysis.unavailable()

        if text is None:
            return PostAnalysis.unavailable()
        return parse_post_analysis(text)


class CommunitySentimentAnalyzer:
    """Summarizes what the community is saying about a symbol."""

    max_output_tokens = 300

    def __init__(self, client: GeminiClient):
        self.client = client

    async def summarize(
        self,
        symbol: str,
        period: str,
        posts: Sequence[dict],
        breakdown: dict,
    ) -> SentimentSummary:
        """
        Args:
            symbol: ticker, e.g. "AAPL"
            period: "24h" / "7d" / "30d"
            posts: [{"content", "sentiment", "quality_score"}], highest quality first
            breakdown: {"bullish": %, "bearish": %, "neutral": %}
        """
        # Cost gate: too few posts is not worth a model call
        if len(posts) < MIN_COMMUNITY_POSTS:
            logger.info(
                f"Not enough posts for {symbol} community analysis "
                f"({len(posts)}, need {MIN_COMMUNITY_POSTS})"
            )
            return SentimentSummary.unavailable()

        if not self.client.is_configured:
            logger.warning("Gemini not configured, skipping community analysis")
            return SentimentSummary.unavailable()

        try:
            text = await self.client.generate(
                build_community_prompt(symbol, period, list(posts)[:MAX_COMMUNITY_POSTS], breakdown),
                system_instruction=COMMUNITY_SYSTEM_PROMPT,
                max_output_tokens=self.max_output_tokens,
            )
        except Exception as e:
            logger.error(f"Community analysis call failed for {symbol}: {e}")
            return SentimentSummary.unavailable()

        return parse_sentiment_summary(text)


class NewsSentimentAnalyzer:
    """Classifies a batch of headlines into a bullish/bearish/neutral split."""

    max_output_tokens = 400

    def __init__(self, client: GeminiClient):
        self.client = client

    async def analyze(self, symbol: str, articles: Sequence[dict]) -> NewsSentimentAnalysis:
        """
        Args:
            symbol: ticker
            articles: [{"headline", "summary", "source"}], newest first
        """
        if len(articles) < MIN_NEWS_ARTICLES:
            logger.info(
                f"Not enough articles for {symbol} news analysis "
                f"({len(articles)}, need {MIN_NEWS_ARTICLES})"
            )
            return NewsSentimentAnalysis.unavailable()

        if not self.client.is_configured:
            logger.warning("Gemini not configured, skipping news analysis")
            return NewsSentimentAnalysis.unavailable()

        text: Optional[str]
        try:
            text = await self.client.generate(
                build_news_prompt(symbol, list(articles)[:MAX_NEWS_ARTICLES]),
                system_instruction=NEWS_SYSTEM_PROMPT.format(symbol=symbol),
                max_output_tokens=self.max_output_tokens,
            )
        except Exception as e:
            logger.error(f"News analysis call failed for {symbol}: {e}")
            return NewsSentimentAnalysis.unavailable()

        return parse_news_sentiment(text)
