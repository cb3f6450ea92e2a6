"""Finnhub company news client."""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx

from integrations.base_client import BaseAPIClient

logger = logging.getLogger(__name__)


def _text(value) -> str:
    """Stripped string field; anything that is not a string reads as empty."""
    return value.strip() if isinstance(value, str) else ""


@dataclass
class CompanyNewsArticle:
    """A single /company-news headline."""
    headline: str
    source: str
    url: str
    published_at: datetime  # naive UTC
    summary: Optional[str] = None
    image_url: Optional[str] = None


class FinnhubClient(BaseAPIClient):
    """Finnhub API client.

    Docs: https://finnhub.io/docs/api/company-news
    Free tier: 60 calls/minute, so the default rate limit is one call per second.
    An empty list is the only failure signal callers see; rate limits, bad
    credentials and "no news for this symbol" are told apart in the logs only.
    """

    def __init__(
        self,
        api_key: Optional[str],
        rate_limit: float = 1.0,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            base_url="https://finnhub.io/api/v1",
            rate_limit=rate_limit,
            timeout=timeout,
            transport=transport,
        )
        self.api_key = api_key

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def get_headers(self) -> dict[str, str]:
        return {"X-Finnhub-Token": self.api_key or ""}

    async def get_company_news(self, symbol: str, days_back: int = 7) -> list[CompanyNewsArticle]:
        """Fetch recent headlines for a symbol, newest first.

        Args:
            symbol: ticker, e.g. "AAPL"
            days_back: lookback window in days

        Returns:
            Articles, or an empty list on any failure.
        """
        if not self.is_configured:
            logger.warning("Finnhub API key not configured, skipping news fetch")
            return []

        symbol = symbol.upper()
        today = datetime.now(timezone.utc).date()
        params = {
            "symbol": symbol,
            "from": (today - timedelta(days=days_back)).isoformat(),
            "to": today.isoformat(),
        }

        try:
            data = await self.get("/company-news", params=params)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 429:
                logger.error(f"Finnhub rate limit exceeded fetching {symbol} (60 calls/min)")
            elif status in (401, 403):
                logger.error(f"Finnhub rejected credentials fetching {symbol} ({status})")
            else:
                logger.error(f"Finnhub error {status} fetching {symbol}")
            return []
        except httpx.HTTPError as e:
            logger.error(f"Finnhub request failed for {symbol}: {e}")
            return []
        except ValueError as e:
            logger.error(f"Finnhub returned invalid JSON for {symbol}: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"Unexpected Finnhub payload for {symbol}: {str(data)[:200]}")
            return []

        articles = [a for a in (self._parse_article(item) for item in data) if a]
        articles.sort(key=lambda a: a.published_at, reverse=True)

        if not articles:
            logger.info(f"No Finnhub news for {symbol} ({params['from']} ~ {params['to']})")
        else:
            logger.info(f"Fetched {len(articles)} Finnhub articles for {symbol}")
        return articles

    def _parse_article(self, item: dict) -> Optional[CompanyNewsArticle]:
        if not isinstance(item, dict):
            return None
        headline = _text(item.get("headline"))
        url = _text(item.get("url"))
        if not headline or not url:
            return None

        timestamp = item.get("datetime")
        try:
            published_at = datetime.fromtimestamp(int(timestamp), tz=timezone.utc).replace(tzinfo=None)
        except (TypeError, ValueError, OverflowError, OSError):
            return None

        return CompanyNewsArticle(
            headline=headline[:500],
            source=(_text(item.get("source")) or "unknown")[:100],
            url=url[:1000],
            published_at=published_at,
            summary=_text(item.get("summary")) or None,
            image_url=_text(item.get("image")) or None,
        )
