"""Ticker alias resolution for dual share-class instruments."""
import logging
from typing import Awaitable, Callable, Mapping, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Symmetric: each class points at its sibling. Headline coverage is often
# much denser on one class than the other (e.g. GOOGL vs GOOG).
DEFAULT_TICKER_ALIASES: dict[str, str] = {
    "GOOG": "GOOGL",
    "GOOGL": "GOOG",
    "BRK.A": "BRK.B",
    "BRK.B": "BRK.A",
}

MIN_ARTICLES_BEFORE_FALLBACK = 3


class TickerResolver:
    def __init__(self, aliases: Optional[Mapping[str, str]] = None):
        self.aliases = dict(DEFAULT_TICKER_ALIASES if aliases is None else aliases)

    def resolve(self, symbol: str) -> list[str]:
        """Candidates to try, primary first, at most one alias."""
        primary = symbol.strip().upper()
        alias = self.aliases.get(primary)
        if alias and alias != primary:
            return [primary, alias]
        return [primary]

    async def fetch_with_fallback(
        self,
        symbol: str,
        fetch: Callable[[str], Awaitable[Sequence[T]]],
        min_results: int = MIN_ARTICLES_BEFORE_FALLBACK,
    ) -> tuple[str, list[T]]:
        """Fetch for the primary symbol, escalating to the alias when sparse.

        The alias result replaces the primary one only if it is strictly larger.

        Returns:
            (symbol actually used, results)
        """
        candidates = self.resolve(symbol)
        primary = candidates[0]
        results = list(await fetch(primary))

        if len(results) >= min_results or len(candidates) == 1:
            return primary, results

        alias = candidates[1]
        logger.info(f"{primary} has only {len(results)} results, trying alias {alias}")
        alias_results = list(await fetch(alias))
        if len(alias_results) > len(results):
            logger.info(f"Using alias {alias} ({len(alias_results)} results)")
            return alias, alias_results
        return primary, results
