"""$TICKER parsing helpers."""
import re

TICKER_PATTERN = re.compile(r"\$([A-Za-z]{1,5})\b")

# Path symbols may carry a share-class suffix (BRK.B)
SYMBOL_PATTERN = re.compile(r"^[A-Z]{1,5}(\.[A-Z])?$")


def parse_tickers(text: str) -> list[str]:
    """
    Extract unique $TICKER symbols, upper-cased, in order of first appearance.

    Examples:
        >>> parse_tickers("I love $AAPL and $tsla! $AAPL is great")
        ['AAPL', 'TSLA']
        >>> parse_tickers("$TOOLONG is not a ticker")
        []
    """
    if not text:
        return []

    tickers: list[str] = []
    for match in TICKER_PATTERN.finditer(text):
        ticker = match.group(1).upper()
        if ticker not in tickers:
            tickers.append(ticker)
    return tickers


def is_valid_ticker(symbol: str) -> bool:
    if not symbol:
        return False
    return bool(SYMBOL_PATTERN.match(symbol.strip().upper()))
