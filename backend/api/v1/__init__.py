from . import trending, stocks, posts, health

__all__ = [
    "trending",
    "stocks",
    "posts",
    "health",
]
