from .post import Post, PostTicker, Sentiment, InsightType
from .news_article import NewsArticle, NewsSentiment
from .news_sentiment_cache import NewsSentimentCache
from .trending_cache import TrendingCache, TRENDING_CACHE_KEY
from .job_execution_log import JobExecutionLog

__all__ = [
    "Post",
    "PostTicker",
    "Sentiment",
    "InsightType",
    "NewsArticle",
    "NewsSentiment",
    "NewsSentimentCache",
    "TrendingCache",
    "TRENDING_CACHE_KEY",
    "JobExecutionLog",
]
