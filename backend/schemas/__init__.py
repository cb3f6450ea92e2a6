from .trending import TrendingItem, TrendingResponse
from .sentiment import (
    SentimentBucket,
    SentimentBreakdownSchema,
    AISummary,
    CommunitySentimentResponse,
    NewsArticleItem,
    NewsSentimentResponse,
)
from .job import AnalyzePostResponse, JobLastRun, JobStats, SchedulerStatusResponse

__all__ = [
    "TrendingItem",
    "TrendingResponse",
    "SentimentBucket",
    "SentimentBreakdownSchema",
    "AISummary",
    "CommunitySentimentResponse",
    "NewsArticleItem",
    "NewsSentimentResponse",
    "AnalyzePostResponse",
    "JobLastRun",
    "JobStats",
    "SchedulerStatusResponse",
]
