"""Google Gemini AI integration."""
from .client import GeminiClient
from .analyzers import PostQualityAnalyzer, CommunitySentimentAnalyzer, NewsSentimentAnalyzer

__all__ = [
    "GeminiClient",
    "PostQualityAnalyzer",
    "CommunitySentimentAnalyzer",
    "NewsSentimentAnalyzer",
]
