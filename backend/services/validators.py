"""Sanitizers for untrusted generative-model output.

Every validator returns either a value satisfying its domain constraint or
None. Nothing here raises on bad input: an unparsable response is a normal
outcome of an unreliable upstream and maps to an "unavailable" result.
"""
import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)

INSIGHT_TYPES = (
    "fundamental",
    "technical",
    "macro",
    "earnings",
    "risk",
    "news",
    "sentiment",
)
SENTIMENT_STRENGTHS = ("strong", "moderate", "weak", "mixed")
CONFIDENCE_LEVELS = ("high", "medium", "low")

POST_SUMMARY_MAX_LENGTH = 150
SENTIMENT_SUMMARY_MAX_LENGTH = 300
MAX_KEY_THEMES = 3
ELLIPSIS = "..."
# Three capped components still sum to a finite float
PERCENT_COMPONENT_CAP = 1e300

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


@dataclass
class PostAnalysis:
    quality_score: Optional[float] = None
    insight_type: Optional[str] = None
    sector: Optional[str] = None
    summary: Optional[str] = None

    @classmethod
    def unavailable(cls) -> "PostAnalysis":
        return cls()

    @property
    def is_available(self) -> bool:
        return any(
            v is not None
            for v in (self.quality_score, self.insight_type, self.sector, self.summary)
        )

    def to_dict(self) -> dict:
        return {
            "quality_score": self.quality_score,
            "insight_type": self.insight_type,
            "sector": self.sector,
            "summary": self.summary,
        }


@dataclass
class SentimentSummary:
    summary: Optional[str] = None
    key_themes: list[str] = field(default_factory=list)
    sentiment_strength: Optional[str] = None
    confidence: Optional[str] = None

    @classmethod
    def unavailable(cls) -> "SentimentSummary":
        return cls()

    @property
    def is_available(self) -> bool:
        return bool(
            self.summary or self.key_themes or self.sentiment_strength or self.confidence
        )

    def to_dict(self) -> dict:
        return {
            "summary": self.summary,
            "key_themes": list(self.key_themes),
            "sentiment_strength": self.sentiment_strength,
            "confidence": self.confidence,
        }


@dataclass
class PercentageBreakdown:
    bullish: int
    bearish: int
    neutral: int

    @property
    def score(self) -> float:
        """(bullish - bearish) / 100, in [-1, 1]."""
        return (self.bullish - self.bearish) / 100


@dataclass
class NewsSentimentAnalysis:
    """AI classification of a batch of headlines."""
    available: bool = False
    analysis: SentimentSummary = field(default_factory=SentimentSummary)
    breakdown: Optional[PercentageBreakdown] = None

    @classmethod
    def unavailable(cls) -> "NewsSentimentAnalysis":
        return cls()


# ---------------------------------------------------------------------------
# JSON extraction
# ---------------------------------------------------------------------------

def extract_json_object(text: Optional[str]) -> Optional[dict]:
    """Locate and parse the outermost {...} block in a model response.

    Handles markdown fences and leading/trailing chatter. Returns None when no
    object can be found or parsed.
    """
    if not text:
        return None
    match = _JSON_OBJECT_RE.search(text)
    if not match:
        logger.warning(f"No JSON object in response: {text[:200]}")
        return None
    try:
        parsed = json.loads(match.group(0))
    except (json.JSONDecodeError, ValueError):
        logger.warning(f"JSON parsing failed: {text[:200]}")
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed


# ---------------------------------------------------------------------------
# Field validators
# ---------------------------------------------------------------------------

def _is_number(value: Any) -> bool:
    # bool is an int subclass but JSON true/false is not a score
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_quality_score(value: Any) -> Optional[float]:
    if not _is_number(value):
        return None
    if isinstance(value, int):
        # JSON integers can exceed the float range
        return float(max(0, min(1, value)))
    if not math.isfinite(value):
        return None
    return float(max(0.0, min(1.0, value)))


def _validate_enum(value: Any, allowed: tuple[str, ...]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    normalized = value.strip().lower()
    return normalized if normalized in allowed else None


def validate_insight_type(value: Any) -> Optional[str]:
    return _validate_enum(value, INSIGHT_TYPES)


def validate_sentiment_strength(value: Any) -> Optional[str]:
    return _validate_enum(value, SENTIMENT_STRENGTHS)


def validate_confidence(value: Any) -> Optional[str]:
    return _validate_enum(value, CONFIDENCE_LEVELS)


def validate_sector(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed or trimmed.lower() == "unknown":
        return None
    return " ".join(word[:1].upper() + word[1:].lower() for word in trimmed.split(" "))


def truncate_text(value: Any, max_length: int) -> Optional[str]:
    """Trim; blank → None; longer than max_length → cut with an ellipsis."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    if len(trimmed) > max_length:
        return trimmed[: max_length - len(ELLIPSIS)] + ELLIPSIS
    return trimmed


def validate_post_summary(value: Any) -> Optional[str]:
    return truncate_text(value, POST_SUMMARY_MAX_LENGTH)


def validate_sentiment_summary(value: Any) -> Optional[str]:
    return truncate_text(value, SENTIMENT_SUMMARY_MAX_LENGTH)


def validate_key_themes(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    themes = [t.strip() for t in value if isinstance(t, str) and t.strip()]
    return themes[:MAX_KEY_THEMES]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _percent_component(value: Any) -> float:
    if not _is_number(value) or value < 0:
        return 0.0
    if isinstance(value, float) and not math.isfinite(value):
        return 0.0
    return float(min(value, PERCENT_COMPONENT_CAP))


def normalize_percentages(bullish: Any, bearish: Any, neutral: Any) -> PercentageBreakdown:
    """Scale a raw triple to integers summing to exactly 100.

    The last component absorbs rounding error. An all-zero input falls back
    to 34/33/33.
    """
    b = _percent_component(bullish)
    br = _percent_component(bearish)
    n = _percent_component(neutral)
    total = b + br + n
    if total <= 0:
        return PercentageBreakdown(bullish=34, bearish=33, neutral=33)

    first = min(100, _round_half_up(b / total * 100))
    second = min(100 - first, _round_half_up(br / total * 100))
    return PercentageBreakdown(bullish=first, bearish=second, neutral=100 - first - second)


# ---------------------------------------------------------------------------
# Record parsers
# ---------------------------------------------------------------------------

def parse_post_analysis(text: Optional[str]) -> PostAnalysis:
    parsed = extract_json_object(text)
    if parsed is None:
        return PostAnalysis.unavailable()
    return PostAnalysis(
        quality_score=validate_quality_score(parsed.get("qualityScore")),
        insight_type=validate_insight_type(parsed.get("insightType")),
        sector=validate_sector(parsed.get("sector")),
        summary=validate_post_summary(parsed.get("summary")),
    )


def _sentiment_summary_from(parsed: dict) -> SentimentSummary:
    return SentimentSummary(
        summary=validate_sentiment_summary(parsed.get("summary")),
        key_themes=validate_key_themes(parsed.get("keyThemes")),
        sentiment_strength=validate_sentiment_strength(parsed.get("sentimentStrength")),
        confidence=validate_confidence(parsed.get("confidence")),
    )


def parse_sentiment_summary(text: Optional[str]) -> SentimentSummary:
    parsed = extract_json_object(text)
    if parsed is None:
        return SentimentSummary.unavailable()
    return _sentiment_summary_from(parsed)


def parse_news_sentiment(text: Optional[str]) -> NewsSentimentAnalysis:
    parsed = extract_json_object(text)
    if parsed is None:
        return NewsSentimentAnalysis.unavailable()
    return NewsSentimentAnalysis(
        available=True,
        analysis=_sentiment_summary_from(parsed),
        breakdown=normalize_percentages(
            parsed.get("bullishPercent"),
            parsed.get("bearishPercent"),
            parsed.get("neutralPercent"),
        ),
    )
