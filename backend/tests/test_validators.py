"""Model output validation tests."""
import json
import math

import pytest

from services.validators import (
    extract_json_object,
    normalize_percentages,
    parse_news_sentiment,
    parse_post_analysis,
    parse_sentiment_summary,
    truncate_text,
    validate_key_themes,
    validate_quality_score,
    validate_sector,
)


class TestExtractJson:
    def test_fenced_response(self):
        text = 'Here you go:\n```json\n{"qualityScore": 0.5}\n```'
        assert extract_json_object(text) == {"qualityScore": 0.5}

    def test_no_object(self):
        assert extract_json_object("I cannot help with that") is None
        assert extract_json_object("") is None
        assert extract_json_object(None) is None

    def test_broken_json(self):
        assert extract_json_object('{"qualityScore": 0.5,,}') is None


class TestQualityScore:
    @pytest.mark.parametrize("raw, expected", [
        (1.4, 1.0),
        (-0.3, 0.0),
        (0.42, 0.42),
        (1, 1.0),
    ])
    def test_clamped(self, raw, expected):
        assert validate_quality_score(raw) == expected

    @pytest.mark.parametrize("raw", [None, "0.8", True, math.nan, math.inf, [0.5]])
    def test_non_numeric_is_absent(self, raw):
        assert validate_quality_score(raw) is None

    def test_huge_integers_clamped(self):
        assert validate_quality_score(10 ** 400) == 1.0
        assert validate_quality_score(-(10 ** 400)) == 0.0


class TestTextFields:
    def test_sector_title_case(self):
        assert validate_sector("technology") == "Technology"
        assert validate_sector("  consumer DISCRETIONARY ") == "Consumer Discretionary"

    def test_sector_unknown(self):
        assert validate_sector("Unknown") is None
        assert validate_sector("   ") is None
        assert validate_sector(42) is None

    def test_truncate(self):
        result = truncate_text("x" * 200, 150)
        assert len(result) == 150
        assert result.endswith("...")

    def test_truncate_keeps_short_text(self):
        assert truncate_text("  short  ", 150) == "short"
        assert truncate_text("", 150) is None

    def test_key_themes(self):
        themes = validate_key_themes([" earnings ", "", 3, None, "guidance", "ai", "tariffs"])
        assert themes == ["earnings", "guidance", "ai"]
        assert validate_key_themes("earnings") == []


class TestNormalizePercentages:
    @pytest.mark.parametrize("triple", [
        (60, 20, 20),
        (1, 1, 1),
        (33.3, 33.3, 33.3),
        (0.2, 0.5, 0.3),
        (250, 10, 0),
        (7, 0, 0),
        (-5, 50, 50),
        ("abc", 10, 30),
        (math.nan, 1, 2),
    ])
    def test_sums_to_100_within_range(self, triple):
        result = normalize_percentages(*triple)
        values = (result.bullish, result.bearish, result.neutral)
        assert sum(values) == 100
        assert all(isinstance(v, int) and 0 <= v <= 100 for v in values)

    def test_zero_sum_fallback(self):
        result = normalize_percentages(0, 0, 0)
        assert (result.bullish, result.bearish, result.neutral) == (34, 33, 33)

    def test_all_invalid_falls_back(self):
        result = normalize_percentages(None, "x", -1)
        assert (result.bullish, result.bearish, result.neutral) == (34, 33, 33)

    def test_scaled(self):
        result = normalize_percentages(1, 1, 2)
        assert (result.bullish, result.bearish, result.neutral) == (25, 25, 50)

    def test_half_up_rounding(self):
        # 1/8 = 12.5% rounds up; neutral absorbs the remainder
        result = normalize_percentages(1, 1, 6)
        assert (result.bullish, result.bearish, result.neutral) == (13, 13, 74)

    def test_score(self):
        assert normalize_percentages(60, 20, 20).score == pytest.approx(0.4)

    def test_huge_components(self):
        result = normalize_percentages(10 ** 400, 25, 25)
        assert (result.bullish, result.bearish, result.neutral) == (100, 0, 0)

        result = normalize_percentages(1.7e308, 1.7e308, 0)
        assert (result.bullish, result.bearish, result.neutral) == (50, 50, 0)


class TestParsers:
    def test_post_analysis_scenario(self):
        text = json.dumps({
            "qualityScore": 1.4,
            "insightType": "EARNINGS",
            "sector": "technology",
            "summary": "x" * 200,
        })
        analysis = parse_post_analysis(text)
        assert analysis.quality_score == 1.0
        assert analysis.insight_type == "earnings"
        assert analysis.sector == "Technology"
        assert len(analysis.summary) <= 150
        assert analysis.summary.endswith("...")

    def test_post_analysis_field_level_failure(self):
        analysis = parse_post_analysis('{"qualityScore": "high", "insightType": "gossip", "sector": "Energy"}')
        assert analysis.quality_score is None
        assert analysis.insight_type is None
        assert analysis.sector == "Energy"
        assert analysis.is_available

    def test_post_analysis_unparsable(self):
        analysis = parse_post_analysis("no json here")
        assert not analysis.is_available
        assert analysis.to_dict() == {
            "quality_score": None,
            "insight_type": None,
            "sector": None,
            "summary": None,
        }

    def test_sentiment_summary(self):
        summary = parse_sentiment_summary(json.dumps({
            "summary": "y" * 400,
            "keyThemes": ["a", "b", "c", "d"],
            "sentimentStrength": "STRONG",
            "confidence": "certain",
        }))
        assert len(summary.summary) == 300
        assert summary.key_themes == ["a", "b", "c"]
        assert summary.sentiment_strength == "strong"
        assert summary.confidence is None

    def test_news_sentiment(self):
        result = parse_news_sentiment(json.dumps({
            "bullishPercent": 50,
            "bearishPercent": 30,
            "neutralPercent": 30,
            "summary": "Mixed",
        }))
        assert result.available
        assert result.breakdown.bullish + result.breakdown.bearish + result.breakdown.neutral == 100

    def test_news_sentiment_unparsable(self):
        result = parse_news_sentiment("[1, 2, 3]")
        assert not result.available
        assert result.breakdown is None
