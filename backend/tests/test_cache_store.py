"""Cache store tests."""
from datetime import datetime, timedelta

import pytest

from models import NewsSentimentCache, TrendingCache, TRENDING_CACHE_KEY
from services.cache_store import CacheStore, is_fresh

NOW = datetime(2025, 3, 10, 12, 0, 0)


def _news_value(**overrides):
    value = {
        "bullish_percent": 60,
        "bearish_percent": 20,
        "neutral_percent": 20,
        "company_news_score": 0.4,
        "article_count": 8,
        "summary": "Positive",
        "key_themes": ["earnings"],
        "sentiment_strength": "moderate",
        "confidence": "high",
    }
    value.update(overrides)
    return value


class TestCacheStore:
    def test_get_missing(self, db):
        store = CacheStore(db, NewsSentimentCache, key_field="symbol")
        assert store.get("AAPL") is None

    def test_upsert_creates_then_replaces(self, db):
        store = CacheStore(db, NewsSentimentCache, key_field="symbol")
        store.upsert("AAPL", _news_value(), now=NOW)
        later = NOW + timedelta(minutes=5)
        store.upsert("AAPL", _news_value(summary="Negative turn", bullish_percent=10), now=later)

        assert db.query(NewsSentimentCache).count() == 1
        entry = store.get("AAPL")
        assert entry.value["summary"] == "Negative turn"
        assert entry.value["bullish_percent"] == 10
        assert entry.last_updated == later

    def test_full_replace_clears_missing_fields(self, db):
        store = CacheStore(db, NewsSentimentCache, key_field="symbol")
        store.upsert("AAPL", _news_value(), now=NOW)
        value = _news_value()
        del value["summary"]
        del value["key_themes"]
        entry = store.upsert("AAPL", value, now=NOW)
        assert entry.value["summary"] is None
        assert entry.value["key_themes"] is None

    def test_unknown_field_rejected(self, db):
        store = CacheStore(db, NewsSentimentCache, key_field="symbol")
        with pytest.raises(ValueError):
            store.upsert("AAPL", _news_value(mood="happy"))

    def test_singleton_key(self, db):
        store = CacheStore(db, TrendingCache, key_field="id", timestamp_field="updated_at")
        store.upsert(TRENDING_CACHE_KEY, {"data": [{"symbol": "AAPL", "count": 2}]}, now=NOW)
        store.upsert(TRENDING_CACHE_KEY, {"data": []}, now=NOW)
        assert db.query(TrendingCache).count() == 1
        assert store.get(TRENDING_CACHE_KEY).value == {"data": []}

    def test_delete(self, db):
        store = CacheStore(db, NewsSentimentCache, key_field="symbol")
        store.upsert("AAPL", _news_value(), now=NOW)
        assert store.delete("AAPL") is True
        assert store.delete("AAPL") is False


class TestFreshness:
    def test_is_fresh(self, db):
        store = CacheStore(db, NewsSentimentCache, key_field="symbol")
        entry = store.upsert("AAPL", _news_value(), now=NOW)
        ttl = timedelta(minutes=30)
        assert is_fresh(entry, ttl, NOW + timedelta(minutes=29))
        assert not is_fresh(entry, ttl, NOW + timedelta(minutes=30))
        assert not is_fresh(None, ttl, NOW)
