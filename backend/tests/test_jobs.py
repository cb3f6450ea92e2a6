"""Orchestration job tests."""
import json
from datetime import timedelta

import pytest

from core.timezone import now_utc
from fakes import make_articles, news_response
from models import NewsArticle, NewsSentimentCache, Post, Sentiment, TrendingCache
from scheduler.jobs.analyze_post import analyze_post
from scheduler.jobs.article_cleanup import purge_old_articles
from scheduler.jobs.news_sentiment_refresh import refresh_news_sentiment
from scheduler.jobs.trending_refresh import refresh_trending

SCENARIO_RESPONSE = json.dumps({
    "qualityScore": 1.4,
    "insightType": "EARNINGS",
    "sector": "technology",
    "summary": "x" * 200,
})


class TestAnalyzePost:
    @pytest.mark.asyncio
    async def test_aapl_goog_scenario(self, db, make_post, gemini, job_context):
        post = make_post("$AAPL and $GOOG", Sentiment.BULLISH)
        gemini.response = SCENARIO_RESPONSE

        result = await analyze_post(job_context, post.id, post.content, post.ticker_symbols)

        assert result["status"] == "analyzed"
        db.expire_all()
        stored = db.get(Post, post.id)
        assert stored.quality_score == 1.0
        assert stored.insight_type == "earnings"
        assert stored.sector == "Technology"
        assert len(stored.summary) <= 150
        assert stored.summary.endswith("...")
        assert set(stored.ticker_symbols) == {"AAPL", "GOOG"}
        assert "AAPL" in gemini.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_idempotent(self, db, make_post, gemini, job_context):
        post = make_post("$NVDA earnings beat", Sentiment.BULLISH)
        gemini.response = SCENARIO_RESPONSE

        await analyze_post(job_context, post.id, post.content, ["NVDA"])
        db.expire_all()
        first = db.get(Post, post.id)
        snapshot = (first.quality_score, first.insight_type, first.sector, first.summary)

        await analyze_post(job_context, post.id, post.content, ["NVDA"])
        db.expire_all()
        second = db.get(Post, post.id)
        assert (second.quality_score, second.insight_type, second.sector, second.summary) == snapshot

    @pytest.mark.asyncio
    async def test_reanalysis_overwrites_every_field(self, db, make_post, gemini, job_context):
        post = make_post("$AMD thoughts")
        gemini.response = SCENARIO_RESPONSE
        await analyze_post(job_context, post.id, post.content, ["AMD"])

        gemini.response = json.dumps({"qualityScore": 0.3})
        await analyze_post(job_context, post.id, post.content, ["AMD"])

        db.expire_all()
        stored = db.get(Post, post.id)
        assert stored.quality_score == 0.3
        assert stored.insight_type is None
        assert stored.sector is None
        assert stored.summary is None

    @pytest.mark.asyncio
    async def test_unavailable_leaves_post_untouched(self, db, make_post, gemini, job_context):
        post = make_post("$AAPL", quality_score=0.5)
        gemini.response = "Sorry, I can't do that"

        result = await analyze_post(job_context, post.id, post.content, ["AAPL"])

        assert result["status"] == "unavailable"
        db.expire_all()
        assert db.get(Post, post.id).quality_score == 0.5

    @pytest.mark.asyncio
    async def test_missing_post(self, db, gemini, job_context):
        result = await analyze_post(job_context, "does-not-exist", "text", [])
        assert result["status"] == "missing"
        assert gemini.calls == []


class TestTrendingRefresh:
    @pytest.mark.asyncio
    async def test_refresh_writes_singleton(self, db, make_post, job_context):
        make_post("$AAPL up")
        make_post("$AAPL and $TSLA")
        make_post("$TSLA old", created_at=now_utc() - timedelta(days=2))

        result = await refresh_trending(job_context)

        assert result["count"] == 2
        db.expire_all()
        row = db.query(TrendingCache).one()
        assert row.data == [{"symbol": "AAPL", "count": 2}, {"symbol": "TSLA", "count": 1}]


class TestNewsSentimentRefresh:
    @pytest.mark.asyncio
    async def test_batch_isolation(self, db, make_post, gemini, news_client, job_context, sleeps):
        for content in ("$AAPL", "$TSLA", "$MSFT"):
            make_post(content)
        news_client.articles = {
            "AAPL": make_articles("AAPL", 5),
            "MSFT": make_articles("MSFT", 4),
        }
        news_client.failing = {"MSFT"}
        gemini.response = news_response()

        result = await refresh_news_sentiment(job_context)

        statuses = {r["symbol"]: r["status"] for r in result["results"]}
        assert statuses == {"AAPL": "updated", "MSFT": "error", "TSLA": "unavailable"}
        assert result["processed"] == 3
        assert sleeps == [1.0, 1.0]

        db.expire_all()
        assert db.query(NewsSentimentCache).filter_by(symbol="AAPL").count() == 1
        assert db.query(NewsSentimentCache).filter_by(symbol="MSFT").count() == 0
        assert news_client.calls == ["AAPL", "MSFT", "TSLA"]

    @pytest.mark.asyncio
    async def test_no_active_tickers(self, db, news_client, job_context, sleeps):
        result = await refresh_news_sentiment(job_context)
        assert result == {"processed": 0, "results": []}
        assert news_client.calls == []
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_stale_result_reported(self, db, make_post, gemini, news_client, job_context):
        make_post("$AAPL")
        news_client.articles = {"AAPL": make_articles("AAPL", 5)}
        gemini.response = news_response()
        await refresh_news_sentiment(job_context)

        news_client.articles = {"AAPL": make_articles("AAPL", 1)}
        result = await refresh_news_sentiment(job_context)

        entry = result["results"][0]
        assert entry["status"] == "stale"
        assert "1 found" in entry["reason"]


class TestArticleCleanup:
    @pytest.mark.asyncio
    async def test_purges_by_published_at(self, db, job_context):
        now = now_utc()
        db.add_all([
            NewsArticle(symbol="AAPL", headline="old", source="x", url="https://a/old",
                        published_at=now - timedelta(days=8)),
            NewsArticle(symbol="AAPL", headline="recent", source="x", url="https://a/new",
                        published_at=now - timedelta(days=1)),
        ])
        db.commit()

        result = await purge_old_articles(job_context)

        assert result == {"deleted": 1}
        db.expire_all()
        assert [a.headline for a in db.query(NewsArticle).all()] == ["recent"]
