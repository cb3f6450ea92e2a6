"""pytest configuration and fixtures."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

from datetime import datetime
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import main
from core.config import Settings
from core.database import Base, get_db
from core.timezone import now_utc
from integrations.gemini import CommunitySentimentAnalyzer, NewsSentimentAnalyzer, PostQualityAnalyzer
from models import Post, PostTicker, Sentiment
from scheduler.context import JobContext
from services.ticker_resolver import TickerResolver
from fakes import FakeGeminiClient, FakeNewsClient
from utils.tickers import parse_tickers


# In-memory SQLite shared across sessions
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def db():
    """Fresh schema for every test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_post(db):
    """Create a post with ticker rows parsed from its content."""
    def _make_post(
        content: str,
        sentiment: Sentiment = Sentiment.NEUTRAL,
        created_at: Optional[datetime] = None,
        quality_score: Optional[float] = None,
    ) -> Post:
        post = Post(
            content=content,
            sentiment=sentiment,
            created_at=created_at or now_utc(),
            quality_score=quality_score,
        )
        post.tickers = [PostTicker(symbol=s) for s in parse_tickers(content)]
        db.add(post)
        db.commit()
        db.refresh(post)
        return post

    return _make_post


@pytest.fixture
def gemini():
    return FakeGeminiClient()


@pytest.fixture
def news_client():
    return FakeNewsClient()


@pytest.fixture
def sleeps():
    """Delays requested by jobs, recorded instead of slept."""
    return []


@pytest.fixture
def job_context(db, gemini, news_client, sleeps):
    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return JobContext(
        session_factory=TestingSessionLocal,
        post_analyzer=PostQualityAnalyzer(gemini),
        community_analyzer=CommunitySentimentAnalyzer(gemini),
        news_analyzer=NewsSentimentAnalyzer(gemini),
        news_client=news_client,
        resolver=TickerResolver(),
        settings=Settings(database_url="sqlite://", scheduler_enabled=False),
        sleep=fake_sleep,
    )


@pytest.fixture(scope="function")
def app(db, job_context, monkeypatch):
    """The FastAPI app wired to the in-memory DB and fake providers."""
    monkeypatch.setattr(main, "engine", engine)
    monkeypatch.setattr(main, "build_job_context", lambda settings: job_context)
    main.app.dependency_overrides[get_db] = override_get_db
    yield main.app
    main.app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app):
    with TestClient(app) as c:
        yield c
