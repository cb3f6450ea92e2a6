import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager

import models  # noqa: F401  registers tables on Base.metadata
from core.config import get_settings
from core.database import engine, Base
from core.event_handlers import register_event_handlers
from api.v1 import trending, stocks, posts, health
from scheduler import get_scheduler_manager, register_jobs
from scheduler.context import build_job_context
from scheduler.dispatcher import JobDispatcher
from scheduler.job_tracker import JobTracker

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    Base.metadata.create_all(bind=engine)

    ctx = build_job_context(settings)
    dispatcher = JobDispatcher(
        ctx,
        backoff_seconds=settings.job_retry_backoff_seconds,
        tracker=JobTracker(ctx.session_factory),
    )
    register_jobs(dispatcher)
    dispatcher.start(workers=settings.dispatcher_workers)
    app.state.job_context = ctx
    app.state.dispatcher = dispatcher

    # Register event handlers
    register_event_handlers(dispatcher)

    # Start scheduler
    scheduler = get_scheduler_manager()
    scheduler.start(dispatcher)
    logger.info("Application started")

    yield

    # Shutdown
    scheduler.shutdown()
    await dispatcher.stop()
    await ctx.close()
    logger.info("Application shutdown")


app = FastAPI(
    title="StockTalk Analysis API",
    description="Post quality scoring, trending tickers and sentiment aggregates",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(trending.router, prefix="/api/v1/trending", tags=["trending"])
app.include_router(stocks.router, prefix="/api/v1/stocks", tags=["stocks"])
app.include_router(posts.router, prefix="/api/v1/posts", tags=["posts"])
app.include_router(health.router, prefix="/api/v1/health", tags=["health"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
