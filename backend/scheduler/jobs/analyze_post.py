"""Per-post quality analysis job (event-triggered)."""
import logging
from typing import Sequence

from scheduler.context import JobContext
from services.post_service import PostService

logger = logging.getLogger(__name__)

ANALYZE_POST_RETRIES = 3


async def analyze_post(ctx: JobContext, post_id: str, content: str, tickers: Sequence[str] = ()) -> dict:
    """Score one post and overwrite its four analysis fields.

    Safe to re-run: the write is a full-field overwrite keyed by post id.
    DB errors propagate so the dispatcher retries.
    """
    db = ctx.session_factory()
    try:
        service = PostService(db)
        if service.get_post(post_id) is None:
            logger.warning(f"Post {post_id} not found, skipping analysis")
            return {"post_id": post_id, "status": "missing"}

        analysis = await ctx.post_analyzer.analyze(content, list(tickers))
        if not analysis.is_available:
            logger.info(f"No analysis available for post {post_id}")
            return {"post_id": post_id, "status": "unavailable"}

        service.save_analysis(post_id, analysis)
        logger.info(
            f"Post {post_id} analyzed: score={analysis.quality_score}, "
            f"type={analysis.insight_type}, sector={analysis.sector}"
        )
        return {"post_id": post_id, "status": "analyzed", **analysis.to_dict()}
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
