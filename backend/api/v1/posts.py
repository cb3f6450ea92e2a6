"""Post analysis trigger API."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from core.database import get_db
from core.events import PostCreated, event_bus
from schemas.job import AnalyzePostResponse
from services.post_service import PostService
from utils.tickers import parse_tickers

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/{post_id}/analyze", response_model=AnalyzePostResponse, status_code=202)
async def analyze_post(post_id: str, db: Session = Depends(get_db)):
    """Queue (re-)analysis of a post. Returns before the analysis runs."""
    post = PostService(db).get_post(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="Post not found")

    tickers = post.ticker_symbols or parse_tickers(post.content)
    try:
        await event_bus.publish(PostCreated(post_id=post.id, content=post.content, tickers=tuple(tickers)))
    except LookupError:
        raise HTTPException(status_code=503, detail="Analysis pipeline not running")

    return {"post_id": post.id, "status": "queued"}
