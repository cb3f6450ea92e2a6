"""Request-scoped access to the objects built at startup."""
from fastapi import HTTPException, Request

from scheduler.context import JobContext
from scheduler.dispatcher import JobDispatcher
from utils.tickers import is_valid_ticker


def get_job_context(request: Request) -> JobContext:
    ctx = getattr(request.app.state, "job_context", None)
    if ctx is None:
        raise HTTPException(status_code=503, detail="Analysis pipeline not initialized")
    return ctx


def get_dispatcher(request: Request) -> JobDispatcher:
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        raise HTTPException(status_code=503, detail="Job dispatcher not initialized")
    return dispatcher


def validate_symbol(symbol: str) -> str:
    symbol = symbol.strip().upper()
    if not is_valid_ticker(symbol):
        raise HTTPException(status_code=400, detail=f"Invalid ticker symbol: {symbol}")
    return symbol
