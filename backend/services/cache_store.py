"""Durable keyed aggregate store.

One row per key, stamped with a last-updated timestamp. The store has no TTL:
callers decide freshness with is_fresh() against their own threshold, so
aggregates with different freshness policies share this implementation.

    store = CacheStore(db, NewsSentimentCache, key_field="symbol")
    entry = store.get("AAPL")
    if entry is None or not is_fresh(entry, timedelta(minutes=30)):
        store.upsert("AAPL", {...})
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.timezone import now_utc

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    key: str
    value: dict[str, Any]
    last_updated: datetime

    def age(self, now: Optional[datetime] = None) -> timedelta:
        return (now or now_utc()) - self.last_updated


def is_fresh(entry: Optional[CacheEntry], max_age: timedelta, now: Optional[datetime] = None) -> bool:
    """True when the entry exists and is younger than max_age."""
    if entry is None:
        return False
    return entry.age(now) < max_age


class CacheStore:
    """Key-indexed create-or-replace store over a single SQLAlchemy model."""

    # Columns never treated as part of the cached value
    _bookkeeping = {"id", "created_at"}

    def __init__(
        self,
        db: Session,
        model,
        key_field: str,
        timestamp_field: str = "last_updated",
    ):
        self.db = db
        self.model = model
        self.key_field = key_field
        self.timestamp_field = timestamp_field
        excluded = self._bookkeeping | {key_field, timestamp_field}
        self.value_fields = [
            c.key for c in model.__table__.columns if c.key not in excluded
        ]

    def _find(self, key: str):
        stmt = select(self.model).where(getattr(self.model, self.key_field) == key)
        return self.db.execute(stmt).scalar_one_or_none()

    def _to_entry(self, row) -> CacheEntry:
        return CacheEntry(
            key=getattr(row, self.key_field),
            value={f: getattr(row, f) for f in self.value_fields},
            last_updated=getattr(row, self.timestamp_field),
        )

    def get(self, key: str) -> Optional[CacheEntry]:
        row = self._find(key)
        return self._to_entry(row) if row is not None else None

    def upsert(self, key: str, value: dict[str, Any], now: Optional[datetime] = None) -> CacheEntry:
        """Full replace: value fields not supplied are reset to None."""
        unknown = set(value) - set(self.value_fields)
        if unknown:
            raise ValueError(f"Unknown fields for {self.model.__tablename__}: {sorted(unknown)}")

        row = self._find(key)
        if row is None:
            row = self.model(**{self.key_field: key})
            self.db.add(row)

        for f in self.value_fields:
            setattr(row, f, value.get(f))
        setattr(row, self.timestamp_field, now or now_utc())

        self.db.commit()
        self.db.refresh(row)
        logger.debug(f"Cache upsert {self.model.__tablename__}[{key}]")
        return self._to_entry(row)

    def delete(self, key: str) -> bool:
        row = self._find(key)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True
