"""
Key-value store abstraction with in-memory, SQL and Redis implementations.

Documents are JSON objects stored under string keys such as ``project:3``,
``contact:12`` or ``site-config``.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

import redis
from redis import exceptions as redis_exceptions
from sqlalchemy import JSON, Column, String, create_engine, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker


class KvStore(Protocol):
    """Operations the services need from the key-value store."""

    def get(self, key: str) -> Optional[dict]:
        ...

    def get_by_prefix(self, prefix: str) -> list[dict]:
        ...

    def set(self, key: str, value: dict) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def next_id(records: list[dict]) -> int:
    """Return max existing id + 1, or 1 for an empty collection."""
    return max((int(r.get("id") or 0) for r in records), default=0) + 1


def _copy(value: dict) -> dict:
    # Use a JSON round trip to mimic what a real store hands back.
    return json.loads(json.dumps(value, default=str))


class InMemoryKvStore:
    """Simple in-memory store for development and tests."""

    def __init__(self):
        self.items: Dict[str, dict] = {}

    def get(self, key: str) -> Optional[dict]:
        value = self.items.get(key)
        return _copy(value) if value is not None else None

    def get_by_prefix(self, prefix: str) -> list[dict]:
        return [
            _copy(value)
            for key, value in sorted(self.items.items())
            if key.startswith(prefix)
        ]

    def set(self, key: str, value: dict) -> None:
        self.items[key] = _copy(value)

    def delete(self, key: str) -> None:
        self.items.pop(key, None)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.items.clear()


class SqlKvStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlKvStore")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def get(self, key: str) -> Optional[dict]:
        with self.Session() as session:
            row = session.get(KvRow, key)
            return row.value if row else None

    def get_by_prefix(self, prefix: str) -> list[dict]:
        with self.Session() as session:
            stmt = (
                select(KvRow)
                .where(KvRow.key.startswith(prefix, autoescape=True))
                .order_by(KvRow.key.asc())
            )
            return [row.value for row in session.execute(stmt).scalars()]

    def set(self, key: str, value: dict) -> None:
        with self.Session() as session:
            existing = session.get(KvRow, key)
            if existing:
                existing.value = value
            else:
                session.add(KvRow(key=key, value=value))
            session.commit()

    def delete(self, key: str) -> None:
        with self.Session() as session:
            row = session.get(KvRow, key)
            if row:
                session.delete(row)
                session.commit()


class RedisKvStore:
    """Redis-backed store keeping each document as a JSON string."""

    def __init__(self, url: str, namespace: str = "portfolio:"):
        self.url = url
        self.namespace = namespace
        self.client = redis.Redis.from_url(url)

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    def _reconnect(self) -> None:
        # Managed Redis drops idle connections; the next call gets a fresh client.
        self.client = redis.Redis.from_url(self.url)

    def get(self, key: str) -> Optional[dict]:
        try:
            raw = self.client.get(self._key(key))
        except redis_exceptions.ConnectionError:
            self._reconnect()
            raise
        if raw is None:
            return None
        return json.loads(raw)

    def get_by_prefix(self, prefix: str) -> list[dict]:
        pattern = self._key(prefix).replace("*", r"\*") + "*"
        try:
            keys = sorted(self.client.scan_iter(match=pattern))
            if not keys:
                return []
            values = self.client.mget(keys)
        except redis_exceptions.ConnectionError:
            self._reconnect()
            raise
        return [json.loads(raw) for raw in values if raw is not None]

    def set(self, key: str, value: dict) -> None:
        try:
            self.client.set(self._key(key), json.dumps(value, default=str))
        except redis_exceptions.ConnectionError:
            self._reconnect()
            raise

    def delete(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except redis_exceptions.ConnectionError:
            self._reconnect()
            raise


Base = declarative_base()


class KvRow(Base):
    __tablename__ = "kv_store"

    key = Column(String, primary_key=True)
    value = Column(JSON, nullable=False)
