from __future__ import annotations

import asyncio
import sqlite3
import uuid
from datetime import datetime, timedelta

import pytest

from agent_hub.services.config import get_settings
from agent_hub.services.database import SCHEMA_PATH, connect_store, key_column
from agent_hub.services.dispatcher import dispatch
from agent_hub.services.tool_registry import build_registry

BASE_TIME = datetime(2025, 1, 6, 9, 0, 0)


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "agent_hub.db"
    conn = sqlite3.connect(path)
    conn.executescript(SCHEMA_PATH.read_text())
    conn.close()

    monkeypatch.setenv("DATABASE_PATH", str(path))
    monkeypatch.setenv("USE_REAL_LLM", "false")
    monkeypatch.delenv("LLM_API_KEY", raising=False)
    get_settings.cache_clear()
    yield path
    get_settings.cache_clear()


@pytest.fixture
def seed(db_path):
    """Insert a row with sqlite3, filling key and timestamps.

    ``age`` is in minutes before BASE_TIME; larger means older.
    """

    def insert(table: str, age: int = 0, **values):
        conn = sqlite3.connect(db_path)
        conn.row_factory = sqlite3.Row
        try:
            columns = {row["name"] for row in conn.execute(f"PRAGMA table_info({table})")}
            row = {key_column(table): str(uuid.uuid4())}
            stamp = (BASE_TIME - timedelta(minutes=age)).isoformat() + "Z"
            for column in ("created_at", "updated_at"):
                if column in columns:
                    row[column] = stamp
            row.update(values)
            conn.execute(
                f"INSERT INTO {table} ({', '.join(row)}) VALUES ({', '.join('?' for _ in row)})",
                tuple(row.values()),
            )
            conn.commit()
        finally:
            conn.close()
        return row

    return insert


@pytest.fixture
def fetch(db_path):
    def select(query: str, params=()):
        conn = sqlite3.connect(db_path)
        conn.row_factory = sqlite3.Row
        try:
            return [dict(row) for row in conn.execute(query, params).fetchall()]
        finally:
            conn.close()

    return select


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def with_store(db_path):
    """Run ``fn(store)`` inside a fresh event loop and connection."""

    def run(fn):
        async def scenario():
            store = await connect_store(db_path)
            try:
                return await fn(store)
            finally:
                await store.close()

        return asyncio.run(scenario())

    return run


@pytest.fixture
def call_tool(registry, with_store):
    def call(name: str, params=None, context=None):
        return with_store(lambda store: dispatch(registry, store, name, params or {}, context=context))

    return call
