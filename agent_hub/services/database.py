from __future__ import annotations

import json
import re
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, AsyncIterator, Iterable, Optional, Sequence, Union

import aiosqlite

from agent_hub.services.config import get_settings

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "data" / "schema.sql"

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")

KEY_COLUMNS = {"team_directory": "user_id"}
JSON_COLUMNS = {"assigned_users", "weather_data"}

OPERATORS = {
    "eq": "=",
    "neq": "!=",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
}


class DataStoreError(RuntimeError):
    pass


@dataclass(frozen=True)
class Filter:
    column: str
    op: str = "eq"
    value: Any = None


def utc_now() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0, tzinfo=None).isoformat() + "Z"


def today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


def key_column(table: str) -> str:
    return KEY_COLUMNS.get(table, "id")


def _ident(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise DataStoreError(f"Invalid identifier: {name!r}")
    return name


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _encode(column: str, value: Any) -> Any:
    if column in JSON_COLUMNS and isinstance(value, (list, dict)):
        return json.dumps(value)
    if isinstance(value, bool):
        return int(value)
    return value


def _decode_row(row: aiosqlite.Row) -> dict[str, Any]:
    item = dict(row)
    for column in JSON_COLUMNS.intersection(item):
        raw = item[column]
        if isinstance(raw, str):
            try:
                item[column] = json.loads(raw)
            except json.JSONDecodeError:
                pass
    return item


def _compile_filter(flt: Filter, params: list[Any]) -> str:
    column = _ident(flt.column)
    if flt.op in OPERATORS:
        params.append(_encode(column, flt.value))
        return f"{column} {OPERATORS[flt.op]} ?"
    if flt.op == "ilike":
        params.append(f"%{_escape_like(str(flt.value))}%")
        return f"LOWER({column}) LIKE LOWER(?) ESCAPE '\\'"
    if flt.op == "is_null":
        return f"{column} IS NULL" if flt.value in (None, True) else f"{column} IS NOT NULL"
    if flt.op == "in":
        values = list(flt.value or [])
        if not values:
            return "0"
        params.extend(values)
        return f"{column} IN ({', '.join('?' for _ in values)})"
    raise DataStoreError(f"Unsupported filter operator: {flt.op!r}")


def _where(filters: Iterable[Filter], any_of: Iterable[Filter], params: list[Any]) -> str:
    clauses = [_compile_filter(flt, params) for flt in filters]
    alternatives = [_compile_filter(flt, params) for flt in any_of]
    if alternatives:
        clauses.append("(" + " OR ".join(alternatives) + ")")
    if not clauses:
        return ""
    return " WHERE " + " AND ".join(clauses)


def _order(order_by: Union[str, Sequence[str]]) -> str:
    if isinstance(order_by, str):
        order_by = (order_by,)
    parts = []
    for entry in order_by:
        if entry.startswith("-"):
            parts.append(f"{_ident(entry[1:])} DESC")
        else:
            parts.append(f"{_ident(entry)} ASC")
    return " ORDER BY " + ", ".join(parts) if parts else ""


class DataStore:
    """Thin table-oriented access layer over one aiosqlite connection.

    Statements autocommit unless they run inside ``transaction()``.
    Ordering entries are column names, prefixed with ``-`` for descending.
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self._columns: dict[str, set[str]] = {}
        self._in_transaction = False

    async def close(self) -> None:
        await self.conn.close()

    async def _execute(self, query: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        try:
            cursor = await self.conn.execute(query, tuple(params))
            rows = await cursor.fetchall()
            await cursor.close()
        except aiosqlite.Error as exc:
            raise DataStoreError(str(exc)) from exc
        return [_decode_row(row) for row in rows]

    async def columns(self, table: str) -> set[str]:
        table = _ident(table)
        if table not in self._columns:
            rows = await self._execute(f"PRAGMA table_info({table})")
            if not rows:
                raise DataStoreError(f"Unknown table: {table}")
            self._columns[table] = {row["name"] for row in rows}
        return self._columns[table]

    async def _check_columns(self, table: str, names: Iterable[str]) -> None:
        known = await self.columns(table)
        unknown = sorted(set(names) - known)
        if unknown:
            raise DataStoreError(f"Unknown column(s) for {table}: {', '.join(unknown)}")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["DataStore"]:
        if self._in_transaction:
            yield self
            return
        try:
            await self.conn.execute("BEGIN IMMEDIATE")
        except aiosqlite.Error as exc:
            raise DataStoreError(str(exc)) from exc
        self._in_transaction = True
        try:
            yield self
        except BaseException:
            await self.conn.execute("ROLLBACK")
            raise
        else:
            await self.conn.execute("COMMIT")
        finally:
            self._in_transaction = False

    async def select(
        self,
        table: str,
        columns: Union[str, Sequence[str]] = "*",
        filters: Iterable[Filter] = (),
        any_of: Iterable[Filter] = (),
        order_by: Union[str, Sequence[str]] = (),
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        await self.columns(table)
        if isinstance(columns, str):
            column_sql = "*" if columns == "*" else _ident(columns)
        else:
            column_sql = ", ".join(_ident(column) for column in columns)
        params: list[Any] = []
        query = f"SELECT {column_sql} FROM {table}" + _where(filters, any_of, params) + _order(order_by)
        if limit is not None:
            query += " LIMIT ?"
            params.append(int(limit))
        return await self._execute(query, params)

    async def select_one(self, table: str, **kwargs: Any) -> Optional[dict[str, Any]]:
        rows = await self.select(table, limit=1, **kwargs)
        return rows[0] if rows else None

    async def count(
        self,
        table: str,
        filters: Iterable[Filter] = (),
        any_of: Iterable[Filter] = (),
    ) -> int:
        await self.columns(table)
        params: list[Any] = []
        rows = await self._execute(f"SELECT COUNT(*) AS n FROM {table}" + _where(filters, any_of, params), params)
        return int(rows[0]["n"]) if rows else 0

    async def insert(self, table: str, values: dict[str, Any]) -> dict[str, Any]:
        known = await self.columns(table)
        row = dict(values)
        row.setdefault(key_column(table), new_id())
        now = utc_now()
        if "created_at" in known:
            row.setdefault("created_at", now)
        if "updated_at" in known:
            row.setdefault("updated_at", now)
        await self._check_columns(table, row)
        names = list(row)
        params = [_encode(name, row[name]) for name in names]
        query = (
            f"INSERT INTO {table} ({', '.join(names)}) "
            f"VALUES ({', '.join('?' for _ in names)}) RETURNING *"
        )
        rows = await self._execute(query, params)
        return rows[0]

    async def update(self, table: str, values: dict[str, Any], filters: Iterable[Filter]) -> list[dict[str, Any]]:
        filters = list(filters)
        if not filters:
            raise DataStoreError("Refusing to update without filters")
        known = await self.columns(table)
        changes = dict(values)
        if "updated_at" in known:
            changes.setdefault("updated_at", utc_now())
        await self._check_columns(table, changes)
        params: list[Any] = [_encode(name, value) for name, value in changes.items()]
        assignments = ", ".join(f"{name} = ?" for name in changes)
        query = f"UPDATE {table} SET {assignments}" + _where(filters, (), params) + " RETURNING *"
        return await self._execute(query, params)

    async def delete(self, table: str, filters: Iterable[Filter]) -> list[dict[str, Any]]:
        filters = list(filters)
        if not filters:
            raise DataStoreError("Refusing to delete without filters")
        await self.columns(table)
        params: list[Any] = []
        query = f"DELETE FROM {table}" + _where(filters, (), params) + " RETURNING *"
        return await self._execute(query, params)

    async def executescript(self, script: str) -> None:
        try:
            await self.conn.executescript(script)
        except aiosqlite.Error as exc:
            raise DataStoreError(str(exc)) from exc
        self._columns.clear()


async def connect_store(path: Optional[Union[str, Path]] = None) -> DataStore:
    settings = get_settings()
    conn = await aiosqlite.connect(path or settings.resolved_database_path, isolation_level=None)
    conn.row_factory = aiosqlite.Row
    await conn.execute("PRAGMA foreign_keys = ON;")
    return DataStore(conn)


async def init_schema(store: DataStore, schema_path: Path = SCHEMA_PATH) -> None:
    await store.executescript(schema_path.read_text(encoding="utf-8"))
