"""
Table-addressed structured store over SQLite.

The repositories only talk to the store through this module: insert, select
(with filters, ordering, ranges and exact counts), update, delete and count,
all addressed by table name. Rows go in and come out as plain dicts; JSON and
boolean columns are converted at this boundary.
"""

import json
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Iterable
from uuid import uuid4

import aiosqlite

from productivity.database.db import CASEFOLD_FUNCTION, connect
from productivity.database.schema import TABLES, TableSpec


NOT_FOUND = "not_found"
INVALID_IDENTIFIER = "invalid_identifier"
QUERY_FAILED = "query_failed"

_COMPARISONS = {"lt": "<", "lte": "<=", "gt": ">", "gte": ">="}


class StoreError(Exception):
    """Failure reported by the store, tagged with a machine-readable code."""

    def __init__(self, message: str, code: str = QUERY_FAILED):
        super().__init__(message)
        self.code = code


class RecordNotFoundError(StoreError):
    """A single-row select matched nothing."""

    def __init__(self, table: str):
        super().__init__(f"No matching row in {table}", code=NOT_FOUND)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Fixed-width UTC rendering so stored timestamps sort chronologically as text."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _encode_scalar(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass
class Condition:
    column: str
    op: str
    value: Any = None


@dataclass
class SelectResult:
    rows: list[dict]
    total: int


class Query:
    """
    Filter, ordering and range description for one table.

    Top-level conditions are AND-combined. Each ``or_`` call adds one group
    whose branches are OR-combined; every branch is itself an AND of its
    conditions.
    """

    def __init__(self):
        self.conditions: list[Condition] = []
        self.groups: list[list[list[Condition]]] = []
        self.ordering: list[tuple[str, bool]] = []
        self.row_offset: int | None = None
        self.row_limit: int | None = None

    def _add(self, column: str, op: str, value: Any = None) -> "Query":
        self.conditions.append(Condition(column, op, value))
        return self

    def eq(self, column: str, value: Any) -> "Query":
        return self._add(column, "eq", value)

    def neq(self, column: str, value: Any) -> "Query":
        return self._add(column, "neq", value)

    def lt(self, column: str, value: Any) -> "Query":
        return self._add(column, "lt", value)

    def lte(self, column: str, value: Any) -> "Query":
        return self._add(column, "lte", value)

    def gt(self, column: str, value: Any) -> "Query":
        return self._add(column, "gt", value)

    def gte(self, column: str, value: Any) -> "Query":
        return self._add(column, "gte", value)

    def in_(self, column: str, values: Iterable[Any]) -> "Query":
        return self._add(column, "in", list(values))

    def ilike(self, column: str, text: str) -> "Query":
        """Case-insensitive substring match."""
        return self._add(column, "ilike", text)

    def is_null(self, column: str, flag: bool = True) -> "Query":
        return self._add(column, "is_null", flag)

    def contains(self, column: str, values: Iterable[Any]) -> "Query":
        """JSON array column holds every one of ``values``."""
        return self._add(column, "contains", list(values))

    def overlaps(self, column: str, values: Iterable[Any]) -> "Query":
        """JSON array column holds at least one of ``values``."""
        return self._add(column, "overlaps", list(values))

    def is_empty(self, column: str, flag: bool = True) -> "Query":
        """JSON array column is (or is not) empty."""
        return self._add(column, "is_empty", flag)

    def or_(self, *branches: "Query") -> "Query":
        self.groups.append([list(branch.conditions) for branch in branches])
        return self

    def order(self, column: str, ascending: bool = True) -> "Query":
        self.ordering.append((column, ascending))
        return self

    def range(self, start: int, end: int) -> "Query":
        """Inclusive row range, zero-based."""
        self.row_offset = start
        self.row_limit = max(end - start + 1, 0)
        return self

    def limit(self, count: int) -> "Query":
        self.row_limit = count
        return self

    @property
    def is_filtered(self) -> bool:
        return bool(self.conditions or self.groups)


def _column(spec: TableSpec, column: str) -> str:
    if not spec.has_column(column):
        raise StoreError(f"Unknown column '{column}' for table {spec.name}", code=INVALID_IDENTIFIER)
    return column


def _encode_value(spec: TableSpec, column: str, value: Any) -> Any:
    if value is None:
        return None
    if column in spec.json_columns:
        return json.dumps(value, default=_json_default)
    if column in spec.bool_columns:
        return int(bool(value))
    return _encode_scalar(value)


def _compile_condition(spec: TableSpec, cond: Condition, params: list) -> str:
    column = _column(spec, cond.column)
    op = cond.op

    if op == "eq":
        if cond.value is None:
            return f"{column} IS NULL"
        params.append(_encode_value(spec, column, cond.value))
        return f"{column} = ?"
    if op == "neq":
        if cond.value is None:
            return f"{column} IS NOT NULL"
        params.append(_encode_value(spec, column, cond.value))
        return f"{column} != ?"
    if op in _COMPARISONS:
        params.append(_encode_value(spec, column, cond.value))
        return f"{column} {_COMPARISONS[op]} ?"
    if op == "in":
        if not cond.value:
            return "0"
        params.extend(_encode_value(spec, column, v) for v in cond.value)
        return f"{column} IN ({', '.join('?' for _ in cond.value)})"
    if op == "ilike":
        params.append(f"%{_escape_like(str(cond.value).casefold())}%")
        return f"{CASEFOLD_FUNCTION}({column}) LIKE ? ESCAPE '\\'"
    if op == "is_null":
        return f"{column} IS NULL" if cond.value else f"{column} IS NOT NULL"
    if op == "contains":
        if not cond.value:
            return "1"
        parts = []
        for item in cond.value:
            params.append(_encode_scalar(item))
            parts.append(f"EXISTS (SELECT 1 FROM json_each({column}) WHERE json_each.value = ?)")
        return " AND ".join(parts)
    if op == "overlaps":
        if not cond.value:
            return "0"
        params.extend(_encode_scalar(item) for item in cond.value)
        placeholders = ", ".join("?" for _ in cond.value)
        return f"EXISTS (SELECT 1 FROM json_each({column}) WHERE json_each.value IN ({placeholders}))"
    if op == "is_empty":
        comparison = "=" if cond.value else ">"
        return f"json_array_length(COALESCE({column}, '[]')) {comparison} 0"

    raise StoreError(f"Unsupported filter operator '{op}'", code=INVALID_IDENTIFIER)


def _compile_where(spec: TableSpec, query: Query) -> tuple[str, list]:
    params: list = []
    clauses = [_compile_condition(spec, cond, params) for cond in query.conditions]
    for branches in query.groups:
        parts = []
        for branch in branches:
            inner = [_compile_condition(spec, cond, params) for cond in branch] or ["1"]
            parts.append(f"({' AND '.join(inner)})")
        if parts:
            clauses.append(f"({' OR '.join(parts)})")
    where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


def _compile_tail(spec: TableSpec, query: Query) -> tuple[str, list]:
    sql = ""
    params: list = []
    if query.ordering:
        order = ", ".join(
            f"{_column(spec, column)} {'ASC' if ascending else 'DESC'}"
            for column, ascending in query.ordering
        )
        sql += f" ORDER BY {order}"
    if query.row_limit is not None or query.row_offset is not None:
        sql += " LIMIT ? OFFSET ?"
        params.extend([
            query.row_limit if query.row_limit is not None else -1,
            query.row_offset or 0,
        ])
    return sql, params


class Store:
    """Remote structured store addressed by table name."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    async def _get_db(self) -> aiosqlite.Connection:
        return await connect(self.db_path)

    def _table(self, table: str) -> TableSpec:
        spec = TABLES.get(table)
        if spec is None:
            raise StoreError(f"Unknown table '{table}'", code=INVALID_IDENTIFIER)
        return spec

    def _decode(self, spec: TableSpec, row: dict) -> dict:
        for column in spec.json_columns:
            value = row.get(column)
            if isinstance(value, str):
                row[column] = json.loads(value)
        for column in spec.bool_columns:
            if row.get(column) is not None:
                row[column] = bool(row[column])
        return row

    async def _fetch_by_ids(
        self, db: aiosqlite.Connection, spec: TableSpec, ids: list[str]
    ) -> list[dict]:
        if not ids:
            return []
        placeholders = ", ".join("?" for _ in ids)
        cursor = await db.execute(
            f"SELECT * FROM {spec.name} WHERE id IN ({placeholders})", ids
        )
        by_id = {row["id"]: self._decode(spec, dict(row)) for row in await cursor.fetchall()}
        return [by_id[row_id] for row_id in ids if row_id in by_id]

    async def insert(self, table: str, row: dict[str, Any]) -> dict:
        rows = await self.insert_many(table, [row])
        return rows[0]

    async def insert_many(self, table: str, rows: list[dict[str, Any]]) -> list[dict]:
        spec = self._table(table)
        if not rows:
            return []

        now = utc_now()
        prepared: list[dict[str, Any]] = []
        for row in rows:
            values = dict(row)
            if not values.get("id"):
                values["id"] = str(uuid4())
            if spec.has_column("created_at"):
                values["created_at"] = now
            if spec.has_column("updated_at"):
                values["updated_at"] = now
            prepared.append(values)

        db = await self._get_db()
        try:
            for values in prepared:
                columns = [_column(spec, column) for column in values]
                await db.execute(
                    f"INSERT INTO {table} ({', '.join(columns)}) "
                    f"VALUES ({', '.join('?' for _ in columns)})",
                    [_encode_value(spec, column, value) for column, value in values.items()],
                )
            await db.commit()
            return await self._fetch_by_ids(db, spec, [values["id"] for values in prepared])
        except aiosqlite.Error as exc:
            raise StoreError(f"Insert into {table} failed: {exc}") from exc
        finally:
            await db.close()

    async def select(
        self, table: str, query: Query | None = None, *, count: bool = False
    ) -> SelectResult:
        spec = self._table(table)
        query = query or Query()
        where, params = _compile_where(spec, query)
        tail, tail_params = _compile_tail(spec, query)

        db = await self._get_db()
        try:
            cursor = await db.execute(f"SELECT * FROM {table}{where}{tail}", params + tail_params)
            rows = [self._decode(spec, dict(row)) for row in await cursor.fetchall()]
            total = len(rows)
            if count:
                cursor = await db.execute(f"SELECT COUNT(*) FROM {table}{where}", params)
                total = (await cursor.fetchone())[0]
            return SelectResult(rows=rows, total=total)
        except aiosqlite.Error as exc:
            raise StoreError(f"Select from {table} failed: {exc}") from exc
        finally:
            await db.close()

    async def select_one(self, table: str, query: Query) -> dict:
        result = await self.select(table, query.limit(1))
        if not result.rows:
            raise RecordNotFoundError(table)
        return result.rows[0]

    async def count(self, table: str, query: Query | None = None) -> int:
        spec = self._table(table)
        where, params = _compile_where(spec, query or Query())

        db = await self._get_db()
        try:
            cursor = await db.execute(f"SELECT COUNT(*) FROM {table}{where}", params)
            return (await cursor.fetchone())[0]
        except aiosqlite.Error as exc:
            raise StoreError(f"Count on {table} failed: {exc}") from exc
        finally:
            await db.close()

    async def update(self, table: str, values: dict[str, Any], query: Query) -> list[dict]:
        """Apply ``values`` to every row matching ``query`` and return the updated rows."""
        spec = self._table(table)
        if not query.is_filtered:
            raise StoreError(f"Refusing unfiltered update on {table}")

        values = {k: v for k, v in values.items() if k != "id"}
        if spec.has_column("updated_at"):
            values["updated_at"] = utc_now()
        where, params = _compile_where(spec, query)
        set_clause = ", ".join(f"{_column(spec, column)} = ?" for column in values)
        set_params = [_encode_value(spec, column, value) for column, value in values.items()]

        db = await self._get_db()
        try:
            cursor = await db.execute(f"SELECT id FROM {table}{where}", params)
            ids = [row[0] for row in await cursor.fetchall()]
            if not ids:
                return []
            placeholders = ", ".join("?" for _ in ids)
            await db.execute(
                f"UPDATE {table} SET {set_clause} WHERE id IN ({placeholders})",
                set_params + ids,
            )
            await db.commit()
            return await self._fetch_by_ids(db, spec, ids)
        except aiosqlite.Error as exc:
            raise StoreError(f"Update on {table} failed: {exc}") from exc
        finally:
            await db.close()

    async def delete(self, table: str, query: Query) -> int:
        spec = self._table(table)
        if not query.is_filtered:
            raise StoreError(f"Refusing unfiltered delete on {table}")
        where, params = _compile_where(spec, query)

        db = await self._get_db()
        try:
            cursor = await db.execute(f"DELETE FROM {table}{where}", params)
            await db.commit()
            return cursor.rowcount
        except aiosqlite.Error as exc:
            raise StoreError(f"Delete on {table} failed: {exc}") from exc
        finally:
            await db.close()
