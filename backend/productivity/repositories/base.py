"""
Generic ownership-scoped repository engine.

One ``Repository`` instance per table. Domain repositories configure it with
their record model, searchable columns, statistics reducer and optional
create/update/filter strategies instead of subclassing it.

Every read and write is scoped to the authenticated owner. Reads go through
the cache; writes invalidate it and append an audit row. Cache and audit
failures are logged and never fail the primary operation.
"""

import asyncio
from collections.abc import Callable, Sequence
from typing import Any, Generic, Optional, TypeVar, get_args

from pydantic import BaseModel, ValidationError

from productivity.cache.client import CacheKeys, CacheManager
from productivity.database.schema import TABLES
from productivity.database.store import NOT_FOUND, Query, Store, StoreError
from productivity.errors import NotFoundError, StoreFailure, ValidationFailure
from productivity.identity import IdentityResolver
from productivity.logging import get_logger
from productivity.models import ActivityAction, Page, PaginationOptions, SearchOptions, SortOrder

logger = get_logger("repositories.base")

T = TypeVar("T", bound=BaseModel)
S = TypeVar("S", bound=BaseModel)

ACTIVITY_TABLE = "activity_logs"
PROTECTED_FIELDS = frozenset({"id", "created_at", "updated_at", "created_by"})

FilterApplier = Callable[[Query, dict[str, Any]], Query]
CreateHook = Callable[[dict[str, Any]], dict[str, Any]]
UpdateHook = Callable[[Any, dict[str, Any]], dict[str, Any]]


def nullable_fields(model: type[BaseModel]) -> frozenset[str]:
    return frozenset(
        name for name, field in model.model_fields.items()
        if type(None) in get_args(field.annotation)
    )


def apply_equality_filters(query: Query, filters: dict[str, Any]) -> Query:
    """Default filter strategy: every non-null filter value is an equality test."""
    for key, value in filters.items():
        if value is not None:
            query.eq(key, value)
    return query


class Repository(Generic[T, S]):
    """CRUD, paging, search, bulk operations, auditing and stats for one table."""

    def __init__(
        self,
        *,
        store: Store,
        cache: CacheManager,
        identity: IdentityResolver,
        table: str,
        cache_prefix: str,
        model: type[T],
        search_columns: Sequence[str],
        calculate_stats: Callable[[list[T]], S],
        stats_model: type[S],
        apply_filters: FilterApplier = apply_equality_filters,
        prepare_create: Optional[CreateHook] = None,
        prepare_update: Optional[UpdateHook] = None,
        batch_size: int = 10,
    ):
        self.store = store
        self.cache = cache
        self.identity = identity
        self.table = table
        self.cache_prefix = cache_prefix
        self.model = model
        self.page_model = Page[model]
        self.nullable = nullable_fields(model)
        self.search_columns = tuple(search_columns)
        self.calculate_stats = calculate_stats
        self.stats_model = stats_model
        self.apply_filters = apply_filters
        self.prepare_create = prepare_create
        self.prepare_update = prepare_update
        self.batch_size = batch_size

    async def current_owner(self) -> str:
        return await self.identity.current_user_id()

    def _to_record(self, row: dict) -> T:
        return self.model.model_validate(row)

    def _from_cache(self, cached: Any, model: type[BaseModel]) -> Any:
        if not isinstance(cached, dict):
            return None
        try:
            return model.model_validate(cached)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable {self.cache_prefix} cache entry: {e}")
            return None

    def _failure(self, operation: str, error: Exception, **context: Any) -> StoreFailure:
        details = ", ".join(f"{k}={v}" for k, v in context.items() if v is not None)
        logger.error(f"Error during {operation} on {self.table} ({details}): {error}")
        return StoreFailure(f"{operation} {self.table}")

    def _prepare_new(self, data: dict[str, Any], owner: str) -> dict[str, Any]:
        values = {k: v for k, v in data.items() if k not in PROTECTED_FIELDS}
        if self.prepare_create:
            values = self.prepare_create(values)
        values["created_by"] = owner
        return values

    def apply_search_filter(self, query: Query, text: str) -> Query:
        """OR of case-insensitive partial matches across the searchable columns."""
        return query.or_(*(Query().ilike(column, text) for column in self.search_columns))

    async def create(self, data: dict[str, Any]) -> T:
        owner = await self.current_owner()
        values = self._prepare_new(data, owner)
        try:
            row = await self.store.insert(self.table, values)
        except StoreError as e:
            raise self._failure("create", e, owner=owner) from None

        record = self._to_record(row)
        await self.cache.invalidate_user_cache(owner)
        await self._log_activity(owner, record.id, ActivityAction.CREATE, None, record)
        return record

    async def get_by_id(self, record_id: str) -> T | None:
        owner = await self.current_owner()
        cache_key = CacheKeys.record(self.cache_prefix, record_id)

        cached = self._from_cache(await self.cache.get(cache_key), self.model)
        if cached is not None and cached.created_by == owner:
            return cached

        try:
            row = await self.store.select_one(
                self.table, Query().eq("id", record_id).eq("created_by", owner)
            )
        except StoreError as e:
            if e.code == NOT_FOUND:
                return None
            raise self._failure("fetch", e, id=record_id) from None

        record = self._to_record(row)
        await self.cache.set(cache_key, record.model_dump(mode="json"), self.cache.ttl.MEDIUM)
        return record

    async def get_all(
        self,
        pagination: PaginationOptions | None = None,
        search: SearchOptions | None = None,
    ) -> Page[T]:
        pagination = pagination or PaginationOptions()
        search = search or SearchOptions()
        owner = await self.current_owner()
        cache_key = CacheKeys.query(
            self.cache_prefix,
            owner,
            "getAll",
            {
                "pagination": pagination.model_dump(mode="json"),
                "search": search.model_dump(mode="json"),
            },
        )

        cached = self._from_cache(await self.cache.get(cache_key), self.page_model)
        if cached is not None:
            return cached

        query = Query().eq("created_by", owner)
        if search.query:
            self.apply_search_filter(query, search.query)
        if search.filters:
            self.apply_filters(query, search.filters)

        page = await self._fetch_page(query, pagination)
        await self.cache.set(cache_key, page.model_dump(mode="json"), self.cache.ttl.SHORT)
        return page

    async def find_page(
        self, query: Query, pagination: PaginationOptions, *, owner_scoped: bool = True
    ) -> Page[T]:
        """Uncached paginated listing for domain-specific queries."""
        if owner_scoped:
            query.eq("created_by", await self.current_owner())
        return await self._fetch_page(query, pagination)

    async def _fetch_page(self, query: Query, pagination: PaginationOptions) -> Page[T]:
        if not TABLES[self.table].has_column(pagination.sort_by):
            raise ValidationFailure(f"Cannot sort {self.table} by '{pagination.sort_by}'")
        ascending = pagination.sort_order == SortOrder.ASC
        offset = pagination.offset
        query.order(pagination.sort_by, ascending).order("id", ascending)
        query.range(offset, offset + pagination.limit - 1)
        try:
            result = await self.store.select(self.table, query, count=True)
        except StoreError as e:
            raise self._failure("fetch", e, sort_by=pagination.sort_by) from None

        return self.page_model(
            data=[self._to_record(row) for row in result.rows],
            total=result.total,
            has_more=result.total > offset + pagination.limit,
        )

    async def find(self, query: Query, *, owner_scoped: bool = True) -> list[T]:
        """Uncached listing; owner-scoped unless the caller opts out."""
        if owner_scoped:
            query.eq("created_by", await self.current_owner())
        try:
            result = await self.store.select(self.table, query)
        except StoreError as e:
            raise self._failure("fetch", e) from None
        return [self._to_record(row) for row in result.rows]

    async def require(self, record_id: str) -> T:
        """``get_by_id`` that raises ``NotFoundError`` instead of returning None."""
        record = await self.get_by_id(record_id)
        if record is None:
            raise NotFoundError(f"{self.table} {record_id} not found")
        return record

    async def toggle(self, record_id: str, field: str) -> T:
        """Flip a boolean flag: read, then write the negated value."""
        current = await self.require(record_id)
        return await self.update(record_id, {field: not getattr(current, field)})

    async def update(self, record_id: str, changes: dict[str, Any]) -> T:
        owner = await self.current_owner()
        current = await self.require(record_id)

        # An explicit null only clears columns the record allows to be empty.
        values = {
            k: v for k, v in changes.items()
            if k not in PROTECTED_FIELDS and (v is not None or k in self.nullable)
        }
        if self.prepare_update:
            values = self.prepare_update(current, values)
        try:
            rows = await self.store.update(
                self.table, values, Query().eq("id", record_id).eq("created_by", owner)
            )
        except StoreError as e:
            raise self._failure("update", e, id=record_id) from None
        if not rows:
            raise NotFoundError(f"{self.table} {record_id} not found")

        record = self._to_record(rows[0])
        await self.cache.invalidate_item_cache(self.cache_prefix, record_id, owner)
        await self._log_activity(owner, record_id, ActivityAction.UPDATE, current, record)
        return record

    async def delete(self, record_id: str) -> None:
        owner = await self.current_owner()
        current = await self.require(record_id)

        try:
            await self.store.delete(
                self.table, Query().eq("id", record_id).eq("created_by", owner)
            )
        except StoreError as e:
            raise self._failure("delete", e, id=record_id) from None

        await self.cache.invalidate_item_cache(self.cache_prefix, record_id, owner)
        await self._log_activity(owner, record_id, ActivityAction.DELETE, current, None)

    async def bulk_create(self, items: Sequence[dict[str, Any]]) -> list[T]:
        owner = await self.current_owner()
        values = [self._prepare_new(item, owner) for item in items]
        if not values:
            return []
        try:
            rows = await self.store.insert_many(self.table, values)
        except StoreError as e:
            raise self._failure("bulk create", e, owner=owner, count=len(values)) from None

        records = [self._to_record(row) for row in rows]
        await self.cache.invalidate_user_cache(owner)
        for record in records:
            await self._log_activity(owner, record.id, ActivityAction.CREATE, None, record)
        return records

    async def bulk_update(self, updates: Sequence[tuple[str, dict[str, Any]]]) -> list[T]:
        """
        Apply updates in fixed-size batches; items within a batch run concurrently.

        There is no transaction: if an item fails, earlier batches (and any
        items of the failing batch that completed) stay applied.
        """
        await self.current_owner()
        results: list[T] = []
        for start in range(0, len(updates), self.batch_size):
            batch = updates[start:start + self.batch_size]
            results.extend(
                await asyncio.gather(*(self.update(record_id, changes) for record_id, changes in batch))
            )
        return results

    async def bulk_delete(self, record_ids: Sequence[str]) -> int:
        owner = await self.current_owner()
        ids = list(dict.fromkeys(record_ids))
        if not ids:
            return 0
        try:
            existing = await self.store.select(
                self.table, Query().in_("id", ids).eq("created_by", owner)
            )
            deleted = await self.store.delete(
                self.table, Query().in_("id", ids).eq("created_by", owner)
            )
        except StoreError as e:
            raise self._failure("bulk delete", e, owner=owner, count=len(ids)) from None

        await asyncio.gather(
            *(self.cache.delete(CacheKeys.record(self.cache_prefix, record_id)) for record_id in ids),
            self.cache.invalidate_user_cache(owner),
        )
        for row in existing.rows:
            await self._log_activity(owner, row["id"], ActivityAction.DELETE, self._to_record(row), None)
        return deleted

    async def count_where(self, column: str, value: Any) -> int:
        owner = await self.current_owner()
        try:
            return await self.store.count(
                self.table, Query().eq(column, value).eq("created_by", owner)
            )
        except StoreError as e:
            raise self._failure("count", e, column=column) from None

    async def reassign(self, column: str, old_value: Any, new_value: Any) -> int:
        """Rewrite ``column`` from ``old_value`` to ``new_value`` on every owned row."""
        owner = await self.current_owner()
        try:
            before = await self.store.select(
                self.table, Query().eq(column, old_value).eq("created_by", owner)
            )
            if not before.rows:
                return 0
            rows = await self.store.update(
                self.table,
                {column: new_value},
                Query().in_("id", [row["id"] for row in before.rows]).eq("created_by", owner),
            )
        except StoreError as e:
            raise self._failure("reassign", e, column=column) from None

        await asyncio.gather(
            *(self.cache.delete(CacheKeys.record(self.cache_prefix, row["id"])) for row in rows),
            self.cache.invalidate_pattern(CacheKeys.owner_pattern(self.cache_prefix, owner)),
            self.cache.invalidate_stats(owner),
        )
        previous = {row["id"]: row for row in before.rows}
        for row in rows:
            await self._log_activity(
                owner,
                row["id"],
                ActivityAction.UPDATE,
                self._to_record(previous[row["id"]]),
                self._to_record(row),
            )
        return len(rows)

    async def get_stats(self) -> S:
        owner = await self.current_owner()
        cache_key = CacheKeys.stats(owner, self.cache_prefix)

        cached = self._from_cache(await self.cache.get(cache_key), self.stats_model)
        if cached is not None:
            return cached

        try:
            result = await self.store.select(self.table, Query().eq("created_by", owner))
        except StoreError as e:
            raise self._failure("fetch stats for", e, owner=owner) from None

        stats = self.calculate_stats([self._to_record(row) for row in result.rows])
        await self.cache.set(cache_key, stats.model_dump(mode="json"), self.cache.ttl.MEDIUM)
        return stats

    async def _log_activity(
        self,
        owner: str,
        entity_id: str,
        action: ActivityAction,
        old: T | None,
        new: T | None,
    ) -> None:
        try:
            await self.store.insert(
                ACTIVITY_TABLE,
                {
                    "user_id": owner,
                    "entity_type": self.table,
                    "entity_id": entity_id,
                    "action": action,
                    "old_values": old.model_dump(mode="json") if old is not None else None,
                    "new_values": new.model_dump(mode="json") if new is not None else None,
                },
            )
        except Exception as e:
            logger.error(f"Error logging {action.value} activity for {self.table} {entity_id}: {e}")
