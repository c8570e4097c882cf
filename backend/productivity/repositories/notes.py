"""Note repository: pinning, sharing, tags and content metrics."""

import math
from typing import Any

from productivity.cache.client import CacheManager
from productivity.database.store import Query, Store
from productivity.identity import IdentityResolver
from productivity.models import (
    Note,
    NoteFilters,
    NoteStats,
    Page,
    PaginationOptions,
    SearchOptions,
    SortOrder,
)
from productivity.repositories.base import Repository, apply_equality_filters

SEARCH_COLUMNS = ("title", "content")
WORDS_PER_MINUTE = 200


def content_metrics(content: str | None) -> tuple[int, int]:
    """Word count and reading time in whole minutes."""
    word_count = len((content or "").split())
    return word_count, math.ceil(word_count / WORDS_PER_MINUTE)


def _rounded_mean(total: int, count: int) -> int:
    return math.floor(total / count + 0.5) if count else 0


def calculate_note_stats(notes: list[Note]) -> NoteStats:
    total = len(notes)
    total_words = sum(n.word_count for n in notes)
    total_reading_time = sum(n.reading_time for n in notes)
    return NoteStats(
        total=total,
        archived=sum(1 for n in notes if n.is_archived),
        pinned=sum(1 for n in notes if n.is_pinned),
        shared=sum(1 for n in notes if n.shared_with),
        total_words=total_words,
        total_reading_time=total_reading_time,
        average_word_count=_rounded_mean(total_words, total),
        average_reading_time=_rounded_mean(total_reading_time, total),
    )


def apply_note_filters(query: Query, filters: dict[str, Any]) -> Query:
    filters = dict(filters)
    shared = filters.pop("shared", None)
    apply_equality_filters(query, filters)
    if shared is not None:
        query.is_empty("shared_with", not shared)
    return query


def prepare_note_create(values: dict[str, Any]) -> dict[str, Any]:
    values["word_count"], values["reading_time"] = content_metrics(values.get("content"))
    return values


def prepare_note_update(current: Note, changes: dict[str, Any]) -> dict[str, Any]:
    if "content" in changes:
        changes["word_count"], changes["reading_time"] = content_metrics(changes["content"])
    return changes


class NoteRepository:
    def __init__(
        self,
        store: Store,
        cache: CacheManager,
        identity: IdentityResolver,
        batch_size: int = 10,
    ):
        self.base: Repository[Note, NoteStats] = Repository(
            store=store,
            cache=cache,
            identity=identity,
            table="notes",
            cache_prefix="note",
            model=Note,
            search_columns=SEARCH_COLUMNS,
            calculate_stats=calculate_note_stats,
            stats_model=NoteStats,
            apply_filters=apply_note_filters,
            prepare_create=prepare_note_create,
            prepare_update=prepare_note_update,
            batch_size=batch_size,
        )

    async def get_with_filters(
        self,
        filters: NoteFilters | None = None,
        pagination: PaginationOptions | None = None,
        query: str | None = None,
    ) -> Page[Note]:
        values = (filters or NoteFilters()).model_dump(exclude_none=True)
        values.setdefault("is_archived", False)
        return await self.base.get_all(pagination, SearchOptions(query=query, filters=values))

    async def get_pinned(self) -> list[Note]:
        page = await self.get_with_filters(NoteFilters(is_pinned=True))
        return page.data

    async def get_recent(self, limit: int = 10) -> list[Note]:
        page = await self.get_with_filters(
            NoteFilters(is_archived=False),
            PaginationOptions(page=1, limit=limit, sort_by="updated_at", sort_order=SortOrder.DESC),
        )
        return page.data

    async def get_by_category(self, category_id: str) -> list[Note]:
        page = await self.get_with_filters(NoteFilters(category_id=category_id))
        return page.data

    async def toggle_pin(self, note_id: str) -> Note:
        return await self.base.toggle(note_id, "is_pinned")

    async def toggle_archive(self, note_id: str) -> Note:
        return await self.base.toggle(note_id, "is_archived")

    async def share(self, note_id: str, user_ids: list[str]) -> Note:
        note = await self.base.require(note_id)
        shared_with = list(dict.fromkeys([*note.shared_with, *user_ids]))
        return await self.base.update(note_id, {"shared_with": shared_with})

    async def unshare(self, note_id: str, user_ids: list[str]) -> Note:
        note = await self.base.require(note_id)
        removed = set(user_ids)
        shared_with = [user for user in note.shared_with if user not in removed]
        return await self.base.update(note_id, {"shared_with": shared_with})

    async def get_shared(self) -> list[Note]:
        """Non-archived notes other owners have shared with the caller."""
        user_id = await self.base.current_owner()
        return await self.base.find(
            Query()
            .contains("shared_with", [user_id])
            .eq("is_archived", False)
            .order("updated_at", ascending=False),
            owner_scoped=False,
        )

    async def search(self, text: str, pagination: PaginationOptions | None = None) -> Page[Note]:
        pagination = (pagination or PaginationOptions()).model_copy(
            update={"sort_by": "updated_at", "sort_order": SortOrder.DESC}
        )
        query = self.base.apply_search_filter(Query().eq("is_archived", False), text)
        return await self.base.find_page(query, pagination)

    async def get_by_tags(self, tags: list[str]) -> list[Note]:
        """Non-archived notes carrying at least one of ``tags``."""
        return await self.base.find(
            Query()
            .overlaps("tags", tags)
            .eq("is_archived", False)
            .order("updated_at", ascending=False)
        )

    async def get_all_tags(self) -> list[str]:
        notes = await self.base.find(Query().eq("is_archived", False))
        return sorted({tag for note in notes for tag in note.tags})

    async def duplicate(self, note_id: str) -> Note:
        """Copy content, tags, category and formatting; flags and sharing reset."""
        source = await self.base.require(note_id)
        return await self.base.create({
            "title": f"{source.title} (Copy)",
            "content": source.content,
            "category_id": source.category_id,
            "tags": list(source.tags),
            "formatting": dict(source.formatting),
            "attachments": [],
            "shared_with": [],
            "is_pinned": False,
            "is_archived": False,
        })
