"""Category repository: usage counts and reference-safe deletion."""

import asyncio
from collections import Counter
from typing import Any

from productivity.cache.client import CacheManager
from productivity.database.store import Query, Store
from productivity.errors import ValidationFailure
from productivity.identity import IdentityResolver
from productivity.models import (
    DEFAULT_CATEGORY_COLOR,
    Category,
    CategoryDeletability,
    CategoryStats,
    CategoryUsage,
    CategoryUsageCounts,
)
from productivity.repositories.base import Repository

SEARCH_COLUMNS = ("name", "description")
CATEGORY_COLUMN = "category_id"


def calculate_category_stats(categories: list[Category]) -> CategoryStats:
    return CategoryStats(
        total=len(categories),
        with_icons=sum(1 for c in categories if c.icon),
        with_descriptions=sum(1 for c in categories if c.description),
        color_distribution=dict(Counter(c.color for c in categories)),
    )


def prepare_category_create(values: dict[str, Any]) -> dict[str, Any]:
    values["color"] = values.get("color") or DEFAULT_CATEGORY_COLOR
    return values


class CategoryRepository:
    """
    Categories are referenced by todos, notes and events through
    ``category_id``. ``referrers`` maps each referring kind to its engine so
    usage can be counted and references moved without reaching into the
    other repositories' tables directly.
    """

    def __init__(
        self,
        store: Store,
        cache: CacheManager,
        identity: IdentityResolver,
        referrers: dict[str, Repository],
        batch_size: int = 10,
    ):
        self.base: Repository[Category, CategoryStats] = Repository(
            store=store,
            cache=cache,
            identity=identity,
            table="categories",
            cache_prefix="category",
            model=Category,
            search_columns=SEARCH_COLUMNS,
            calculate_stats=calculate_category_stats,
            stats_model=CategoryStats,
            prepare_create=prepare_category_create,
            batch_size=batch_size,
        )
        self.referrers = referrers

    async def _count_usage(self, category_id: str) -> CategoryUsageCounts:
        kinds = list(self.referrers)
        counts = await asyncio.gather(
            *(self.referrers[kind].count_where(CATEGORY_COLUMN, category_id) for kind in kinds)
        )
        return CategoryUsageCounts(**dict(zip(kinds, counts)))

    async def get_usage(self) -> list[CategoryUsage]:
        """Every owned category with its todo/note/event reference counts."""
        categories = await self.base.find(Query().order("name"))
        usages = await asyncio.gather(*(self._count_usage(c.id) for c in categories))
        return [
            CategoryUsage(category=category, usage=usage)
            for category, usage in zip(categories, usages)
        ]

    async def can_delete(self, category_id: str) -> CategoryDeletability:
        await self.base.require(category_id)
        usage = await self._count_usage(category_id)
        return CategoryDeletability(can_delete=usage.total == 0, usage=usage)

    async def delete(self, category_id: str) -> None:
        """Delete an unreferenced category; referenced ones are refused."""
        usage = (await self.can_delete(category_id)).usage
        if usage.total:
            raise ValidationFailure(
                f"Category {category_id} is still used by {usage.todos} todos, "
                f"{usage.notes} notes and {usage.events} events"
            )
        await self.base.delete(category_id)

    async def bulk_delete(self, category_ids: list[str]) -> int:
        """
        Delete several categories at once. If any owned category in the batch
        is still referenced the whole batch is refused and nothing is deleted.
        """
        ids = list(dict.fromkeys(category_ids))
        if not ids:
            return 0
        owned = await self.base.find(Query().in_("id", ids))
        usages = await asyncio.gather(*(self._count_usage(c.id) for c in owned))
        referenced = [c.id for c, usage in zip(owned, usages) if usage.total]
        if referenced:
            raise ValidationFailure(
                f"Categories still in use: {', '.join(sorted(referenced))}"
            )
        return await self.base.bulk_delete(ids)

    async def delete_with_reassignment(
        self, category_id: str, reassign_to: str | None = None
    ) -> None:
        """
        Delete a category after moving its references.

        With ``reassign_to`` every referring todo, note and event moves to that
        category; without it their ``category_id`` is cleared.
        """
        await self.base.require(category_id)
        if reassign_to is not None:
            if reassign_to == category_id:
                raise ValidationFailure("Cannot reassign a category to itself")
            await self.base.require(reassign_to)

        await asyncio.gather(
            *(
                repository.reassign(CATEGORY_COLUMN, category_id, reassign_to)
                for repository in self.referrers.values()
            )
        )
        await self.base.delete(category_id)
