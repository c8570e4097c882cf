"""Service wiring: one store, one cache and one identity shared by every repository."""

from dataclasses import dataclass

from productivity.cache.client import CacheManager, CacheTTL, MemoryCacheClient
from productivity.config import Settings, settings
from productivity.database.store import Store
from productivity.identity import IdentityResolver
from productivity.logging import get_logger
from productivity.repositories.categories import CategoryRepository
from productivity.repositories.events import EventRepository
from productivity.repositories.notes import NoteRepository
from productivity.repositories.todos import TodoRepository
from productivity.services.dashboard import DashboardAPI
from productivity.services.facade import CategoryAPI, EventAPI, NoteAPI, TodoAPI

logger = get_logger("services.container")


@dataclass
class Services:
    store: Store
    cache: CacheManager
    todos: TodoAPI
    notes: NoteAPI
    events: EventAPI
    categories: CategoryAPI
    dashboard: DashboardAPI


def build_cache(config: Settings = settings) -> CacheManager:
    if not config.CACHE_ENABLED:
        logger.info("Cache disabled - all reads go to the store")
        return CacheManager(None, CacheTTL(config))
    return CacheManager(MemoryCacheClient(), CacheTTL(config))


def build_services(
    db_path: str,
    identity: IdentityResolver,
    cache: CacheManager | None = None,
    config: Settings = settings,
) -> Services:
    store = Store(db_path)
    cache = cache if cache is not None else build_cache(config)
    batch_size = config.BULK_BATCH_SIZE

    todos = TodoRepository(store, cache, identity, batch_size)
    notes = NoteRepository(store, cache, identity, batch_size)
    events = EventRepository(store, cache, identity, batch_size)
    categories = CategoryRepository(
        store,
        cache,
        identity,
        referrers={"todos": todos.base, "notes": notes.base, "events": events.base},
        batch_size=batch_size,
    )

    todo_api = TodoAPI(todos)
    note_api = NoteAPI(notes)
    event_api = EventAPI(events)
    category_api = CategoryAPI(categories)
    return Services(
        store=store,
        cache=cache,
        todos=todo_api,
        notes=note_api,
        events=event_api,
        categories=category_api,
        dashboard=DashboardAPI(todo_api, note_api, event_api, category_api),
    )
