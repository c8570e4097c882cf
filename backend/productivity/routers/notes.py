"""Note routes."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from productivity.dependencies import NoteAPIDep
from productivity.models import (
    BulkDelete,
    BulkUpdateItem,
    Note,
    NoteCreate,
    NoteFilters,
    NoteShare,
    NoteStats,
    NoteUpdate,
    Page,
)
from productivity.routers.params import PaginationDep

router = APIRouter()


def note_filters(
    category_id: Optional[str] = None,
    is_archived: Optional[bool] = None,
    is_pinned: Optional[bool] = None,
    shared: Optional[bool] = None,
) -> NoteFilters:
    return NoteFilters(
        category_id=category_id, is_archived=is_archived, is_pinned=is_pinned, shared=shared
    )


@router.get("", response_model=Page[Note])
async def list_notes(
    api: NoteAPIDep,
    pagination: PaginationDep,
    filters: Annotated[NoteFilters, Depends(note_filters)],
    q: Optional[str] = None,
):
    return await api.get_with_filters(filters, pagination, q)


@router.post("", response_model=Note, status_code=201)
async def create_note(body: NoteCreate, api: NoteAPIDep):
    return await api.create(body)


@router.get("/stats", response_model=NoteStats)
async def get_note_stats(api: NoteAPIDep):
    return await api.get_stats()


@router.get("/pinned", response_model=list[Note])
async def get_pinned_notes(api: NoteAPIDep):
    return await api.get_pinned()


@router.get("/recent", response_model=list[Note])
async def get_recent_notes(api: NoteAPIDep, limit: Annotated[int, Query(gt=0, le=100)] = 10):
    return await api.get_recent(limit)


@router.get("/shared", response_model=list[Note])
async def get_shared_notes(api: NoteAPIDep):
    return await api.get_shared()


@router.get("/search", response_model=Page[Note])
async def search_notes(api: NoteAPIDep, pagination: PaginationDep, q: Annotated[str, Query(min_length=1)]):
    return await api.search(q, pagination)


@router.get("/tags", response_model=list[str])
async def get_note_tags(api: NoteAPIDep):
    return await api.get_all_tags()


@router.get("/by-tags", response_model=list[Note])
async def get_notes_by_tags(api: NoteAPIDep, tag: Annotated[list[str], Query(min_length=1)]):
    return await api.get_by_tags(tag)


@router.get("/category/{category_id}", response_model=list[Note])
async def get_notes_by_category(category_id: str, api: NoteAPIDep):
    return await api.get_by_category(category_id)


@router.post("/bulk", response_model=list[Note], status_code=201)
async def bulk_create_notes(body: list[NoteCreate], api: NoteAPIDep):
    return await api.bulk_create(body)


@router.put("/bulk", response_model=list[Note])
async def bulk_update_notes(body: list[BulkUpdateItem], api: NoteAPIDep):
    return await api.bulk_update(body)


@router.post("/bulk-delete")
async def bulk_delete_notes(body: BulkDelete, api: NoteAPIDep):
    deleted = await api.bulk_delete(body.ids)
    return {"status": "deleted", "count": deleted}


@router.get("/{note_id}", response_model=Note)
async def get_note(note_id: str, api: NoteAPIDep):
    note = await api.get_by_id(note_id)
    if not note:
        raise HTTPException(404, "Note not found")
    return note


@router.put("/{note_id}", response_model=Note)
async def update_note(note_id: str, body: NoteUpdate, api: NoteAPIDep):
    return await api.update(note_id, body)


@router.delete("/{note_id}")
async def delete_note(note_id: str, api: NoteAPIDep):
    await api.delete(note_id)
    return {"status": "deleted", "id": note_id}


@router.post("/{note_id}/pin", response_model=Note)
async def toggle_note_pin(note_id: str, api: NoteAPIDep):
    return await api.toggle_pin(note_id)


@router.post("/{note_id}/archive", response_model=Note)
async def toggle_note_archive(note_id: str, api: NoteAPIDep):
    return await api.toggle_archive(note_id)


@router.post("/{note_id}/share", response_model=Note)
async def share_note(note_id: str, body: NoteShare, api: NoteAPIDep):
    return await api.share(note_id, body.user_ids)


@router.post("/{note_id}/unshare", response_model=Note)
async def unshare_note(note_id: str, body: NoteShare, api: NoteAPIDep):
    return await api.unshare(note_id, body.user_ids)


@router.post("/{note_id}/duplicate", response_model=Note, status_code=201)
async def duplicate_note(note_id: str, api: NoteAPIDep):
    return await api.duplicate(note_id)
