"""
Dependency injection for FastAPI routes.

Provides typed facade dependencies that enable IDE navigation (Ctrl+Click).
"""

from typing import Annotated
from fastapi import Request, Depends

from productivity.services.dashboard import DashboardAPI
from productivity.services.facade import CategoryAPI, EventAPI, NoteAPI, TodoAPI


def get_todo_api(request: Request) -> TodoAPI:
    return request.app.state.services.todos


def get_note_api(request: Request) -> NoteAPI:
    return request.app.state.services.notes


def get_event_api(request: Request) -> EventAPI:
    return request.app.state.services.events


def get_category_api(request: Request) -> CategoryAPI:
    return request.app.state.services.categories


def get_dashboard_api(request: Request) -> DashboardAPI:
    return request.app.state.services.dashboard


TodoAPIDep = Annotated[TodoAPI, Depends(get_todo_api)]
NoteAPIDep = Annotated[NoteAPI, Depends(get_note_api)]
EventAPIDep = Annotated[EventAPI, Depends(get_event_api)]
CategoryAPIDep = Annotated[CategoryAPI, Depends(get_category_api)]
DashboardAPIDep = Annotated[DashboardAPI, Depends(get_dashboard_api)]
