"""
Productivity - FastAPI Backend
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from productivity.config import Settings, settings
from productivity.database.db import init_db
from productivity.identity import IdentityMiddleware, SessionIdentity
from productivity.logging import setup_logging, get_logger
from productivity.routers import (
    categories,
    dashboard,
    events,
    notes,
    todos,
)
from productivity.services.container import build_services
from productivity.services.facade import ApiError

logger = get_logger('main')


def create_app(config: Settings = settings) -> FastAPI:
    identity = SessionIdentity()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(config.DEBUG)
        logger.info("Starting Productivity API")

        await init_db(config.DATABASE_PATH)
        logger.info("Database initialized")

        app.state.services = build_services(
            db_path=config.DATABASE_PATH,
            identity=identity,
            config=config,
        )
        logger.info("Services initialized")

        yield

        logger.info("Shutting down application")

    app = FastAPI(
        title="Productivity API",
        description="Todos, notes, calendar events and categories with a cached repository layer",
        version="1.0.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(IdentityMiddleware, header=config.AUTH_USER_HEADER, identity=identity)

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    app.include_router(todos.router, prefix="/api/todos", tags=["Todos"])
    app.include_router(notes.router, prefix="/api/notes", tags=["Notes"])
    app.include_router(events.router, prefix="/api/events", tags=["Events"])
    app.include_router(categories.router, prefix="/api/categories", tags=["Categories"])
    app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "service": "productivity",
            "cache_enabled": app.state.services.cache.enabled if hasattr(app.state, 'services') else False,
        }

    @app.get("/")
    async def root():
        return {
            "name": "Productivity API",
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/health"
        }

    return app
