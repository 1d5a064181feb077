"""
FastAPI application factory for the catalog search API.

Read-only JSON surface over search.PhotoSearch.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: make sure the catalog schema exists on startup."""
    from db import DEFAULT_DB_PATH, init_database
    init_database(DEFAULT_DB_PATH)
    yield


def create_app() -> FastAPI:
    """FastAPI application factory."""
    app = FastAPI(
        title="Catalog Search API",
        description="Faceted search over a photo catalog",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
    )

    from api.routers.search import router as search_router
    app.include_router(search_router)

    return app
