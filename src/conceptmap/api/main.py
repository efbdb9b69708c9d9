"""FastAPI application for the Conceptmap API.

Builds concept maps from note corpora or authored definitions and serves
them as interactive HTML, static images and DOT source.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from conceptmap.api.routes import router
from conceptmap.api.store import MapStore
from conceptmap.config import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan - startup and shutdown."""
    logger.info("Starting Conceptmap API...")

    # Maps live only as long as the application
    app.state.store = MapStore(max_maps=settings.store_max_maps)
    logger.info(f"Map store ready (max {app.state.store.max_maps} maps)")

    yield

    logger.info(f"Shutting down Conceptmap API, dropping {len(app.state.store)} maps")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Conceptmap",
        description="Concept maps from hierarchical notes, static and interactive",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "conceptmap.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
