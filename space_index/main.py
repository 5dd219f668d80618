from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from space_index.api.health import router as health_router
from space_index.api.routes_sci import router as sci_router
from space_index.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: load and validate scoring tables. A broken table is fatal.
    from space_index.score.tables import get_tables

    tables = get_tables()
    logger.info("Scoring tables %s ready", tables.version)

    yield

    # Shutdown
    from space_index.api.deps import get_breakdown_cache
    get_breakdown_cache().clear()


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(title="Space Capability Index", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.app_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(sci_router)

    return app


app = create_app()
