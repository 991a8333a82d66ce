"""FastAPI server exposing resource health."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from healthdeck.api.routes import health_router
from healthdeck.errors import ConfigurationError
from healthdeck.resources.loader import ResourceLoader

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the resources file on startup unless a loader was injected."""
    if getattr(app.state, "loader", None) is None:
        loader = ResourceLoader()
        try:
            loader.load()
        except ConfigurationError:
            logger.exception("Failed to load resources — serving an empty fleet")
        app.state.loader = loader
    logger.info("healthdeck API ready: %d resources", len(app.state.loader.resources))
    yield
    app.state.loader.close()


def create_app(loader: ResourceLoader | None = None) -> FastAPI:
    app = FastAPI(title="healthdeck", lifespan=lifespan)
    app.state.loader = loader
    app.include_router(health_router, prefix="/api")
    return app


app = create_app()
