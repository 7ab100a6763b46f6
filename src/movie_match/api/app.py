"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from movie_match.api.admin import router as admin_router
from movie_match.api.error_handlers import register_error_handlers
from movie_match.api.movies import router as movies_router
from movie_match.api.rooms import router as rooms_router
from movie_match.app_logging import configure_logging
from movie_match.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Starting movie-match (environment=%s)", container.settings.environment
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="movie-match", lifespan=lifespan)
    app.state.container = container

    register_error_handlers(app)
    app.include_router(rooms_router)
    app.include_router(movies_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
