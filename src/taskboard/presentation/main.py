from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import inject
import uvicorn
from fastapi import FastAPI

from src.setup.api_config import get_api_settings
from src.setup.app_config import configure_di, release_resources
from src.setup.logging_config import configure_logging
from src.taskboard.application.session import TrackerSession
from src.taskboard.presentation.routes import router as api_router
from src.taskboard.presentation.websockets import (
    StateConnectionManager,
    WebSocketStateBroadcaster,
    router as ws_router,
)

logger = logging.getLogger(__name__)


def create_app(session: TrackerSession | None = None) -> FastAPI:
    """Build the API. Without an explicit session one is resolved through DI at startup."""
    settings = get_api_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_backend = app.state.session is None
        if owns_backend:
            configure_di(settings)
            app.state.session = inject.instance(TrackerSession)
        active: TrackerSession = app.state.session
        detach = active.add_listener(WebSocketStateBroadcaster(app.state.connections))
        await active.start()
        logger.info("Session started", extra={"mode": active.mode.value})
        try:
            yield
        finally:
            detach()
            active.close()
            if owns_backend:
                await release_resources()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Task board with local and remote data sources",
        lifespan=lifespan,
    )
    app.state.session = session
    app.state.connections = StateConnectionManager()
    app.include_router(api_router, prefix="")
    app.include_router(ws_router, prefix="")
    return app


app = create_app()


def run() -> None:
    settings = get_api_settings()
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
