"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status

from wedding_timeline.api.admin import router as admin_router
from wedding_timeline.api.timeline_models import TimelineResponse
from wedding_timeline.app_logging import configure_logging
from wedding_timeline.containers import AppContainer
from wedding_timeline.services.media_events import MEDIA_UPLOADED


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        timeline_service = app.state.container.timeline_service
        try:
            await timeline_service.start()
        except Exception:
            logger.exception("Failed to start live timeline updates")
        yield
        await timeline_service.stop()
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/timeline")
    async def get_timeline(request: Request, tv: bool = False) -> TimelineResponse:
        """Return the current live timeline snapshot."""
        state_container: AppContainer = request.app.state.container
        snapshot = state_container.timeline_service.snapshot(tv_only=tv)
        return TimelineResponse.model_validate(snapshot)

    @app.post("/timeline/refresh")
    async def refresh_timeline(request: Request) -> TimelineResponse:
        """Refetch events and photos, then return the snapshot."""
        state_container: AppContainer = request.app.state.container
        await state_container.timeline_service.refresh()
        snapshot = state_container.timeline_service.snapshot()
        return TimelineResponse.model_validate(snapshot)

    @app.post("/timeline/media-uploaded", status_code=status.HTTP_202_ACCEPTED)
    async def media_uploaded(request: Request) -> dict[str, object]:
        """Signal that a guest finished uploading media."""
        state_container: AppContainer = request.app.state.container
        notified = await state_container.media_events.publish(MEDIA_UPLOADED)
        return {"status": "accepted", "notified": notified}

    return app

