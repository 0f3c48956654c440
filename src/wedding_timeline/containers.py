"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from wedding_timeline.adapters.sanity_client import HttpxSanityClient
from wedding_timeline.adapters.sanity_timeline_source import SanityTimelineEventSource
from wedding_timeline.adapters.supabase_guest_photo_repository import (
    SupabaseGuestPhotoRepository,
)
from wedding_timeline.adapters.supabase_realtime_feed import SupabaseRealtimePhotoFeed
from wedding_timeline.config import Settings
from wedding_timeline.services.live_timeline import LiveTimelineService
from wedding_timeline.services.media_events import MediaEventBus
from wedding_timeline.services.photo_counts import PhotoCountService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    media_events: MediaEventBus
    timeline_service: LiveTimelineService
    photo_count_service: PhotoCountService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_key
    )
    sanity_client = HttpxSanityClient.create(
        project_id=resolved_settings.sanity_project_id,
        dataset=resolved_settings.sanity_dataset,
        api_version=resolved_settings.sanity_api_version,
        token=resolved_settings.sanity_token,
        use_cdn=resolved_settings.sanity_use_cdn,
    )
    event_source = SanityTimelineEventSource(sanity_client)
    photo_repository = SupabaseGuestPhotoRepository(
        supabase_client, default_bucket=resolved_settings.guest_photo_bucket
    )
    change_feed = SupabaseRealtimePhotoFeed(
        supabase_url=resolved_settings.supabase_url,
        supabase_key=resolved_settings.supabase_key,
    )
    media_events = MediaEventBus()
    timeline_service = LiveTimelineService(
        event_source=event_source,
        photo_repository=photo_repository,
        change_feed=change_feed,
        media_events=media_events,
        update_interval_seconds=resolved_settings.timeline_update_interval_seconds,
    )
    photo_count_service = PhotoCountService(
        event_source=event_source,
        count_repository=photo_repository,
        writer=event_source,
    )

    async def close_resources() -> None:
        await sanity_client.close()

    return AppContainer(
        settings=resolved_settings,
        media_events=media_events,
        timeline_service=timeline_service,
        photo_count_service=photo_count_service,
        close_resources=close_resources,
    )
