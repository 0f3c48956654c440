"""Live timeline state holder with polling and realtime photo merge."""

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Protocol

from wedding_timeline.domain.timeline import (
    GuestPhoto,
    LiveTimelineData,
    ModerationStatus,
    PhotoChange,
    TimelineEvent,
)
from wedding_timeline.services.media_events import MEDIA_UPLOADED, MediaEventBus
from wedding_timeline.services.timeline import calculate_timeline_state

REFRESH_ERROR_MESSAGE = "Could not load the timeline right now. Please try again."
DEFAULT_UPDATE_INTERVAL_SECONDS = 30.0

logger = logging.getLogger(__name__)


class TimelineEventSource(Protocol):
    """Source of scheduled timeline events."""

    async def fetch_events(self) -> list[TimelineEvent]:
        """Return all active timeline events."""


class GuestPhotoRepository(Protocol):
    """Read access to approved guest photos."""

    def get_approved_photos_by_event(
        self, event_ids: list[str]
    ) -> dict[str, list[GuestPhoto]]:
        """Return approved photos grouped by timeline event id."""

    def build_photo(self, record: dict[str, object]) -> GuestPhoto:
        """Build a photo, including its public URL, from a raw table row."""


class PhotoChangeFeed(Protocol):
    """Producer of realtime guest photo row changes."""

    async def subscribe(self, queue: asyncio.Queue[PhotoChange]) -> None:
        """Start delivering changes into the queue."""

    async def close(self) -> None:
        """Stop delivering changes and release the connection."""


@dataclass(frozen=True)
class TimelineSnapshot:
    """Consistent view of the live timeline for consumers."""

    data: LiveTimelineData | None
    error: str | None
    is_loading: bool
    last_updated_at: datetime | None


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class LiveTimelineService:
    """Keeps timeline state current for one consumer view."""

    event_source: TimelineEventSource
    photo_repository: GuestPhotoRepository
    change_feed: PhotoChangeFeed
    media_events: MediaEventBus
    update_interval_seconds: float = DEFAULT_UPDATE_INTERVAL_SECONDS
    clock: Callable[[], datetime] = _utcnow
    events: list[TimelineEvent] = field(default_factory=list)
    photos_by_event: dict[str, list[GuestPhoto]] = field(default_factory=dict)
    data: LiveTimelineData | None = None
    error: str | None = None
    is_loading: bool = False
    last_updated_at: datetime | None = None
    _tasks: list[asyncio.Task[None]] = field(default_factory=list)
    _unsubscribe: Callable[[], None] | None = None
    _stopped: bool = False

    @property
    def is_running(self) -> bool:
        """Whether background updates are active."""
        return bool(self._tasks)

    async def refresh(self) -> None:
        """Fetch events and photos, then recalculate state."""
        self.is_loading = True
        self.error = None
        try:
            events = await self.event_source.fetch_events()
            photos = self._fetch_photos(events)
        except Exception:
            logger.exception("Failed to fetch timeline events")
            if not self._stopped:
                self.error = REFRESH_ERROR_MESSAGE
            return
        finally:
            self.is_loading = False

        if self._stopped:
            logger.info("Discarding timeline refresh after stop")
            return
        self.events = events
        self.photos_by_event = photos
        self.recalculate()
        self.last_updated_at = self.clock()

    def recalculate(self) -> LiveTimelineData | None:
        """Recompute derived state from the held events and photos."""
        if not self.events:
            self.data = None
            return None
        self.data = calculate_timeline_state(
            self.events, self.clock(), self.photos_by_event
        )
        return self.data

    def apply_photo_change(self, change: PhotoChange) -> bool:
        """Merge a realtime photo change and report whether it was applied."""
        record = change.record
        event_id = record.get("timeline_event_id")
        if not event_id:
            return False
        if record.get("moderation_status") != ModerationStatus.APPROVED:
            return False
        old_record = change.old_record or {}
        if (
            change.change_type == "UPDATE"
            and old_record.get("moderation_status") == ModerationStatus.APPROVED
        ):
            return False

        photo = self.photo_repository.build_photo(record)
        event_id = str(event_id)
        existing = self.photos_by_event.get(event_id, [])
        already_known = any(item.id == photo.id for item in existing)
        if already_known:
            updated = [photo if item.id == photo.id else item for item in existing]
        else:
            updated = [photo, *existing]
        self.photos_by_event = {**self.photos_by_event, event_id: updated}

        if not already_known:
            self.events = [
                replace(event, guest_photos_count=event.guest_photos_count + 1)
                if event.id == event_id
                else event
                for event in self.events
            ]
        self.recalculate()
        return True

    def snapshot(self, tv_only: bool = False) -> TimelineSnapshot:
        """Return the current state as one consistent value.

        With ``tv_only`` the state is recalculated over events shown on the
        TV display, so current and next events are never hidden ones.
        """
        data = self.data
        if tv_only and data is not None:
            visible = [event for event in self.events if event.show_on_tv_display]
            data = calculate_timeline_state(
                visible, data.current_time, self.photos_by_event
            )
        return TimelineSnapshot(
            data=data,
            error=self.error,
            is_loading=self.is_loading,
            last_updated_at=self.last_updated_at,
        )

    async def start(self) -> None:
        """Begin background refresh, polling and realtime merging."""
        if self._tasks:
            return
        self._stopped = False
        queue: asyncio.Queue[PhotoChange] = asyncio.Queue()
        self._unsubscribe = self.media_events.subscribe(
            MEDIA_UPLOADED, self._handle_media_uploaded
        )
        try:
            await self.change_feed.subscribe(queue)
        except Exception:
            logger.exception("Failed to subscribe to realtime photo changes")
        self._tasks = [
            asyncio.create_task(self.refresh()),
            asyncio.create_task(self._poll()),
            asyncio.create_task(self._consume_changes(queue)),
        ]

    async def stop(self) -> None:
        """Cancel background work and release subscriptions."""
        self._stopped = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self.change_feed.close()

    def _fetch_photos(self, events: list[TimelineEvent]) -> dict[str, list[GuestPhoto]]:
        event_ids = [event.id for event in events]
        if not event_ids:
            return {}
        try:
            return self.photo_repository.get_approved_photos_by_event(event_ids)
        except Exception:
            logger.exception("Failed to fetch timeline event photos")
            return {}

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self.update_interval_seconds)
            self.recalculate()

    async def _consume_changes(self, queue: asyncio.Queue[PhotoChange]) -> None:
        while True:
            change = await queue.get()
            try:
                self.apply_photo_change(change)
            except Exception:
                logger.exception("Failed to merge realtime photo change")
            finally:
                queue.task_done()

    async def _handle_media_uploaded(self, _payload: dict[str, object] | None) -> None:
        await self.refresh()
