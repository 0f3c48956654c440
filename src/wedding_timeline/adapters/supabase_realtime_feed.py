"""Supabase realtime feed of guest photo changes."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from supabase import AsyncClient, acreate_client

from wedding_timeline.domain.timeline import PhotoChange
from wedding_timeline.services.live_timeline import PhotoChangeFeed

CHANNEL_NAME = "live-timeline-guest-photos"
CHANGE_FILTER = "timeline_event_id=not.is.null"
WATCHED_CHANGES = ("INSERT", "UPDATE")

logger = logging.getLogger(__name__)


@dataclass
class SupabaseRealtimePhotoFeed(PhotoChangeFeed):
    """Pushes guest_photos inserts and updates onto a queue."""

    supabase_url: str
    supabase_key: str
    client: AsyncClient | None = None
    channel: object | None = None

    async def subscribe(self, queue: asyncio.Queue[PhotoChange]) -> None:
        """Open the realtime channel and forward row changes to the queue."""
        if self.client is None:
            self.client = await acreate_client(self.supabase_url, self.supabase_key)
        channel = self.client.channel(CHANNEL_NAME)
        for change_type in WATCHED_CHANGES:
            channel.on_postgres_changes(
                change_type,
                schema="public",
                table="guest_photos",
                filter=CHANGE_FILTER,
                callback=_forwarder(change_type, queue),
            )
        await channel.subscribe()
        self.channel = channel
        logger.info("Subscribed to realtime channel %s", CHANNEL_NAME)

    async def close(self) -> None:
        """Remove the realtime channel and close the realtime socket."""
        if self.client is None:
            return
        if self.channel is not None:
            await self.client.remove_channel(self.channel)
            self.channel = None
        await self.client.realtime.close()
        self.client = None
        logger.info("Closed realtime channel %s", CHANNEL_NAME)


def _forwarder(
    change_type: str, queue: asyncio.Queue[PhotoChange]
) -> Callable[[dict[str, object]], None]:
    def forward(payload: dict[str, object]) -> None:
        change = parse_change_payload(change_type, payload)
        if change is None:
            logger.warning("Ignoring malformed realtime payload")
            return
        queue.put_nowait(change)

    return forward


def parse_change_payload(
    change_type: str, payload: dict[str, object]
) -> PhotoChange | None:
    """Convert a realtime postgres_changes payload into a PhotoChange."""
    data = payload.get("data", payload)
    if not isinstance(data, dict):
        return None
    record = data.get("record", data.get("new"))
    if not isinstance(record, dict):
        return None
    old_record = data.get("old_record", data.get("old"))
    return PhotoChange(
        change_type=str(data.get("type") or change_type),
        record=record,
        old_record=old_record if isinstance(old_record, dict) and old_record else None,
    )
