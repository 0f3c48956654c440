"""Maintenance of the denormalized guest photo counters."""

import logging
from dataclasses import dataclass
from typing import Protocol

from wedding_timeline.services.live_timeline import TimelineEventSource

logger = logging.getLogger(__name__)


class PhotoCountRepository(Protocol):
    """Aggregate queries over guest photos."""

    def count_approved_by_event(self) -> dict[str, int]:
        """Return approved, non-deleted photo counts keyed by event id."""


class PhotoCountWriter(Protocol):
    """Writes photo counters back to the CMS."""

    async def set_guest_photo_counts(self, counts: dict[str, int]) -> None:
        """Persist the counter for each event id."""


@dataclass
class PhotoCountService:
    """Recomputes guestPhotosCount for every active timeline event."""

    event_source: TimelineEventSource
    count_repository: PhotoCountRepository
    writer: PhotoCountWriter

    async def backfill(self) -> dict[str, int]:
        """Write the current approved photo count to each event."""
        events = await self.event_source.fetch_events()
        approved = self.count_repository.count_approved_by_event()
        counts = {event.id: approved.get(event.id, 0) for event in events}
        orphaned = set(approved) - set(counts)
        if orphaned:
            logger.warning(
                "Skipping photo counts for %d unknown events", len(orphaned)
            )
        if counts:
            await self.writer.set_guest_photo_counts(counts)
        logger.info("Backfilled photo counts for %d events", len(counts))
        return counts
