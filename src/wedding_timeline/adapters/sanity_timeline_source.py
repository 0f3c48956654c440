"""Sanity-backed timeline event source."""

import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime

from wedding_timeline.adapters.sanity_client import SanityClient
from wedding_timeline.domain.timeline import TimelineEvent
from wedding_timeline.services.live_timeline import TimelineEventSource
from wedding_timeline.services.photo_counts import PhotoCountWriter

TIMELINE_EVENTS_QUERY = """
*[_type == "weddingTimelineEvent" && isActive == true]
  | order(displayOrder asc, startTime asc) {
    _id,
    title,
    description,
    startTime,
    endTime,
    estimatedDuration,
    location,
    eventType,
    allowPhotoUploads,
    photoUploadPrompt,
    isHighlight,
    showOnTVDisplay,
    displayOrder,
    guestPhotosCount
  }
"""

logger = logging.getLogger(__name__)


@dataclass
class SanityTimelineEventSource(TimelineEventSource, PhotoCountWriter):
    """Reads timeline events from Sanity and patches their counters."""

    client: SanityClient

    async def fetch_events(self) -> list[TimelineEvent]:
        """Return all active timeline events."""
        result = await self.client.query(TIMELINE_EVENTS_QUERY)
        if not isinstance(result, list):
            raise RuntimeError("Unexpected timeline events payload")
        events = []
        for document in result:
            if not isinstance(document, dict) or not document.get("startTime"):
                logger.warning("Skipping timeline document without a start time")
                continue
            event = parse_timeline_event(document)
            if event.end_time is not None and event.end_time < event.start_time:
                logger.warning("Timeline event %s ends before it starts", event.id)
            events.append(event)
        return events

    async def set_guest_photo_counts(self, counts: dict[str, int]) -> None:
        """Patch guestPhotosCount on each event in one transaction."""
        mutations: list[dict[str, object]] = [
            {"patch": {"id": event_id, "set": {"guestPhotosCount": count}}}
            for event_id, count in counts.items()
        ]
        if mutations:
            await self.client.mutate(mutations)


def parse_timeline_event(document: dict[str, object]) -> TimelineEvent:
    """Convert a Sanity document into a timeline event."""
    end_raw = document.get("endTime")
    return TimelineEvent(
        id=str(document["_id"]),
        title=str(document.get("title") or ""),
        description=_optional_str(document.get("description")),
        start_time=parse_timestamp(str(document["startTime"])),
        end_time=parse_timestamp(end_raw) if isinstance(end_raw, str) else None,
        estimated_duration_minutes=_safe_int(document.get("estimatedDuration")),
        display_order=_safe_int(document.get("displayOrder")),
        allow_photo_uploads=bool(document.get("allowPhotoUploads")),
        is_highlight=bool(document.get("isHighlight")),
        guest_photos_count=_safe_int(document.get("guestPhotosCount")),
        location=_optional_str(document.get("location")),
        event_type=_optional_str(document.get("eventType")),
        photo_upload_prompt=_optional_str(document.get("photoUploadPrompt")),
        show_on_tv_display=document.get("showOnTVDisplay") is not False,
    )


def parse_timestamp(raw: str) -> datetime:
    """Parse an ISO-8601 timestamp, assuming UTC when no offset is given."""
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def _safe_int(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return 0


def _optional_str(value: object) -> str | None:
    return str(value) if value else None
