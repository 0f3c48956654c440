"""Domain models for the live wedding-day timeline."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class EventStatus(StrEnum):
    """Lifecycle state of a timeline event at a given instant."""

    UPCOMING = "upcoming"
    HAPPENING_NOW = "happening_now"
    COMPLETED = "completed"


class ModerationStatus(StrEnum):
    """Moderation state of a guest upload."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class TimelineEvent:
    """Scheduled wedding-day activity as edited in the CMS."""

    id: str
    title: str
    start_time: datetime
    description: str | None = None
    end_time: datetime | None = None
    estimated_duration_minutes: int = 0
    display_order: int = 0
    allow_photo_uploads: bool = False
    is_highlight: bool = False
    guest_photos_count: int = 0
    location: str | None = None
    event_type: str | None = None
    photo_upload_prompt: str | None = None
    show_on_tv_display: bool = True


@dataclass(frozen=True)
class GuestPhoto:
    """Approved guest upload attached to a timeline event."""

    id: str
    timeline_event_id: str
    public_url: str
    guest_name: str
    uploaded_at: datetime
    is_video: bool = False
    moderation_status: ModerationStatus = ModerationStatus.APPROVED
    storage_path: str | None = None
    upload_phase: str | None = None
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True)
class TimelineEventState:
    """Event wrapped with its derived status and figures."""

    event: TimelineEvent
    status: EventStatus
    time_until_start_minutes: int | None = None
    time_remaining_minutes: int | None = None
    progress_percentage: float | None = None
    is_next: bool = False
    guest_photos: list[GuestPhoto] = field(default_factory=list)


@dataclass(frozen=True)
class LiveTimelineData:
    """Snapshot of the whole timeline at one calculation instant."""

    events: list[TimelineEventState]
    current_event: TimelineEventState | None
    next_event: TimelineEventState | None
    overall_progress: float
    total_events: int
    completed_events: int
    current_time: datetime
    wedding_start_time: datetime
    wedding_end_time: datetime


@dataclass(frozen=True)
class PhotoChange:
    """Row change delivered by the realtime photo feed."""

    change_type: str
    record: dict[str, object]
    old_record: dict[str, object] | None = None
