"""Response models for the timeline API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from wedding_timeline.domain.timeline import EventStatus, ModerationStatus


class _FromDomain(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class GuestPhotoModel(_FromDomain):
    """Guest photo attached to an event."""

    id: str
    timeline_event_id: str
    public_url: str
    guest_name: str
    uploaded_at: datetime
    is_video: bool
    moderation_status: ModerationStatus
    upload_phase: str | None = None
    width: int | None = None
    height: int | None = None


class TimelineEventModel(_FromDomain):
    """Scheduled timeline event."""

    id: str
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime | None = None
    estimated_duration_minutes: int
    display_order: int
    allow_photo_uploads: bool
    is_highlight: bool
    guest_photos_count: int
    location: str | None = None
    event_type: str | None = None
    photo_upload_prompt: str | None = None
    show_on_tv_display: bool


class TimelineEventStateModel(_FromDomain):
    """Event with its derived live status."""

    event: TimelineEventModel
    status: EventStatus
    time_until_start_minutes: int | None = None
    time_remaining_minutes: int | None = None
    progress_percentage: float | None = Field(default=None, ge=0.0, le=100.0)
    is_next: bool
    guest_photos: list[GuestPhotoModel]


class LiveTimelineModel(_FromDomain):
    """Aggregate live timeline snapshot."""

    events: list[TimelineEventStateModel]
    current_event: TimelineEventStateModel | None = None
    next_event: TimelineEventStateModel | None = None
    overall_progress: float = Field(ge=0.0, le=100.0)
    total_events: int
    completed_events: int
    current_time: datetime
    wedding_start_time: datetime
    wedding_end_time: datetime


class TimelineResponse(_FromDomain):
    """Live timeline plus loading and error state."""

    data: LiveTimelineModel | None = None
    error: str | None = None
    is_loading: bool = False
    last_updated_at: datetime | None = None
