"""Live timeline state calculation."""

import math
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime, timedelta

from wedding_timeline.domain.timeline import (
    EventStatus,
    GuestPhoto,
    LiveTimelineData,
    TimelineEvent,
    TimelineEventState,
)

MAX_PROGRESS = 100.0


def calculate_timeline_state(
    events: Sequence[TimelineEvent],
    current_time: datetime | None = None,
    photos_by_event: Mapping[str, list[GuestPhoto]] | None = None,
) -> LiveTimelineData:
    """Calculate the full live timeline state for events at a given moment."""
    now = current_time or datetime.now(tz=UTC)
    photos = photos_by_event or {}
    if not events:
        return LiveTimelineData(
            events=[],
            current_event=None,
            next_event=None,
            overall_progress=0.0,
            total_events=0,
            completed_events=0,
            current_time=now,
            wedding_start_time=now,
            wedding_end_time=now,
        )

    sorted_events = sorted(
        events, key=lambda event: (event.display_order, event.start_time)
    )
    wedding_start = sorted_events[0].start_time
    wedding_end = wedding_start
    for event in sorted_events:
        wedding_end = max(wedding_end, resolve_end_time(event))

    states: list[TimelineEventState] = []
    current_event: TimelineEventState | None = None
    next_event: TimelineEventState | None = None
    completed_events = 0

    for event in sorted_events:
        status = get_event_status(event, now)
        is_next = status is EventStatus.UPCOMING and next_event is None
        state = _build_state(
            event,
            status,
            now,
            is_next=is_next,
            guest_photos=list(photos.get(event.id, [])),
        )
        if status is EventStatus.COMPLETED:
            completed_events += 1
        elif status is EventStatus.HAPPENING_NOW:
            if current_event is None:
                current_event = state
        elif state.is_next:
            next_event = state
        states.append(state)

    return LiveTimelineData(
        events=states,
        current_event=current_event,
        next_event=next_event,
        overall_progress=calculate_overall_progress(wedding_start, wedding_end, now),
        total_events=len(sorted_events),
        completed_events=completed_events,
        current_time=now,
        wedding_start_time=wedding_start,
        wedding_end_time=wedding_end,
    )


def get_event_status(
    event: TimelineEvent, current_time: datetime | None = None
) -> EventStatus:
    """Return the status of a single event at the given time."""
    now = current_time or datetime.now(tz=UTC)
    if now < event.start_time:
        return EventStatus.UPCOMING
    if now > resolve_end_time(event):
        return EventStatus.COMPLETED
    return EventStatus.HAPPENING_NOW


def resolve_end_time(event: TimelineEvent) -> datetime:
    """Return the explicit end time, or start plus the estimated duration."""
    if event.end_time is not None:
        return event.end_time
    if event.estimated_duration_minutes > 0:
        return event.start_time + timedelta(minutes=event.estimated_duration_minutes)
    return event.start_time


def calculate_overall_progress(
    start: datetime, end: datetime, current_time: datetime
) -> float:
    """Return the elapsed share of the wedding day as a percentage."""
    if start >= end:
        return MAX_PROGRESS
    if current_time < start:
        return 0.0
    if current_time > end:
        return MAX_PROGRESS
    total_minutes = _whole_minutes(end - start)
    if total_minutes <= 0:
        return MAX_PROGRESS
    elapsed_minutes = _whole_minutes(current_time - start)
    return _clamp_percentage(elapsed_minutes / total_minutes * 100)


def _build_state(
    event: TimelineEvent,
    status: EventStatus,
    now: datetime,
    *,
    is_next: bool,
    guest_photos: list[GuestPhoto],
) -> TimelineEventState:
    time_until_start = None
    time_remaining = None
    progress = None

    if status is EventStatus.UPCOMING:
        seconds_until = (event.start_time - now).total_seconds()
        time_until_start = max(0, math.ceil(seconds_until / 60))

    if status is EventStatus.HAPPENING_NOW:
        end = resolve_end_time(event)
        time_remaining = max(0, _whole_minutes(end - now))
        total_duration = _whole_minutes(end - event.start_time)
        if total_duration > 0:
            elapsed = total_duration - time_remaining
            progress = _clamp_percentage(elapsed / total_duration * 100)

    return TimelineEventState(
        event=event,
        status=status,
        time_until_start_minutes=time_until_start,
        time_remaining_minutes=time_remaining,
        progress_percentage=progress,
        is_next=is_next,
        guest_photos=guest_photos,
    )


def _whole_minutes(delta: timedelta) -> int:
    """Difference in minutes, truncated toward zero."""
    return math.trunc(delta.total_seconds() / 60)


def _clamp_percentage(value: float) -> float:
    return min(MAX_PROGRESS, max(0.0, value))
