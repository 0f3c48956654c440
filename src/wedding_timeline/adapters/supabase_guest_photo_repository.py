"""Supabase-backed guest photo repository."""

from collections import Counter
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from wedding_timeline.domain.timeline import GuestPhoto, ModerationStatus
from wedding_timeline.services.live_timeline import GuestPhotoRepository
from wedding_timeline.services.photo_counts import PhotoCountRepository

GUEST_PHOTOS_TABLE = "guest_photos"
DEFAULT_GUEST_PHOTO_BUCKET = "wedding-photos"

_PHOTO_COLUMNS = (
    "id, guest_name, upload_phase, storage_path, storage_bucket, width, height, "
    "is_video, uploaded_at, timeline_event_id, moderation_status"
)


@dataclass
class SupabaseGuestPhotoRepository(GuestPhotoRepository, PhotoCountRepository):
    """Supabase implementation for guest photo reads."""

    client: Client
    default_bucket: str = DEFAULT_GUEST_PHOTO_BUCKET

    def get_approved_photos_by_event(
        self, event_ids: list[str]
    ) -> dict[str, list[GuestPhoto]]:
        """Return approved, non-deleted photos grouped by event, newest first."""
        if not event_ids:
            return {}
        response = (
            self.client.table(GUEST_PHOTOS_TABLE)
            .select(_PHOTO_COLUMNS)
            .eq("moderation_status", ModerationStatus.APPROVED.value)
            .eq("is_deleted", False)
            .in_("timeline_event_id", event_ids)
            .order("uploaded_at", desc=True)
            .execute()
        )
        grouped: dict[str, list[GuestPhoto]] = {event_id: [] for event_id in event_ids}
        for row in response.data or []:
            event_id = row.get("timeline_event_id")
            if not event_id:
                continue
            grouped.setdefault(str(event_id), []).append(self.build_photo(row))
        return grouped

    def count_approved_by_event(self) -> dict[str, int]:
        """Return approved, non-deleted photo counts keyed by event id."""
        response = (
            self.client.table(GUEST_PHOTOS_TABLE)
            .select("timeline_event_id")
            .eq("moderation_status", ModerationStatus.APPROVED.value)
            .eq("is_deleted", False)
            .execute()
        )
        counts = Counter(
            str(row["timeline_event_id"])
            for row in response.data or []
            if row.get("timeline_event_id")
        )
        return dict(counts)

    def build_photo(self, record: dict[str, object]) -> GuestPhoto:
        """Build a photo with its public storage URL from a table row."""
        storage_path = str(record.get("storage_path") or "")
        bucket = str(record.get("storage_bucket") or self.default_bucket)
        return GuestPhoto(
            id=str(record["id"]),
            timeline_event_id=str(record["timeline_event_id"]),
            public_url=self.public_url(storage_path, bucket),
            guest_name=str(record.get("guest_name") or ""),
            uploaded_at=_parse_uploaded_at(record.get("uploaded_at")),
            is_video=bool(record.get("is_video")),
            moderation_status=ModerationStatus(
                record.get("moderation_status") or ModerationStatus.APPROVED
            ),
            storage_path=storage_path,
            upload_phase=_optional_str(record.get("upload_phase")),
            width=_optional_int(record.get("width")),
            height=_optional_int(record.get("height")),
        )

    def public_url(self, storage_path: str, bucket: str | None = None) -> str:
        """Return the public URL of an object in Supabase Storage."""
        return self.client.storage.from_(bucket or self.default_bucket).get_public_url(
            storage_path
        )


def _parse_uploaded_at(raw: object) -> datetime:
    if isinstance(raw, str) and raw:
        parsed = datetime.fromisoformat(raw)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.min.replace(tzinfo=UTC)


def _optional_int(value: object) -> int | None:
    return int(value) if isinstance(value, int | float) else None


def _optional_str(value: object) -> str | None:
    return str(value) if value else None
