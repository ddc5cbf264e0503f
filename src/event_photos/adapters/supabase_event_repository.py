"""Supabase-backed event repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from event_photos.domain.errors import UpstreamError
from event_photos.domain.events import Event, EventStatus, MediaRef, ServiceType
from event_photos.services.events import EventRepository

_EVENT_COLUMNS = (
    "event_id, welcome_text, description, background_image_id, "
    "background_image_url, service_type, upload_limit, status, created_by, "
    "created_at, updated_at"
)


@dataclass
class SupabaseEventRepository(EventRepository):
    """Supabase implementation for event persistence."""

    client: Client

    def create_event(self, event: Event) -> None:
        """Insert an event row."""
        response = (
            self.client.table("events")
            .insert(
                {
                    "event_id": event.event_id,
                    "welcome_text": event.welcome_text,
                    "description": event.description,
                    "background_image_id": event.background_image.media_id,
                    "background_image_url": event.background_image.url,
                    "service_type": event.service_type.value,
                    "upload_limit": event.upload_limit,
                    "status": event.status.value,
                    "created_by": event.created_by,
                    "created_at": event.created_at.isoformat(),
                    "updated_at": event.updated_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise UpstreamError("Failed to create event")

    def get_event(self, event_id: str) -> Event | None:
        """Return an event by id, if present."""
        response = (
            self.client.table("events")
            .select(_EVENT_COLUMNS)
            .eq("event_id", event_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def update_status(self, event_id: str, status: EventStatus) -> None:
        """Update the status of an event."""
        self.client.table("events").update(
            {
                "status": status.value,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).eq("event_id", event_id).execute()


def _parse_row(row: dict[str, object]) -> Event:
    return Event(
        event_id=str(row["event_id"]),
        welcome_text=str(row["welcome_text"]),
        description=str(row["description"]),
        background_image=MediaRef(
            media_id=str(row["background_image_id"]),
            url=str(row["background_image_url"]),
        ),
        service_type=ServiceType(row["service_type"]),
        upload_limit=int(row["upload_limit"]),
        status=EventStatus(row["status"]),
        created_by=str(row["created_by"]),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
    )
