"""Persistence interfaces for events and their photos."""

from typing import Protocol

from event_photos.domain.events import Event, EventStatus
from event_photos.domain.photos import Photo, UploadType


class EventRepository(Protocol):
    """Persistence interface for events."""

    def create_event(self, event: Event) -> None:
        """Persist a finalized event."""

    def get_event(self, event_id: str) -> Event | None:
        """Return an event by id, if present."""

    def update_status(self, event_id: str, status: EventStatus) -> None:
        """Change the status of an event."""


class PhotoRepository(Protocol):
    """Persistence interface for append-only photo records."""

    def create_photo(self, photo: Photo) -> None:
        """Persist a single photo."""

    def create_photos(self, photos: list[Photo]) -> None:
        """Persist a batch of photos."""

    def list_photos(
        self, event_id: str, upload_type: UploadType, approved: bool | None = None
    ) -> list[Photo]:
        """Return photos for an event, newest first."""

    def count_by_origin(
        self, event_id: str, upload_type: UploadType, origin_address: str
    ) -> int:
        """Count photos of a type uploaded to an event from one address."""
