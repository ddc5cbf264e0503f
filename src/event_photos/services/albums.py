"""Read paths for event albums."""

from dataclasses import dataclass

from event_photos.domain.errors import NotFoundError
from event_photos.domain.events import Event
from event_photos.domain.photos import Album, UploadType
from event_photos.services.events import EventRepository, PhotoRepository


@dataclass(frozen=True)
class EventOverview:
    """An event together with its album."""

    event: Event
    album: Album

    @property
    def upload_enabled(self) -> bool:
        return self.event.uploads_enabled


@dataclass
class AlbumService:
    """Serve event details and photo listings."""

    event_repository: EventRepository
    photo_repository: PhotoRepository

    def get_album(self, event_id: str) -> Album:
        """Return preloaded and approved guest photos for an event.

        The event itself is not looked up, so photos with a dangling event id
        are still listed.
        """
        return Album(
            preloaded_photos=self.photo_repository.list_photos(
                event_id, UploadType.PRELOADED
            ),
            guest_photos=self.photo_repository.list_photos(
                event_id, UploadType.GUEST, approved=True
            ),
        )

    def get_event_overview(self, event_id: str) -> EventOverview:
        """Return the event and its album, raising when the event is unknown."""
        event = self.event_repository.get_event(event_id)
        if event is None:
            raise NotFoundError(event_id)
        return EventOverview(event=event, album=self.get_album(event_id))
