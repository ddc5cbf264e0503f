"""Domain models for photo-sharing events."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

WELCOME_TEXT_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 200
UPLOAD_LIMIT_MIN = 50
UPLOAD_LIMIT_MAX = 5000


class ServiceType(str, Enum):
    """Which guest-facing features an event offers."""

    BOTH = "both"
    VIEW_ALBUM = "viewalbum"
    UPLOAD_PICS = "uploadpics"


class EventStatus(str, Enum):
    """Event lifecycle status. The only transition is active -> disabled."""

    ACTIVE = "active"
    DISABLED = "disabled"


@dataclass(frozen=True)
class MediaRef:
    """Reference to an image held by the media store."""

    media_id: str
    url: str


@dataclass(frozen=True)
class Event:
    """A finalized event configuration."""

    event_id: str
    welcome_text: str
    description: str
    background_image: MediaRef
    service_type: ServiceType
    upload_limit: int
    status: EventStatus
    created_by: str
    created_at: datetime
    updated_at: datetime

    @property
    def uploads_enabled(self) -> bool:
        """Return true when guests may upload to this event."""
        return (
            self.status == EventStatus.ACTIVE
            and self.service_type != ServiceType.VIEW_ALBUM
        )
